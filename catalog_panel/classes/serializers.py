import re

from rest_framework import serializers

from .models import ClassSession, ClassTemplate, RosterEntry

HHMM_RE = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


def validate_hhmm(value):
    if not HHMM_RE.match(value or ''):
        raise serializers.ValidationError('Time must be in HH:MM 24h format')
    return value


class RefSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()


class UserRefSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(allow_null=True)


class MembershipPlanRefSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()


class ClassTemplateSerializer(serializers.ModelSerializer):
    location = RefSerializer(read_only=True)
    primary_instructor = UserRefSerializer(source='primary_instructor_user', read_only=True, allow_null=True)
    required_plans = MembershipPlanRefSerializer(many=True, read_only=True)

    class Meta:
        model = ClassTemplate
        fields = [
            'id', 'location_id', 'location', 'room', 'name', 'description', 'program',
            'skill_level', 'tags', 'start_date', 'end_date', 'days_of_week',
            'start_time', 'end_time', 'max_participants', 'access_type',
            'drop_in_price_cents', 'currency', 'min_age', 'max_age', 'age_label',
            'members_only', 'prerequisite_label', 'required_plans',
            'primary_instructor_user_id', 'primary_instructor', 'instructor_display_name',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ClassTemplateInputSerializer(serializers.Serializer):
    location_id = serializers.UUIDField(required=False)
    room = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    name = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    program = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    skill_level = serializers.ChoiceField(choices=ClassTemplate.SkillLevel.choices, required=False)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False, allow_null=True)
    days_of_week = serializers.ListField(
        child=serializers.IntegerField(min_value=1, max_value=7),
        required=False,
    )
    start_time = serializers.CharField(max_length=5, required=False, validators=[validate_hhmm])
    end_time = serializers.CharField(max_length=5, required=False, validators=[validate_hhmm])
    max_participants = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    access_type = serializers.ChoiceField(choices=ClassTemplate.AccessType.choices, required=False)
    drop_in_price_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    currency = serializers.CharField(max_length=3, required=False)
    min_age = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    max_age = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    age_label = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    members_only = serializers.BooleanField(required=False)
    prerequisite_label = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)
    required_plan_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
    primary_instructor_user_id = serializers.IntegerField(required=False, allow_null=True)
    instructor_display_name = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(required=False)

    def validate_days_of_week(self, value):
        return sorted(set(value))

    def validate(self, attrs):
        min_age, max_age = attrs.get('min_age'), attrs.get('max_age')
        if min_age is not None and max_age is not None and max_age < min_age:
            raise serializers.ValidationError({'max_age': 'Must be greater than or equal to min_age'})
        return attrs


class ClassSessionSerializer(serializers.ModelSerializer):
    """Сессия в календаре (roster_count приходит из annotate)."""

    location = RefSerializer(read_only=True)
    template = serializers.SerializerMethodField()
    instructor = UserRefSerializer(source='instructor_user', read_only=True, allow_null=True)
    roster_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = ClassSession
        fields = [
            'id', 'template_id', 'template', 'start_datetime', 'end_datetime',
            'location_id', 'location', 'room', 'max_participants',
            'instructor_user_id', 'instructor', 'instructor_display_name',
            'status', 'cancel_reason', 'roster_count', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_template(self, obj):
        template = obj.template
        return {
            'id': template.pk,
            'name': template.name,
            'program': template.program,
            'skill_level': template.skill_level,
            'access_type': template.access_type,
        }


class RosterCustomerSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    first_name = serializers.CharField()
    last_name = serializers.CharField()
    primary_email = serializers.EmailField(allow_null=True)
    primary_phone = serializers.CharField(allow_null=True)


class RosterEntrySerializer(serializers.ModelSerializer):
    customer = RosterCustomerSerializer(read_only=True)

    class Meta:
        model = RosterEntry
        fields = [
            'id', 'session_id', 'customer_id', 'customer', 'status', 'note',
            'created_by_id', 'updated_by_id', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ClassSessionDetailSerializer(ClassSessionSerializer):
    """Сессия с условиями доступа шаблона и списком участников."""

    roster = RosterEntrySerializer(source='roster_entries', many=True, read_only=True)

    class Meta(ClassSessionSerializer.Meta):
        fields = [f for f in ClassSessionSerializer.Meta.fields if f != 'roster_count'] + ['roster']
        read_only_fields = fields

    def get_template(self, obj):
        data = super().get_template(obj)
        template = obj.template
        data.update({
            'min_age': template.min_age,
            'max_age': template.max_age,
            'age_label': template.age_label,
            'members_only': template.members_only,
            'prerequisite_label': template.prerequisite_label,
            'required_plans': MembershipPlanRefSerializer(template.required_plans.all(), many=True).data,
        })
        return data


class ClassSessionUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ClassSession.Status.choices, required=False)
    cancel_reason = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    instructor_user_id = serializers.IntegerField(required=False, allow_null=True)
    instructor_display_name = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)
    room = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    max_participants = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class NewCustomerInputSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    email = serializers.EmailField(required=False, allow_null=True)
    phone = serializers.CharField(max_length=40, required=False, allow_null=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)


class AddParticipantInputSerializer(serializers.Serializer):
    """Либо customer_id существующего клиента, либо new_customer."""

    customer_id = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=RosterEntry.Status.choices, required=False)
    new_customer = NewCustomerInputSerializer(required=False)

    def validate(self, attrs):
        if not attrs.get('customer_id') and not attrs.get('new_customer'):
            raise serializers.ValidationError('Invalid participant payload')
        return attrs


class UpdateParticipantInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RosterEntry.Status.choices)
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True)
