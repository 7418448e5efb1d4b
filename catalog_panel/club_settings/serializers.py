from rest_framework import serializers

from .models import Location, MembershipPlan, StatusReason


class LocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Location
        fields = [
            'id', 'name', 'code',
            'address_line1', 'address_line2', 'city', 'state', 'postal_code', 'country',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class LocationInputSerializer(serializers.Serializer):
    """Вход для create/update; обязательность name/code проверяет сервис"""

    name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    code = serializers.CharField(required=False, allow_blank=True, max_length=32)
    address_line1 = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    address_line2 = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    city = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=120)
    state = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=120)
    postal_code = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=20)
    country = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=2)
    is_active = serializers.BooleanField(required=False)


class MembershipPlanSerializer(serializers.ModelSerializer):
    location_ids = serializers.PrimaryKeyRelatedField(source='locations', many=True, read_only=True)

    class Meta:
        model = MembershipPlan
        fields = [
            'id', 'name', 'description', 'cadence', 'price_cents', 'currency',
            'term_type', 'term_months',
            'has_intro_period', 'intro_months', 'intro_price_cents',
            'scope_type', 'location_ids',
            'allows_family_membership', 'max_family_size',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class MembershipPlanInputSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    cadence = serializers.ChoiceField(choices=MembershipPlan.Cadence.choices, required=False)
    price_cents = serializers.IntegerField(required=False, allow_null=True)
    currency = serializers.CharField(required=False, max_length=3)
    term_type = serializers.ChoiceField(choices=MembershipPlan.TermType.choices, required=False)
    term_months = serializers.IntegerField(required=False, allow_null=True)
    has_intro_period = serializers.BooleanField(required=False)
    intro_months = serializers.IntegerField(required=False, allow_null=True)
    intro_price_cents = serializers.IntegerField(required=False, allow_null=True)
    scope_type = serializers.ChoiceField(choices=MembershipPlan.ScopeType.choices, required=False)
    location_ids = serializers.ListField(child=serializers.UUIDField(), required=False, allow_null=True)
    allows_family_membership = serializers.BooleanField(required=False)
    max_family_size = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    is_active = serializers.BooleanField(required=False)


class StatusReasonSerializer(serializers.ModelSerializer):
    class Meta:
        model = StatusReason
        fields = ['id', 'type', 'label', 'sort_order', 'is_active', 'created_at', 'updated_at']
        read_only_fields = fields


class StatusReasonInputSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=StatusReason.ReasonType.choices, required=False)
    label = serializers.CharField(required=False, allow_blank=True, max_length=200)
    sort_order = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    is_active = serializers.BooleanField(required=False)
