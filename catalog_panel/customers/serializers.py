from rest_framework import serializers

from .models import (
    BillingEvent,
    Customer,
    CustomerFile,
    CustomerMembership,
    EmailMessage,
    Household,
    HouseholdMember,
    Interaction,
    SmsMessage,
)


class LocationRefSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()


class CustomerMembershipSerializer(serializers.ModelSerializer):
    membership_plan_name = serializers.CharField(source='membership_plan.name', read_only=True)
    cancel_reason_label = serializers.CharField(source='cancel_reason.label', read_only=True, default=None)
    freeze_reason_label = serializers.CharField(source='freeze_reason.label', read_only=True, default=None)

    class Meta:
        model = CustomerMembership
        fields = [
            'id', 'head_customer_id', 'membership_plan_id', 'membership_plan_name', 'status',
            'start_date', 'end_date', 'renewal_date', 'external_subscription_id',
            'cancel_reason_id', 'cancel_reason_label', 'freeze_reason_id', 'freeze_reason_label',
            'freeze_start_date', 'freeze_end_date', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class CustomerSerializer(serializers.ModelSerializer):
    """Клиент + основная локация + последний абонемент"""

    primary_location = LocationRefSerializer(read_only=True)
    latest_membership = serializers.SerializerMethodField()

    class Meta:
        model = Customer
        fields = [
            'id', 'first_name', 'last_name', 'preferred_name', 'status',
            'primary_location_id', 'primary_location',
            'primary_email', 'primary_phone', 'secondary_phone',
            'address_line1', 'address_line2', 'city', 'state', 'postal_code',
            'can_email', 'can_sms', 'tags', 'date_of_birth',
            'latest_membership', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_latest_membership(self, obj):
        # memberships предзагружены сервисом в порядке -created_at
        memberships = list(obj.memberships.all())
        if not memberships:
            return None
        return CustomerMembershipSerializer(memberships[0]).data


class CustomerInputSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    preferred_name = serializers.CharField(max_length=150, required=False, allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=Customer.Status.choices, required=False)
    primary_location_id = serializers.UUIDField(required=False, allow_null=True)
    primary_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    primary_phone = serializers.CharField(max_length=40, required=False, allow_blank=True, allow_null=True)
    secondary_phone = serializers.CharField(max_length=40, required=False, allow_blank=True, allow_null=True)
    address_line1 = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    address_line2 = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    city = serializers.CharField(max_length=120, required=False, allow_blank=True, allow_null=True)
    state = serializers.CharField(max_length=120, required=False, allow_blank=True, allow_null=True)
    postal_code = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    can_email = serializers.BooleanField(required=False)
    can_sms = serializers.BooleanField(required=False)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    date_of_birth = serializers.DateField(required=False, allow_null=True)


class HouseholdMemberSerializer(serializers.ModelSerializer):
    customer = CustomerSerializer(read_only=True)

    class Meta:
        model = HouseholdMember
        fields = ['id', 'customer_id', 'customer', 'relationship', 'created_at']
        read_only_fields = fields


class HouseholdSerializer(serializers.ModelSerializer):
    head_customer = CustomerSerializer(read_only=True)
    members = HouseholdMemberSerializer(many=True, read_only=True)

    class Meta:
        model = Household
        fields = ['id', 'head_customer_id', 'head_customer', 'members', 'created_at']
        read_only_fields = fields


class HouseholdMemberInputSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    relationship = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)


class AssignMembershipInputSerializer(serializers.Serializer):
    membership_plan_id = serializers.UUIDField()
    start_date = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=CustomerMembership.Status.choices, required=False)
    end_date = serializers.DateField(required=False, allow_null=True)
    renewal_date = serializers.DateField(required=False, allow_null=True)
    external_subscription_id = serializers.CharField(max_length=255, required=False, allow_null=True)


class UpdateMembershipInputSerializer(serializers.Serializer):
    membership_plan_id = serializers.UUIDField(required=False)
    start_date = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=CustomerMembership.Status.choices, required=False)
    end_date = serializers.DateField(required=False, allow_null=True)
    renewal_date = serializers.DateField(required=False, allow_null=True)
    external_subscription_id = serializers.CharField(max_length=255, required=False, allow_null=True)
    cancel_reason_id = serializers.UUIDField(required=False, allow_null=True)
    freeze_reason_id = serializers.UUIDField(required=False, allow_null=True)
    freeze_start_date = serializers.DateField(required=False, allow_null=True)
    freeze_end_date = serializers.DateField(required=False, allow_null=True)


class BillingEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillingEvent
        fields = [
            'id', 'customer_id', 'date', 'description', 'amount_cents', 'currency',
            'status', 'external_invoice_id', 'created_at',
        ]
        read_only_fields = fields


class EmailMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailMessage
        fields = [
            'id', 'customer_id', 'template_name', 'to_email', 'subject', 'body', 'status',
            'provider_message_id', 'created_by_id', 'sent_at', 'created_at',
        ]
        read_only_fields = fields


class SmsMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = SmsMessage
        fields = ['id', 'customer_id', 'template_name', 'to_phone', 'body', 'status', 'created_by_id', 'created_at']
        read_only_fields = fields


class InteractionSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(source='created_by.name', read_only=True, default=None)

    class Meta:
        model = Interaction
        fields = [
            'id', 'customer_id', 'created_by_id', 'created_by_name', 'interaction_type', 'channel',
            'title', 'body', 'related_email_id', 'related_sms_id', 'created_at',
        ]
        read_only_fields = fields


class InteractionInputSerializer(serializers.Serializer):
    interaction_type = serializers.ChoiceField(choices=Interaction.InteractionType.choices)
    channel = serializers.ChoiceField(choices=Interaction.Channel.choices)
    title = serializers.CharField(max_length=255)
    body = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class SendEmailInputSerializer(serializers.Serializer):
    to = serializers.EmailField()
    subject = serializers.CharField(max_length=255)
    body = serializers.CharField()
    template_name = serializers.CharField(max_length=100, required=False, allow_null=True)


class SendSmsInputSerializer(serializers.Serializer):
    to = serializers.CharField(max_length=40)
    body = serializers.CharField()
    template_name = serializers.CharField(max_length=100, required=False, allow_null=True)


class CustomerFileSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomerFile
        fields = [
            'id', 'customer_id', 'file_name', 'category', 's3_key', 'content_type',
            'size_bytes', 'uploaded_by_id', 'uploaded_at',
        ]
        read_only_fields = fields


class UploadUrlInputSerializer(serializers.Serializer):
    file_name = serializers.CharField(max_length=255)
    content_type = serializers.CharField(max_length=255)
    size_bytes = serializers.IntegerField(min_value=1)


class ConfirmUploadInputSerializer(serializers.Serializer):
    key = serializers.CharField(max_length=1024)
    file_name = serializers.CharField(max_length=255)
    category = serializers.ChoiceField(choices=CustomerFile.Category.choices)
    content_type = serializers.CharField(max_length=255)
    size_bytes = serializers.IntegerField(min_value=1)
