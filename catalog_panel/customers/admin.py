from django.contrib import admin

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


class CustomerMembershipInline(admin.TabularInline):
    model = CustomerMembership
    extra = 0
    fk_name = 'head_customer'
    raw_id_fields = ('membership_plan', 'cancel_reason', 'freeze_reason', 'organization')


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'status', 'organization', 'primary_email', 'updated_at')
    list_filter = ('status', 'organization')
    search_fields = ('first_name', 'last_name', 'preferred_name', 'primary_email', 'primary_phone')
    raw_id_fields = ('primary_location',)
    inlines = [CustomerMembershipInline]


class HouseholdMemberInline(admin.TabularInline):
    model = HouseholdMember
    extra = 0
    raw_id_fields = ('customer', 'organization')


@admin.register(Household)
class HouseholdAdmin(admin.ModelAdmin):
    list_display = ('head_customer', 'organization', 'created_at')
    raw_id_fields = ('head_customer',)
    inlines = [HouseholdMemberInline]


@admin.register(BillingEvent)
class BillingEventAdmin(admin.ModelAdmin):
    list_display = ('customer', 'date', 'description', 'amount_cents', 'currency', 'status')
    list_filter = ('status', 'currency')
    raw_id_fields = ('customer',)


@admin.register(Interaction)
class InteractionAdmin(admin.ModelAdmin):
    list_display = ('customer', 'interaction_type', 'channel', 'title', 'created_by', 'created_at')
    list_filter = ('interaction_type', 'channel')
    raw_id_fields = ('customer', 'created_by', 'related_email', 'related_sms')


@admin.register(EmailMessage)
class EmailMessageAdmin(admin.ModelAdmin):
    list_display = ('customer', 'to_email', 'subject', 'status', 'sent_at')
    list_filter = ('status',)
    raw_id_fields = ('customer', 'created_by')


@admin.register(SmsMessage)
class SmsMessageAdmin(admin.ModelAdmin):
    list_display = ('customer', 'to_phone', 'status', 'created_at')
    raw_id_fields = ('customer', 'created_by')


@admin.register(CustomerFile)
class CustomerFileAdmin(admin.ModelAdmin):
    list_display = ('customer', 'file_name', 'category', 'size_bytes', 'uploaded_at')
    list_filter = ('category',)
    raw_id_fields = ('customer', 'uploaded_by')
