from django.contrib import admin

from .models import Location, MembershipPlan, StatusReason


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'organization', 'city', 'is_active')
    list_filter = ('is_active', 'organization')
    search_fields = ('name', 'code')


@admin.register(MembershipPlan)
class MembershipPlanAdmin(admin.ModelAdmin):
    list_display = ('name', 'organization', 'cadence', 'price_cents', 'currency', 'term_type', 'is_active')
    list_filter = ('cadence', 'term_type', 'scope_type', 'is_active')
    search_fields = ('name',)
    filter_horizontal = ('locations',)


@admin.register(StatusReason)
class StatusReasonAdmin(admin.ModelAdmin):
    list_display = ('label', 'type', 'organization', 'sort_order', 'is_active')
    list_filter = ('type', 'is_active')
