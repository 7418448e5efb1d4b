from django.contrib import admin

from .models import ClassSession, ClassTemplate, RosterEntry


@admin.register(ClassTemplate)
class ClassTemplateAdmin(admin.ModelAdmin):
    list_display = ('name', 'organization', 'location', 'program', 'start_date', 'end_date', 'is_active')
    list_filter = ('is_active', 'skill_level', 'access_type')
    search_fields = ('name', 'program')
    filter_horizontal = ('required_plans',)


class RosterEntryInline(admin.TabularInline):
    model = RosterEntry
    extra = 0
    raw_id_fields = ('customer', 'created_by', 'updated_by')


@admin.register(ClassSession)
class ClassSessionAdmin(admin.ModelAdmin):
    list_display = ('template', 'organization', 'start_datetime', 'location', 'room', 'status')
    list_filter = ('status',)
    date_hierarchy = 'start_datetime'
    inlines = [RosterEntryInline]


@admin.register(RosterEntry)
class RosterEntryAdmin(admin.ModelAdmin):
    list_display = ('customer', 'session', 'status', 'created_at')
    list_filter = ('status',)
    raw_id_fields = ('session', 'customer', 'created_by', 'updated_by')
