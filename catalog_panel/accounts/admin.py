from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User


@admin.register(User)
class CatalogUserAdmin(UserAdmin):
    """Админ-панель для пользователей (identity из внешнего провайдера)"""

    model = User
    ordering = ('email',)
    list_display = ('external_id', 'email', 'name', 'user_type', 'is_staff', 'is_active', 'date_joined')
    list_filter = ('user_type', 'is_staff', 'is_active')
    search_fields = ('external_id', 'email', 'name')

    fieldsets = (
        (None, {'fields': ('external_id', 'password')}),
        ('Профиль', {'fields': ('email', 'name', 'user_type')}),
        ('Права', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Важные даты', {'fields': ('last_login', 'date_joined')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('external_id', 'email', 'user_type', 'password1', 'password2', 'is_staff', 'is_active'),
        }),
    )
