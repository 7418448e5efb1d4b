"""
Tenant models: ядро мультитенантной архитектуры.

Подход: shared-database, shared-schema с FK organization на каждой модели
верхнего уровня. Organization = клуб / спортзал.
"""
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from core.models import TimeStampedModel


def validate_timezone(value):
    """Имя часового пояса из базы IANA ('Europe/Berlin', 'UTC')."""
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise ValidationError(f'Unknown timezone: {value}')


class Organization(TimeStampedModel):
    """
    Организация (клуб). Определяется по поддомену или заголовку
    X-Catalog-Organization; все данные клиентов и занятий привязаны к ней.
    """

    slug = models.SlugField(
        max_length=63, unique=True, db_index=True,
        help_text='Метка поддомена (oakmont.catalog.app → oakmont)',
    )
    name = models.CharField(max_length=200, help_text='Название организации')
    timezone = models.CharField(
        max_length=64, default='UTC', validators=[validate_timezone],
        help_text='IANA часовой пояс',
    )

    class Meta:
        ordering = ['name']
        verbose_name = 'Организация'
        verbose_name_plural = 'Организации'

    def __str__(self):
        return f'{self.name} ({self.slug})'

    def save(self, *args, **kwargs):
        # Без валидного пояса не построить ни одно расписание организации
        validate_timezone(self.timezone)
        super().save(*args, **kwargs)

    @property
    def tzinfo(self):
        return ZoneInfo(self.timezone or 'UTC')


class OrganizationMembership(TimeStampedModel):
    """
    Связь пользователя с организацией.
    Доступ к API организации дают только роли ORG_ADMIN и ORG_STAFF.
    """

    class Role(models.TextChoices):
        ORG_ADMIN = 'ORG_ADMIN', 'Администратор'
        ORG_STAFF = 'ORG_STAFF', 'Сотрудник'
        CUSTOMER = 'CUSTOMER', 'Клиент'

    STAFF_ROLES = (Role.ORG_ADMIN, Role.ORG_STAFF)

    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE,
        related_name='memberships',
        verbose_name='Организация',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='organization_memberships',
        verbose_name='Пользователь',
    )
    role = models.CharField(
        max_length=20, choices=Role.choices,
        default=Role.ORG_STAFF,
        verbose_name='Роль',
    )

    class Meta:
        verbose_name = 'Членство в организации'
        verbose_name_plural = 'Членства в организациях'
        unique_together = ['organization', 'user']
        indexes = [
            models.Index(fields=['organization', 'role'], name='membership_org_role_idx'),
        ]

    def __str__(self):
        return f'{self.user} → {self.organization} ({self.role})'

    @property
    def is_admin(self):
        return self.role == self.Role.ORG_ADMIN
