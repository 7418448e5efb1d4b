"""
Настройки клуба: локации, тарифные планы абонементов, причины статусов.
"""
from django.db import models

from tenants.mixins import OrganizationScopedModel


class Location(OrganizationScopedModel):
    """Филиал / зал клуба."""

    name = models.CharField(max_length=200)
    code = models.CharField(max_length=32, help_text='Короткий код, хранится в верхнем регистре')
    address_line1 = models.CharField(max_length=255, blank=True, null=True)
    address_line2 = models.CharField(max_length=255, blank=True, null=True)
    city = models.CharField(max_length=120, blank=True, null=True)
    state = models.CharField(max_length=120, blank=True, null=True)
    postal_code = models.CharField(max_length=20, blank=True, null=True)
    country = models.CharField(max_length=2, blank=True, null=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']
        unique_together = ['organization', 'code']
        verbose_name = 'Локация'
        verbose_name_plural = 'Локации'

    def __str__(self):
        return f'{self.name} ({self.code})'


class MembershipPlan(OrganizationScopedModel):
    """Тарифный план абонемента."""

    class Cadence(models.TextChoices):
        MONTHLY = 'MONTHLY', 'Ежемесячно'
        YEARLY = 'YEARLY', 'Ежегодно'
        ONE_TIME = 'ONE_TIME', 'Разово'

    class TermType(models.TextChoices):
        EVERGREEN = 'EVERGREEN', 'Бессрочный'
        FIXED_TERM = 'FIXED_TERM', 'Фиксированный срок'

    class ScopeType(models.TextChoices):
        ORG_WIDE = 'ORG_WIDE', 'Все локации'
        SPECIFIC_LOCATIONS = 'SPECIFIC_LOCATIONS', 'Выбранные локации'

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    cadence = models.CharField(max_length=20, choices=Cadence.choices, default=Cadence.MONTHLY)
    price_cents = models.IntegerField(default=0)
    currency = models.CharField(max_length=3, default='USD')

    term_type = models.CharField(max_length=20, choices=TermType.choices, default=TermType.EVERGREEN)
    term_months = models.PositiveIntegerField(null=True, blank=True)

    has_intro_period = models.BooleanField(default=False)
    intro_months = models.PositiveIntegerField(null=True, blank=True)
    intro_price_cents = models.IntegerField(null=True, blank=True)

    scope_type = models.CharField(max_length=20, choices=ScopeType.choices, default=ScopeType.ORG_WIDE)
    locations = models.ManyToManyField(Location, blank=True, related_name='membership_plans')

    allows_family_membership = models.BooleanField(default=False)
    max_family_size = models.PositiveIntegerField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Тарифный план'
        verbose_name_plural = 'Тарифные планы'

    def __str__(self):
        return self.name


class StatusReason(OrganizationScopedModel):
    """Причина отмены или заморозки абонемента (справочник клуба)."""

    class ReasonType(models.TextChoices):
        CANCELLATION = 'CANCELLATION', 'Отмена'
        FREEZE = 'FREEZE', 'Заморозка'

    type = models.CharField(max_length=20, choices=ReasonType.choices)
    label = models.CharField(max_length=200)
    sort_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['type', 'sort_order']
        verbose_name = 'Причина статуса'
        verbose_name_plural = 'Причины статусов'

    def __str__(self):
        return f'{self.get_type_display()}: {self.label}'
