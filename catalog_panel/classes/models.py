"""
Занятия клуба.

ClassTemplate: правило повторения (дни недели + время + период),
ClassSession: конкретное занятие, сгенерированное из шаблона (снимок полей
шаблона на момент генерации), RosterEntry: запись клиента на сессию.
"""
from django.conf import settings
from django.db import models

from tenants.mixins import OrganizationScopedModel


class ClassTemplate(OrganizationScopedModel):
    """Шаблон регулярного занятия."""

    class SkillLevel(models.TextChoices):
        BEGINNER = 'BEGINNER', 'Начальный'
        INTERMEDIATE = 'INTERMEDIATE', 'Средний'
        ADVANCED = 'ADVANCED', 'Продвинутый'
        ALL_LEVELS = 'ALL_LEVELS', 'Любой'

    class AccessType(models.TextChoices):
        INCLUDED_IN_MEMBERSHIP = 'INCLUDED_IN_MEMBERSHIP', 'Входит в абонемент'
        PAID_DROPIN = 'PAID_DROPIN', 'Разовая оплата'
        EITHER = 'EITHER', 'Любой вариант'

    location = models.ForeignKey(
        'club_settings.Location', on_delete=models.PROTECT,
        related_name='class_templates',
    )
    room = models.CharField(max_length=100, blank=True, null=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    program = models.CharField(max_length=100, blank=True, null=True)
    skill_level = models.CharField(
        max_length=20, choices=SkillLevel.choices, default=SkillLevel.ALL_LEVELS,
    )
    tags = models.JSONField(default=list, blank=True)

    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True, help_text='Пусто: без даты окончания')
    # ISO дни недели: 1 = понедельник ... 7 = воскресенье
    days_of_week = models.JSONField(default=list)
    start_time = models.CharField(max_length=5, help_text='HH:MM, 24ч')
    end_time = models.CharField(max_length=5, help_text='HH:MM, 24ч')

    max_participants = models.PositiveIntegerField(null=True, blank=True)
    access_type = models.CharField(
        max_length=30, choices=AccessType.choices, default=AccessType.INCLUDED_IN_MEMBERSHIP,
    )
    drop_in_price_cents = models.IntegerField(null=True, blank=True)
    currency = models.CharField(max_length=3, default='USD')

    min_age = models.PositiveIntegerField(null=True, blank=True)
    max_age = models.PositiveIntegerField(null=True, blank=True)
    age_label = models.CharField(max_length=100, blank=True, null=True)
    members_only = models.BooleanField(default=False)
    prerequisite_label = models.CharField(max_length=200, blank=True, null=True)
    required_plans = models.ManyToManyField(
        'club_settings.MembershipPlan', blank=True,
        related_name='class_templates',
    )

    primary_instructor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, related_name='primary_class_templates',
    )
    instructor_display_name = models.CharField(max_length=200, blank=True, null=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Шаблон занятия'
        verbose_name_plural = 'Шаблоны занятий'

    def __str__(self):
        return self.name


class ClassSession(OrganizationScopedModel):
    """Конкретное занятие в календаре."""

    class Status(models.TextChoices):
        SCHEDULED = 'SCHEDULED', 'Запланировано'
        CANCELLED = 'CANCELLED', 'Отменено'

    template = models.ForeignKey(ClassTemplate, on_delete=models.CASCADE, related_name='sessions')
    start_datetime = models.DateTimeField(db_index=True)
    end_datetime = models.DateTimeField()
    location = models.ForeignKey(
        'club_settings.Location', on_delete=models.PROTECT,
        related_name='class_sessions',
    )
    room = models.CharField(max_length=100, blank=True, null=True)
    max_participants = models.PositiveIntegerField(null=True, blank=True)
    instructor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, related_name='instructed_class_sessions',
    )
    instructor_display_name = models.CharField(max_length=200, blank=True, null=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.SCHEDULED)
    cancel_reason = models.CharField(max_length=255, blank=True, null=True)

    class Meta:
        ordering = ['start_datetime']
        verbose_name = 'Занятие'
        verbose_name_plural = 'Занятия'
        indexes = [
            models.Index(fields=['organization', 'start_datetime'], name='session_org_start_idx'),
        ]

    def __str__(self):
        return f'{self.template.name} @ {self.start_datetime:%Y-%m-%d %H:%M}'


class RosterEntry(OrganizationScopedModel):
    """Запись клиента на занятие и отметка посещения."""

    class Status(models.TextChoices):
        REGISTERED = 'REGISTERED', 'Записан'
        ATTENDED = 'ATTENDED', 'Присутствовал'
        NO_SHOW = 'NO_SHOW', 'Не пришёл'
        CANCELLED_BY_STAFF = 'CANCELLED_BY_STAFF', 'Отменено клубом'
        CANCELLED_BY_MEMBER = 'CANCELLED_BY_MEMBER', 'Отменено клиентом'

    session = models.ForeignKey(ClassSession, on_delete=models.CASCADE, related_name='roster_entries')
    customer = models.ForeignKey(
        'customers.Customer', on_delete=models.CASCADE,
        related_name='class_roster_entries',
    )
    status = models.CharField(max_length=30, choices=Status.choices, default=Status.REGISTERED)
    note = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, related_name='+',
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, related_name='+',
    )

    class Meta:
        ordering = ['created_at']
        unique_together = ['session', 'customer']
        verbose_name = 'Участник занятия'
        verbose_name_plural = 'Участники занятий'

    def __str__(self):
        return f'{self.customer} → {self.session} ({self.status})'
