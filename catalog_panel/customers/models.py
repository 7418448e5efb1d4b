"""
Клиенты клуба и всё, что к ним привязано: семьи (household), абонементы,
биллинг-события, журнал взаимодействий, письма/SMS, файлы.
"""
from django.conf import settings
from django.db import models

from tenants.mixins import OrganizationScopedModel


class Customer(OrganizationScopedModel):
    """Профиль клиента (лид, пробный, действующий, бывший)."""

    class Status(models.TextChoices):
        LEAD = 'LEAD', 'Лид'
        TRIAL = 'TRIAL', 'Пробный'
        ACTIVE = 'ACTIVE', 'Активный'
        FROZEN = 'FROZEN', 'Заморожен'
        CANCELLED = 'CANCELLED', 'Отменён'
        FORMER = 'FORMER', 'Бывший'

    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    preferred_name = models.CharField(max_length=150, blank=True, null=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.LEAD, db_index=True)
    primary_location = models.ForeignKey(
        'club_settings.Location',
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='customers',
    )

    primary_email = models.EmailField(blank=True, null=True)
    primary_phone = models.CharField(max_length=40, blank=True, null=True)
    secondary_phone = models.CharField(max_length=40, blank=True, null=True)

    address_line1 = models.CharField(max_length=255, blank=True, null=True)
    address_line2 = models.CharField(max_length=255, blank=True, null=True)
    city = models.CharField(max_length=120, blank=True, null=True)
    state = models.CharField(max_length=120, blank=True, null=True)
    postal_code = models.CharField(max_length=20, blank=True, null=True)

    can_email = models.BooleanField(default=True)
    can_sms = models.BooleanField(default=True)

    # Список строк; нормализуется (strip + lower) при записи
    tags = models.JSONField(default=list, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)

    class Meta:
        ordering = ['-updated_at']
        verbose_name = 'Клиент'
        verbose_name_plural = 'Клиенты'
        indexes = [
            models.Index(fields=['organization', 'status'], name='customer_org_status_idx'),
        ]

    def __str__(self):
        return f'{self.first_name} {self.last_name}'


class Household(OrganizationScopedModel):
    """Семья: один head (плательщик) и члены семьи."""

    head_customer = models.OneToOneField(
        Customer, on_delete=models.CASCADE,
        related_name='headed_household',
    )

    class Meta:
        verbose_name = 'Семья'
        verbose_name_plural = 'Семьи'

    def __str__(self):
        return f'Household of {self.head_customer}'


class HouseholdMember(OrganizationScopedModel):
    household = models.ForeignKey(Household, on_delete=models.CASCADE, related_name='members')
    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='household_memberships')
    relationship = models.CharField(max_length=50, blank=True, null=True)

    class Meta:
        unique_together = ['household', 'customer']
        verbose_name = 'Член семьи'
        verbose_name_plural = 'Члены семьи'


class CustomerMembership(OrganizationScopedModel):
    """Абонемент клиента (оформляется на head семьи)."""

    class Status(models.TextChoices):
        ACTIVE = 'ACTIVE', 'Активен'
        TRIAL = 'TRIAL', 'Пробный'
        FROZEN = 'FROZEN', 'Заморожен'
        CANCELLED = 'CANCELLED', 'Отменён'

    head_customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='memberships')
    membership_plan = models.ForeignKey(
        'club_settings.MembershipPlan', on_delete=models.PROTECT,
        related_name='customer_memberships',
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    renewal_date = models.DateField(null=True, blank=True)
    external_subscription_id = models.CharField(max_length=255, blank=True, null=True)

    cancel_reason = models.ForeignKey(
        'club_settings.StatusReason', on_delete=models.SET_NULL,
        null=True, blank=True, related_name='cancelled_memberships',
    )
    freeze_reason = models.ForeignKey(
        'club_settings.StatusReason', on_delete=models.SET_NULL,
        null=True, blank=True, related_name='frozen_memberships',
    )
    freeze_start_date = models.DateField(null=True, blank=True)
    freeze_end_date = models.DateField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Абонемент клиента'
        verbose_name_plural = 'Абонементы клиентов'


class BillingEvent(OrganizationScopedModel):
    """Событие биллинга (только чтение: пишет внешняя платёжная система)."""

    class Status(models.TextChoices):
        PAID = 'PAID', 'Оплачено'
        PENDING = 'PENDING', 'Ожидает'
        FAILED = 'FAILED', 'Ошибка'
        REFUNDED = 'REFUNDED', 'Возврат'

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='billing_events')
    date = models.DateTimeField()
    description = models.CharField(max_length=255)
    amount_cents = models.IntegerField()
    currency = models.CharField(max_length=3, default='USD')
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PAID)
    external_invoice_id = models.CharField(max_length=255, blank=True, null=True)

    class Meta:
        ordering = ['-date']
        verbose_name = 'Биллинг-событие'
        verbose_name_plural = 'Биллинг-события'


class EmailMessage(OrganizationScopedModel):
    class Status(models.TextChoices):
        QUEUED = 'QUEUED', 'В очереди'
        SENT = 'SENT', 'Отправлено'
        FAILED = 'FAILED', 'Ошибка'

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='email_messages')
    template_name = models.CharField(max_length=100, blank=True, null=True)
    to_email = models.EmailField()
    subject = models.CharField(max_length=255)
    body = models.TextField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.QUEUED)
    provider_message_id = models.CharField(max_length=255, blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, related_name='+',
    )
    sent_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Email'
        verbose_name_plural = 'Email'


class SmsMessage(OrganizationScopedModel):
    class Status(models.TextChoices):
        STUB_SENT = 'STUB_SENT', 'Отправлено (заглушка)'
        SENT = 'SENT', 'Отправлено'
        FAILED = 'FAILED', 'Ошибка'

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='sms_messages')
    template_name = models.CharField(max_length=100, blank=True, null=True)
    to_phone = models.CharField(max_length=40)
    body = models.TextField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.STUB_SENT)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, related_name='+',
    )

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'SMS'
        verbose_name_plural = 'SMS'


class Interaction(OrganizationScopedModel):
    """Запись в журнале взаимодействий с клиентом."""

    class InteractionType(models.TextChoices):
        NOTE = 'NOTE', 'Заметка'
        CALL = 'CALL', 'Звонок'
        EMAIL = 'EMAIL', 'Email'
        SMS = 'SMS', 'SMS'
        IN_PERSON = 'IN_PERSON', 'Лично'
        AUTOMATION_EVENT = 'AUTOMATION_EVENT', 'Автоматизация'

    class Channel(models.TextChoices):
        EMAIL = 'EMAIL', 'Email'
        SMS = 'SMS', 'SMS'
        PHONE = 'PHONE', 'Телефон'
        IN_PERSON = 'IN_PERSON', 'Лично'
        SYSTEM = 'SYSTEM', 'Система'
        OTHER = 'OTHER', 'Другое'

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='interactions')
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, related_name='customer_interactions',
    )
    interaction_type = models.CharField(max_length=20, choices=InteractionType.choices)
    channel = models.CharField(max_length=20, choices=Channel.choices)
    title = models.CharField(max_length=255)
    body = models.TextField(blank=True, default='')
    related_email = models.ForeignKey(
        EmailMessage, on_delete=models.SET_NULL, null=True, blank=True, related_name='interactions',
    )
    related_sms = models.ForeignKey(
        SmsMessage, on_delete=models.SET_NULL, null=True, blank=True, related_name='interactions',
    )

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Взаимодействие'
        verbose_name_plural = 'Взаимодействия'


class CustomerFile(OrganizationScopedModel):
    """Файл клиента в S3 (договор, отказ от претензий, документ)."""

    class Category(models.TextChoices):
        WAIVER = 'WAIVER', 'Отказ от претензий'
        CONTRACT = 'CONTRACT', 'Договор'
        ID = 'ID', 'Документ'
        OTHER = 'OTHER', 'Другое'

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='files')
    file_name = models.CharField(max_length=255)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.OTHER)
    s3_key = models.CharField(max_length=1024)
    content_type = models.CharField(max_length=255)
    size_bytes = models.BigIntegerField()
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, related_name='+',
    )
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-uploaded_at']
        verbose_name = 'Файл клиента'
        verbose_name_plural = 'Файлы клиентов'
