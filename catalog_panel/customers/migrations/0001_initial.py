import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _base_fields():
    return [
        ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
    ]


def _organization_fk(related_name):
    return ('organization', models.ForeignKey(
        on_delete=django.db.models.deletion.CASCADE,
        related_name=related_name,
        to='tenants.organization',
        verbose_name='Организация',
    ))


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenants', '0001_initial'),
        ('club_settings', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Customer',
            fields=_base_fields() + [
                ('first_name', models.CharField(max_length=150)),
                ('last_name', models.CharField(max_length=150)),
                ('preferred_name', models.CharField(blank=True, max_length=150, null=True)),
                ('status', models.CharField(choices=[('LEAD', 'Лид'), ('TRIAL', 'Пробный'), ('ACTIVE', 'Активный'), ('FROZEN', 'Заморожен'), ('CANCELLED', 'Отменён'), ('FORMER', 'Бывший')], db_index=True, default='LEAD', max_length=20)),
                ('primary_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('primary_phone', models.CharField(blank=True, max_length=40, null=True)),
                ('secondary_phone', models.CharField(blank=True, max_length=40, null=True)),
                ('address_line1', models.CharField(blank=True, max_length=255, null=True)),
                ('address_line2', models.CharField(blank=True, max_length=255, null=True)),
                ('city', models.CharField(blank=True, max_length=120, null=True)),
                ('state', models.CharField(blank=True, max_length=120, null=True)),
                ('postal_code', models.CharField(blank=True, max_length=20, null=True)),
                ('can_email', models.BooleanField(default=True)),
                ('can_sms', models.BooleanField(default=True)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                _organization_fk('customers_customers'),
                ('primary_location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='customers', to='club_settings.location')),
            ],
            options={
                'verbose_name': 'Клиент',
                'verbose_name_plural': 'Клиенты',
                'ordering': ['-updated_at'],
                'indexes': [models.Index(fields=['organization', 'status'], name='customer_org_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='Household',
            fields=_base_fields() + [
                _organization_fk('customers_households'),
                ('head_customer', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='headed_household', to='customers.customer')),
            ],
            options={
                'verbose_name': 'Семья',
                'verbose_name_plural': 'Семьи',
            },
        ),
        migrations.CreateModel(
            name='HouseholdMember',
            fields=_base_fields() + [
                ('relationship', models.CharField(blank=True, max_length=50, null=True)),
                _organization_fk('customers_householdmembers'),
                ('household', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='customers.household')),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='household_memberships', to='customers.customer')),
            ],
            options={
                'verbose_name': 'Член семьи',
                'verbose_name_plural': 'Члены семьи',
                'unique_together': {('household', 'customer')},
            },
        ),
        migrations.CreateModel(
            name='CustomerMembership',
            fields=_base_fields() + [
                ('status', models.CharField(choices=[('ACTIVE', 'Активен'), ('TRIAL', 'Пробный'), ('FROZEN', 'Заморожен'), ('CANCELLED', 'Отменён')], default='ACTIVE', max_length=20)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField(blank=True, null=True)),
                ('renewal_date', models.DateField(blank=True, null=True)),
                ('external_subscription_id', models.CharField(blank=True, max_length=255, null=True)),
                ('freeze_start_date', models.DateField(blank=True, null=True)),
                ('freeze_end_date', models.DateField(blank=True, null=True)),
                _organization_fk('customers_customermemberships'),
                ('head_customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='customers.customer')),
                ('membership_plan', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='customer_memberships', to='club_settings.membershipplan')),
                ('cancel_reason', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cancelled_memberships', to='club_settings.statusreason')),
                ('freeze_reason', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='frozen_memberships', to='club_settings.statusreason')),
            ],
            options={
                'verbose_name': 'Абонемент клиента',
                'verbose_name_plural': 'Абонементы клиентов',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='BillingEvent',
            fields=_base_fields() + [
                ('date', models.DateTimeField()),
                ('description', models.CharField(max_length=255)),
                ('amount_cents', models.IntegerField()),
                ('currency', models.CharField(default='USD', max_length=3)),
                ('status', models.CharField(choices=[('PAID', 'Оплачено'), ('PENDING', 'Ожидает'), ('FAILED', 'Ошибка'), ('REFUNDED', 'Возврат')], default='PAID', max_length=20)),
                ('external_invoice_id', models.CharField(blank=True, max_length=255, null=True)),
                _organization_fk('customers_billingevents'),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='billing_events', to='customers.customer')),
            ],
            options={
                'verbose_name': 'Биллинг-событие',
                'verbose_name_plural': 'Биллинг-события',
                'ordering': ['-date'],
            },
        ),
        migrations.CreateModel(
            name='EmailMessage',
            fields=_base_fields() + [
                ('template_name', models.CharField(blank=True, max_length=100, null=True)),
                ('to_email', models.EmailField(max_length=254)),
                ('subject', models.CharField(max_length=255)),
                ('body', models.TextField()),
                ('status', models.CharField(choices=[('QUEUED', 'В очереди'), ('SENT', 'Отправлено'), ('FAILED', 'Ошибка')], default='QUEUED', max_length=20)),
                ('provider_message_id', models.CharField(blank=True, max_length=255, null=True)),
                ('sent_at', models.DateTimeField(blank=True, null=True)),
                _organization_fk('customers_emailmessages'),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='email_messages', to='customers.customer')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Email',
                'verbose_name_plural': 'Email',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='SmsMessage',
            fields=_base_fields() + [
                ('template_name', models.CharField(blank=True, max_length=100, null=True)),
                ('to_phone', models.CharField(max_length=40)),
                ('body', models.TextField()),
                ('status', models.CharField(choices=[('STUB_SENT', 'Отправлено (заглушка)'), ('SENT', 'Отправлено'), ('FAILED', 'Ошибка')], default='STUB_SENT', max_length=20)),
                _organization_fk('customers_smsmessages'),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sms_messages', to='customers.customer')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'SMS',
                'verbose_name_plural': 'SMS',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Interaction',
            fields=_base_fields() + [
                ('interaction_type', models.CharField(choices=[('NOTE', 'Заметка'), ('CALL', 'Звонок'), ('EMAIL', 'Email'), ('SMS', 'SMS'), ('IN_PERSON', 'Лично'), ('AUTOMATION_EVENT', 'Автоматизация')], max_length=20)),
                ('channel', models.CharField(choices=[('EMAIL', 'Email'), ('SMS', 'SMS'), ('PHONE', 'Телефон'), ('IN_PERSON', 'Лично'), ('SYSTEM', 'Система'), ('OTHER', 'Другое')], max_length=20)),
                ('title', models.CharField(max_length=255)),
                ('body', models.TextField(blank=True, default='')),
                _organization_fk('customers_interactions'),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='interactions', to='customers.customer')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='customer_interactions', to=settings.AUTH_USER_MODEL)),
                ('related_email', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='interactions', to='customers.emailmessage')),
                ('related_sms', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='interactions', to='customers.smsmessage')),
            ],
            options={
                'verbose_name': 'Взаимодействие',
                'verbose_name_plural': 'Взаимодействия',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='CustomerFile',
            fields=_base_fields() + [
                ('file_name', models.CharField(max_length=255)),
                ('category', models.CharField(choices=[('WAIVER', 'Отказ от претензий'), ('CONTRACT', 'Договор'), ('ID', 'Документ'), ('OTHER', 'Другое')], default='OTHER', max_length=20)),
                ('s3_key', models.CharField(max_length=1024)),
                ('content_type', models.CharField(max_length=255)),
                ('size_bytes', models.BigIntegerField()),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                _organization_fk('customers_customerfiles'),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='files', to='customers.customer')),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Файл клиента',
                'verbose_name_plural': 'Файлы клиентов',
                'ordering': ['-uploaded_at'],
            },
        ),
    ]
