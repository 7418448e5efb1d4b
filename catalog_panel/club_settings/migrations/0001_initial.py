import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenants', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Location',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=200)),
                ('code', models.CharField(help_text='Короткий код, хранится в верхнем регистре', max_length=32)),
                ('address_line1', models.CharField(blank=True, max_length=255, null=True)),
                ('address_line2', models.CharField(blank=True, max_length=255, null=True)),
                ('city', models.CharField(blank=True, max_length=120, null=True)),
                ('state', models.CharField(blank=True, max_length=120, null=True)),
                ('postal_code', models.CharField(blank=True, max_length=20, null=True)),
                ('country', models.CharField(blank=True, max_length=2, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='club_settings_locations', to='tenants.organization', verbose_name='Организация')),
            ],
            options={
                'verbose_name': 'Локация',
                'verbose_name_plural': 'Локации',
                'ordering': ['name'],
                'unique_together': {('organization', 'code')},
            },
        ),
        migrations.CreateModel(
            name='MembershipPlan',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, null=True)),
                ('cadence', models.CharField(choices=[('MONTHLY', 'Ежемесячно'), ('YEARLY', 'Ежегодно'), ('ONE_TIME', 'Разово')], default='MONTHLY', max_length=20)),
                ('price_cents', models.IntegerField(default=0)),
                ('currency', models.CharField(default='USD', max_length=3)),
                ('term_type', models.CharField(choices=[('EVERGREEN', 'Бессрочный'), ('FIXED_TERM', 'Фиксированный срок')], default='EVERGREEN', max_length=20)),
                ('term_months', models.PositiveIntegerField(blank=True, null=True)),
                ('has_intro_period', models.BooleanField(default=False)),
                ('intro_months', models.PositiveIntegerField(blank=True, null=True)),
                ('intro_price_cents', models.IntegerField(blank=True, null=True)),
                ('scope_type', models.CharField(choices=[('ORG_WIDE', 'Все локации'), ('SPECIFIC_LOCATIONS', 'Выбранные локации')], default='ORG_WIDE', max_length=20)),
                ('allows_family_membership', models.BooleanField(default=False)),
                ('max_family_size', models.PositiveIntegerField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('locations', models.ManyToManyField(blank=True, related_name='membership_plans', to='club_settings.location')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='club_settings_membershipplans', to='tenants.organization', verbose_name='Организация')),
            ],
            options={
                'verbose_name': 'Тарифный план',
                'verbose_name_plural': 'Тарифные планы',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='StatusReason',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('type', models.CharField(choices=[('CANCELLATION', 'Отмена'), ('FREEZE', 'Заморозка')], max_length=20)),
                ('label', models.CharField(max_length=200)),
                ('sort_order', models.PositiveIntegerField(default=0)),
                ('is_active', models.BooleanField(default=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='club_settings_statusreasons', to='tenants.organization', verbose_name='Организация')),
            ],
            options={
                'verbose_name': 'Причина статуса',
                'verbose_name_plural': 'Причины статусов',
                'ordering': ['type', 'sort_order'],
            },
        ),
    ]
