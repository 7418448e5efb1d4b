import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import tenants.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Organization',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('slug', models.SlugField(help_text='Метка поддомена (oakmont.catalog.app → oakmont)', max_length=63, unique=True)),
                ('name', models.CharField(help_text='Название организации', max_length=200)),
                ('timezone', models.CharField(default='UTC', help_text='IANA часовой пояс', max_length=64, validators=[tenants.models.validate_timezone])),
            ],
            options={
                'verbose_name': 'Организация',
                'verbose_name_plural': 'Организации',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='OrganizationMembership',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('role', models.CharField(choices=[('ORG_ADMIN', 'Администратор'), ('ORG_STAFF', 'Сотрудник'), ('CUSTOMER', 'Клиент')], default='ORG_STAFF', max_length=20, verbose_name='Роль')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='tenants.organization', verbose_name='Организация')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='organization_memberships', to=settings.AUTH_USER_MODEL, verbose_name='Пользователь')),
            ],
            options={
                'verbose_name': 'Членство в организации',
                'verbose_name_plural': 'Членства в организациях',
                'unique_together': {('organization', 'user')},
                'indexes': [models.Index(fields=['organization', 'role'], name='membership_org_role_idx')],
            },
        ),
    ]
