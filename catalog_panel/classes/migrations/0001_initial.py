import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenants', '0001_initial'),
        ('club_settings', '0001_initial'),
        ('customers', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ClassTemplate',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('room', models.CharField(blank=True, max_length=100, null=True)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, null=True)),
                ('program', models.CharField(blank=True, max_length=100, null=True)),
                ('skill_level', models.CharField(choices=[('BEGINNER', 'Начальный'), ('INTERMEDIATE', 'Средний'), ('ADVANCED', 'Продвинутый'), ('ALL_LEVELS', 'Любой')], default='ALL_LEVELS', max_length=20)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField(blank=True, help_text='Пусто: без даты окончания', null=True)),
                ('days_of_week', models.JSONField(default=list)),
                ('start_time', models.CharField(help_text='HH:MM, 24ч', max_length=5)),
                ('end_time', models.CharField(help_text='HH:MM, 24ч', max_length=5)),
                ('max_participants', models.PositiveIntegerField(blank=True, null=True)),
                ('access_type', models.CharField(choices=[('INCLUDED_IN_MEMBERSHIP', 'Входит в абонемент'), ('PAID_DROPIN', 'Разовая оплата'), ('EITHER', 'Любой вариант')], default='INCLUDED_IN_MEMBERSHIP', max_length=30)),
                ('drop_in_price_cents', models.IntegerField(blank=True, null=True)),
                ('currency', models.CharField(default='USD', max_length=3)),
                ('min_age', models.PositiveIntegerField(blank=True, null=True)),
                ('max_age', models.PositiveIntegerField(blank=True, null=True)),
                ('age_label', models.CharField(blank=True, max_length=100, null=True)),
                ('members_only', models.BooleanField(default=False)),
                ('prerequisite_label', models.CharField(blank=True, max_length=200, null=True)),
                ('instructor_display_name', models.CharField(blank=True, max_length=200, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='classes_classtemplates', to='tenants.organization', verbose_name='Организация')),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='class_templates', to='club_settings.location')),
                ('primary_instructor_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='primary_class_templates', to=settings.AUTH_USER_MODEL)),
                ('required_plans', models.ManyToManyField(blank=True, related_name='class_templates', to='club_settings.membershipplan')),
            ],
            options={
                'verbose_name': 'Шаблон занятия',
                'verbose_name_plural': 'Шаблоны занятий',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ClassSession',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('start_datetime', models.DateTimeField(db_index=True)),
                ('end_datetime', models.DateTimeField()),
                ('room', models.CharField(blank=True, max_length=100, null=True)),
                ('max_participants', models.PositiveIntegerField(blank=True, null=True)),
                ('instructor_display_name', models.CharField(blank=True, max_length=200, null=True)),
                ('status', models.CharField(choices=[('SCHEDULED', 'Запланировано'), ('CANCELLED', 'Отменено')], default='SCHEDULED', max_length=20)),
                ('cancel_reason', models.CharField(blank=True, max_length=255, null=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='classes_classsessions', to='tenants.organization', verbose_name='Организация')),
                ('template', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sessions', to='classes.classtemplate')),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='class_sessions', to='club_settings.location')),
                ('instructor_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='instructed_class_sessions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Занятие',
                'verbose_name_plural': 'Занятия',
                'ordering': ['start_datetime'],
                'indexes': [models.Index(fields=['organization', 'start_datetime'], name='session_org_start_idx')],
            },
        ),
        migrations.CreateModel(
            name='RosterEntry',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('status', models.CharField(choices=[('REGISTERED', 'Записан'), ('ATTENDED', 'Присутствовал'), ('NO_SHOW', 'Не пришёл'), ('CANCELLED_BY_STAFF', 'Отменено клубом'), ('CANCELLED_BY_MEMBER', 'Отменено клиентом')], default='REGISTERED', max_length=30)),
                ('note', models.TextField(blank=True, null=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='classes_rosterentrys', to='tenants.organization', verbose_name='Организация')),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='roster_entries', to='classes.classsession')),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='class_roster_entries', to='customers.customer')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Участник занятия',
                'verbose_name_plural': 'Участники занятий',
                'ordering': ['created_at'],
                'unique_together': {('session', 'customer')},
            },
        ),
    ]
