"""
Management command для локального окружения: пользователь, организация,
членство и основная локация. Повторный запуск обновляет те же записи.

Использование:
    SEED_CLERK_USER_ID=user_123 python manage.py seed_catalog

Переменные окружения:
    SEED_CLERK_USER_ID (обязательна), SEED_USER_EMAIL, SEED_USER_NAME,
    SEED_ORG_NAME, SEED_ORG_SLUG, SEED_ORG_ROLE,
    SEED_LOCATION_NAME, SEED_LOCATION_CODE
"""
import os

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.models import User
from club_settings.models import Location
from tenants.models import Organization, OrganizationMembership


class Command(BaseCommand):
    help = 'Создать (или обновить) пользователя, организацию и локацию для разработки'

    def handle(self, *args, **options):
        external_id = os.environ.get('SEED_CLERK_USER_ID')
        if not external_id:
            raise CommandError('Missing required environment variable: SEED_CLERK_USER_ID')

        email = os.environ.get('SEED_USER_EMAIL', 'staff@example.com')
        name = os.environ.get('SEED_USER_NAME', 'Local Staff')
        org_name = os.environ.get('SEED_ORG_NAME', 'Local Club')
        org_slug = os.environ.get('SEED_ORG_SLUG', 'localclub')
        role = os.environ.get('SEED_ORG_ROLE', OrganizationMembership.Role.ORG_ADMIN)
        location_name = os.environ.get('SEED_LOCATION_NAME', 'Main Clubhouse')
        location_code = os.environ.get('SEED_LOCATION_CODE', 'MAIN').upper()

        if role not in OrganizationMembership.Role.values:
            raise CommandError(f'Unknown SEED_ORG_ROLE: {role}')

        self.stdout.write('Seeding user + organization context...')

        with transaction.atomic():
            user, _ = User.objects.update_or_create(
                external_id=external_id,
                defaults={'email': email, 'name': name},
            )
            organization, _ = Organization.objects.update_or_create(
                slug=org_slug,
                defaults={'name': org_name},
            )
            OrganizationMembership.objects.update_or_create(
                organization=organization,
                user=user,
                defaults={'role': role},
            )
            location, _ = Location.objects.update_or_create(
                organization=organization,
                code=location_code,
                defaults={'name': location_name, 'is_active': True},
            )

        self.stdout.write(self.style.SUCCESS('Seed complete'))
        self.stdout.write(f'User: {user.email} ({user.external_id})')
        self.stdout.write(f'Organization: {organization.name} ({organization.slug}), role {role}')
        self.stdout.write(f'Location: {location.name} ({location.code})')
