"""
Тесты определения организации: slug из хоста / заголовка, членство, роли.

Запуск:
  python manage.py test tenants -v2
"""
import os
from io import StringIO
from unittest.mock import MagicMock, patch

from django.core.management import call_command
from django.core.exceptions import ValidationError
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework.exceptions import AuthenticationFailed, NotFound, PermissionDenied
from rest_framework.test import APIClient

from accounts.models import User
from club_settings.models import Location
from core.testing import OrganizationAPITestCase
from .context import clear_current_organization, get_current_organization, set_current_organization
from .models import Organization, OrganizationMembership
from .services import OrganizationsService


class ExtractSubdomainTests(TestCase):

    def test_platform_domain_subdomain(self):
        service = OrganizationsService(platform_domain='catalog.app')
        self.assertEqual(service.extract_subdomain('oakmont.catalog.app'), 'oakmont')
        self.assertEqual(service.extract_subdomain('Oakmont.Catalog.App:8443'), 'oakmont')

    def test_platform_domain_itself_has_no_slug(self):
        service = OrganizationsService(platform_domain='catalog.app')
        self.assertIsNone(service.extract_subdomain('catalog.app'))

    def test_hostname_ending_with_domain_without_dot(self):
        service = OrganizationsService(platform_domain='catalog.app')
        self.assertIsNone(service.extract_subdomain('mycatalog.app'))

    def test_without_platform_domain_takes_first_label(self):
        service = OrganizationsService(platform_domain='')
        self.assertEqual(service.extract_subdomain('oakmont.example.com'), 'oakmont')
        self.assertEqual(service.extract_subdomain('oakmont.localhost:5173'), 'oakmont')

    def test_single_label_and_empty_hosts(self):
        service = OrganizationsService(platform_domain='')
        self.assertIsNone(service.extract_subdomain('localhost'))
        self.assertIsNone(service.extract_subdomain('localhost:3000'))
        self.assertIsNone(service.extract_subdomain(''))
        self.assertIsNone(service.extract_subdomain(None))

    def test_foreign_host_with_platform_domain_falls_back_to_first_label(self):
        service = OrganizationsService(platform_domain='catalog.app')
        self.assertEqual(service.extract_subdomain('club.other.com'), 'club')


class ResolveSlugTests(TestCase):

    def test_header_wins_over_host(self):
        service = OrganizationsService(platform_domain='catalog.app')
        self.assertEqual(service.resolve_slug('oakmont.catalog.app', ' riverside '), 'riverside')

    def test_blank_header_is_ignored(self):
        service = OrganizationsService(platform_domain='catalog.app')
        self.assertEqual(service.resolve_slug('oakmont.catalog.app', '   '), 'oakmont')


class ResolveForRequestTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.organization = Organization.objects.create(slug='oakmont', name='Oakmont')
        cls.staff = User.objects.create_user(external_id='staff')
        cls.customer_user = User.objects.create_user(external_id='customer')
        cls.outsider = User.objects.create_user(external_id='outsider')
        OrganizationMembership.objects.create(organization=cls.organization, user=cls.staff)
        OrganizationMembership.objects.create(
            organization=cls.organization, user=cls.customer_user,
            role=OrganizationMembership.Role.CUSTOMER,
        )

    def setUp(self):
        self.service = OrganizationsService(platform_domain='catalog.app')

    def test_staff_member_resolves(self):
        organization, membership = self.service.resolve_for_request(self.staff, 'oakmont.catalog.app')
        self.assertEqual(organization, self.organization)
        self.assertEqual(membership.role, OrganizationMembership.Role.ORG_STAFF)

    def test_missing_slug_is_401(self):
        with self.assertRaisesMessage(AuthenticationFailed, 'Tenant host missing'):
            self.service.resolve_for_request(self.staff, 'localhost:3000')

    def test_unknown_slug_is_404(self):
        with self.assertRaisesMessage(NotFound, 'Organization not found'):
            self.service.resolve_for_request(self.staff, 'localhost', explicit_slug='nowhere')

    def test_customer_role_is_403(self):
        with self.assertRaisesMessage(PermissionDenied, 'User is not authorized for organization'):
            self.service.resolve_for_request(self.customer_user, 'oakmont.catalog.app')

    def test_non_member_is_403(self):
        with self.assertRaisesMessage(PermissionDenied, 'User is not authorized for organization'):
            self.service.resolve_for_request(self.outsider, 'oakmont.catalog.app')


class OrganizationContextTests(TestCase):

    def test_set_get_clear(self):
        organization = MagicMock()
        set_current_organization(organization)
        self.assertIs(get_current_organization(), organization)
        clear_current_organization()
        self.assertIsNone(get_current_organization())


class CurrentOrganizationViewTests(OrganizationAPITestCase):

    def test_header_selects_organization(self):
        response = self.client.get('/api/organizations/current/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['slug'], 'oakmont')
        self.assertEqual(response.data['role'], OrganizationMembership.Role.ORG_ADMIN)

    def test_subdomain_selects_organization(self):
        client = self.make_client(slug=None)
        response = client.get('/api/organizations/current/', HTTP_HOST='oakmont.catalog.app')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['slug'], 'oakmont')

    def test_no_tenant_is_401(self):
        client = self.make_client(slug=None)
        response = client.get('/api/organizations/current/', HTTP_HOST='localhost')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['detail'], 'Tenant host missing')

    def test_other_organization_is_403(self):
        client = self.make_client(slug='riverside')
        response = client.get('/api/organizations/current/')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['detail'], 'User is not authorized for organization')

    def test_unknown_organization_is_404(self):
        client = self.make_client(slug='nowhere')
        response = client.get('/api/organizations/current/')
        self.assertEqual(response.status_code, 404)

    def test_missing_token_is_401_before_tenant_lookup(self):
        response = APIClient().get(
            '/api/organizations/current/', HTTP_X_CATALOG_ORGANIZATION='nowhere',
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['detail'], 'Missing Authorization header')

    def test_context_is_cleared_after_response(self):
        self.client.get('/api/organizations/current/')
        self.assertIsNone(get_current_organization())


class SeedCatalogCommandTests(TestCase):

    env = {
        'SEED_CLERK_USER_ID': 'user_seed',
        'SEED_USER_EMAIL': 'seed@club.test',
        'SEED_ORG_SLUG': 'seedclub',
        'SEED_LOCATION_CODE': 'hq',
    }

    def test_requires_user_id(self):
        with patch.dict(os.environ, {'SEED_CLERK_USER_ID': ''}):
            with self.assertRaisesMessage(CommandError, 'SEED_CLERK_USER_ID'):
                call_command('seed_catalog', stdout=StringIO())

    def test_rejects_unknown_role(self):
        with patch.dict(os.environ, {**self.env, 'SEED_ORG_ROLE': 'OWNER'}):
            with self.assertRaisesMessage(CommandError, 'Unknown SEED_ORG_ROLE: OWNER'):
                call_command('seed_catalog', stdout=StringIO())

    def test_seed_is_idempotent(self):
        with patch.dict(os.environ, self.env):
            call_command('seed_catalog', stdout=StringIO())
            out = StringIO()
            call_command('seed_catalog', stdout=out)

        self.assertIn('Seed complete', out.getvalue())
        membership = OrganizationMembership.objects.get(user__external_id='user_seed')
        self.assertEqual(membership.organization.slug, 'seedclub')
        self.assertEqual(membership.role, OrganizationMembership.Role.ORG_ADMIN)
        self.assertEqual(Location.objects.get(organization=membership.organization).code, 'HQ')
        self.assertEqual(User.objects.filter(external_id='user_seed').count(), 1)


class OrganizationTimezoneTests(TestCase):

    def test_valid_timezone(self):
        organization = Organization.objects.create(slug='berlin', name='Berlin', timezone='Europe/Berlin')
        self.assertEqual(organization.tzinfo.key, 'Europe/Berlin')
        organization.full_clean()

    def test_unknown_timezone_is_rejected(self):
        organization = Organization(slug='mars', name='Mars', timezone='Mars/Olympus_Mons')
        with self.assertRaisesMessage(ValidationError, 'Unknown timezone: Mars/Olympus_Mons'):
            organization.full_clean()
        with self.assertRaises(ValidationError):
            organization.save()
        self.assertFalse(Organization.objects.filter(slug='mars').exists())
