"""
Изоляция организаций: поиск по id означает поиск по id И организации.
Запись чужой организации для API выглядит как несуществующая (404).

Запуск:
  python manage.py test tenants.tests_isolation -v2
"""
import datetime

from django.utils import timezone

from classes.models import ClassSession, ClassTemplate
from club_settings.models import Location
from core.testing import OrganizationAPITestCase
from customers.models import Customer


class OrganizationIsolationTests(OrganizationAPITestCase):

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.own_location = Location.objects.create(organization=cls.organization, name='Main', code='MAIN')
        cls.foreign_location = Location.objects.create(
            organization=cls.other_organization, name='River', code='RIV',
        )
        cls.own_customer = Customer.objects.create(
            organization=cls.organization, first_name='Ann', last_name='Own',
        )
        cls.foreign_customer = Customer.objects.create(
            organization=cls.other_organization, first_name='Bob', last_name='Foreign',
        )
        template = ClassTemplate.objects.create(
            organization=cls.other_organization, location=cls.foreign_location,
            name='River Yoga', start_date=datetime.date(2025, 1, 1),
            days_of_week=[3], start_time='10:00', end_time='11:00',
        )
        start = timezone.now() + datetime.timedelta(days=1)
        cls.foreign_session = ClassSession.objects.create(
            organization=cls.other_organization, template=template, location=cls.foreign_location,
            start_datetime=start, end_datetime=start + datetime.timedelta(hours=1),
        )

    def test_queryset_without_organization_is_empty(self):
        self.assertFalse(Customer.objects.for_organization(None).exists())

    def test_customer_list_contains_only_own_organization(self):
        response = self.client.get('/api/customers/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual([c['id'] for c in response.data], [str(self.own_customer.pk)])

    def test_foreign_customer_is_not_found(self):
        response = self.client.get(f'/api/customers/{self.foreign_customer.pk}/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['detail'], 'Customer not found')

    def test_foreign_customer_cannot_be_updated(self):
        response = self.client.patch(
            f'/api/customers/{self.foreign_customer.pk}/', {'first_name': 'Hacked'}, format='json',
        )
        self.assertEqual(response.status_code, 404)
        self.foreign_customer.refresh_from_db()
        self.assertEqual(self.foreign_customer.first_name, 'Bob')

    def test_foreign_location_is_not_found(self):
        response = self.client.get(f'/api/settings/customers/locations/{self.foreign_location.pk}/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['detail'], 'Location not found')

    def test_foreign_location_cannot_be_used_as_primary_location(self):
        response = self.client.post('/api/customers/', {
            'first_name': 'Cid', 'last_name': 'New',
            'primary_location_id': str(self.foreign_location.pk),
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_foreign_session_is_not_found(self):
        response = self.client.get(f'/api/classes/sessions/{self.foreign_session.pk}/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['detail'], 'Class session not found')

    def test_own_customer_cannot_join_foreign_session(self):
        response = self.client.post(
            f'/api/classes/sessions/{self.foreign_session.pk}/participants/',
            {'customer_id': str(self.own_customer.pk)}, format='json',
        )
        self.assertEqual(response.status_code, 404)

    def test_invalid_uuid_in_path_is_404(self):
        response = self.client.get('/api/customers/not-a-uuid/')
        self.assertEqual(response.status_code, 404)
