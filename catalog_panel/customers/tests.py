"""
Тесты клиентов: CRUD и фильтры списка, семьи, абонементы, коммуникации, файлы.

Запуск:
  python manage.py test customers -v2
"""
import datetime
from unittest.mock import MagicMock

from django.core import mail
from django.test import SimpleTestCase, override_settings

from club_settings.models import Location, MembershipPlan, StatusReason
from core.exceptions import BadRequest, ServiceMisconfigured
from core.testing import OrganizationAPITestCase
from .comms_service import CommsService
from .models import (
    BillingEvent,
    Customer,
    CustomerFile,
    CustomerMembership,
    EmailMessage,
    Household,
    Interaction,
    SmsMessage,
)
from .services import CustomersService, normalize_tags
from .storage_service import FilesService

CUSTOMERS_URL = '/api/customers/'


class NormalizeTagsTests(SimpleTestCase):

    def test_strip_lower_dedupe(self):
        self.assertEqual(normalize_tags([' VIP ', 'vip', 'Kids', '']), ['vip', 'kids'])
        self.assertEqual(normalize_tags(None), [])


class CustomerApiTests(OrganizationAPITestCase):

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.location = Location.objects.create(organization=cls.organization, name='Main', code='MAIN')
        cls.plan = MembershipPlan.objects.create(organization=cls.organization, name='Gold', price_cents=100)

    def test_create_customer_normalizes_tags(self):
        response = self.client.post(CUSTOMERS_URL, {
            'first_name': 'Ann', 'last_name': 'Lee',
            'primary_location_id': str(self.location.pk),
            'tags': ['VIP', ' Kids '],
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['tags'], ['vip', 'kids'])
        self.assertEqual(response.data['status'], Customer.Status.LEAD)
        self.assertEqual(response.data['primary_location']['name'], 'Main')
        self.assertIsNone(response.data['latest_membership'])

    def test_create_requires_names(self):
        response = self.client.post(CUSTOMERS_URL, {'first_name': 'Ann'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('last_name', response.data)

    def test_partial_update(self):
        customer = Customer.objects.create(organization=self.organization, first_name='Ann', last_name='Lee')
        response = self.client.patch(
            f'{CUSTOMERS_URL}{customer.pk}/', {'status': 'ACTIVE', 'can_sms': False}, format='json',
        )
        self.assertEqual(response.status_code, 200)
        customer.refresh_from_db()
        self.assertEqual(customer.status, Customer.Status.ACTIVE)
        self.assertFalse(customer.can_sms)

    def test_list_filters(self):
        org = self.organization
        ann = Customer.objects.create(
            organization=org, first_name='Ann', last_name='Lee', status='ACTIVE',
            primary_location=self.location, tags=['vip'],
        )
        bob = Customer.objects.create(
            organization=org, first_name='Bob', last_name='Stone', status='LEAD',
            primary_email='bob@mail.test', tags=['kids', 'swim'],
        )
        Customer.objects.create(organization=org, first_name='Cy', last_name='Park', status='FORMER')
        CustomerMembership.objects.create(
            organization=org, head_customer=ann, membership_plan=self.plan,
            start_date=datetime.date(2025, 1, 1),
        )

        def ids(params):
            response = self.client.get(CUSTOMERS_URL, params)
            self.assertEqual(response.status_code, 200)
            return {c['id'] for c in response.data}

        self.assertEqual(ids({'search': 'bob@'}), {str(bob.pk)})
        self.assertEqual(ids({'status': 'active,lead'}), {str(ann.pk), str(bob.pk)})
        self.assertEqual(ids({'locationIds': str(self.location.pk)}), {str(ann.pk)})
        self.assertEqual(ids({'tags': 'VIP,swim'}), {str(ann.pk), str(bob.pk)})
        self.assertEqual(ids({'tags': 'swim'}), {str(bob.pk)})
        self.assertEqual(ids({'hasMembership': 'true'}), {str(ann.pk)})
        self.assertNotIn(str(ann.pk), ids({'hasMembership': 'false'}))
        self.assertEqual(ids({'membershipPlanIds': str(self.plan.pk)}), {str(ann.pk)})

    def test_tag_filter_does_not_match_substrings(self):
        Customer.objects.create(
            organization=self.organization, first_name='Dee', last_name='V', tags=['vipplus'],
        )
        qs = CustomersService.list_customers(self.organization.pk, tags=['vip'])
        self.assertFalse(qs.exists())

    def test_invalid_location_filter_is_400(self):
        response = self.client.get(CUSTOMERS_URL, {'locationId': 'nope'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'Invalid locationId')

    def test_latest_membership_in_payload(self):
        customer = Customer.objects.create(organization=self.organization, first_name='Ann', last_name='Lee')
        older = CustomerMembership.objects.create(
            organization=self.organization, head_customer=customer, membership_plan=self.plan,
            start_date=datetime.date(2025, 1, 1), status='CANCELLED',
        )
        CustomerMembership.objects.filter(pk=older.pk).update(
            created_at=older.created_at - datetime.timedelta(days=30),
        )
        latest = CustomerMembership.objects.create(
            organization=self.organization, head_customer=customer, membership_plan=self.plan,
            start_date=datetime.date(2025, 6, 1),
        )

        response = self.client.get(f'{CUSTOMERS_URL}{customer.pk}/')

        self.assertEqual(response.data['latest_membership']['id'], str(latest.pk))

    def test_summary(self):
        customer = Customer.objects.create(organization=self.organization, first_name='Ann', last_name='Lee')
        BillingEvent.objects.create(
            organization=self.organization, customer=customer,
            date=datetime.datetime(2025, 1, 1, tzinfo=datetime.timezone.utc),
            description='January', amount_cents=5000,
        )

        response = self.client.get(f'{CUSTOMERS_URL}{customer.pk}/summary/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['customer']['id'], str(customer.pk))
        self.assertIsNone(response.data['household'])
        self.assertIsNone(response.data['membership'])
        self.assertEqual(len(response.data['billing_events']), 1)


class HouseholdTests(OrganizationAPITestCase):

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.head = Customer.objects.create(organization=cls.organization, first_name='Pat', last_name='Head')
        cls.kid = Customer.objects.create(organization=cls.organization, first_name='Kim', last_name='Head')

    def test_create_household_once(self):
        url = f'{CUSTOMERS_URL}{self.head.pk}/household/'
        response = self.client.post(url)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['head_customer_id'], self.head.pk)

        response = self.client.post(url)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['detail'], 'Head customer already has a household')

    def test_get_household_when_missing(self):
        response = self.client.get(f'{CUSTOMERS_URL}{self.head.pk}/household/')
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.data)

    def test_add_and_remove_member(self):
        Household.objects.create(organization=self.organization, head_customer=self.head)
        members_url = f'{CUSTOMERS_URL}{self.head.pk}/household/members/'

        response = self.client.post(members_url, {'customer_id': str(self.kid.pk), 'relationship': 'child'}, format='json')
        self.assertEqual(response.status_code, 201)
        member_id = response.data['id']

        response = self.client.post(members_url, {'customer_id': str(self.kid.pk)}, format='json')
        self.assertEqual(response.status_code, 409)

        response = self.client.get(f'{CUSTOMERS_URL}{self.head.pk}/household/')
        self.assertEqual([m['customer_id'] for m in response.data['members']], [self.kid.pk])

        response = self.client.delete(f'{members_url}{member_id}/')
        self.assertEqual(response.status_code, 204)

    def test_member_from_other_organization_is_404(self):
        Household.objects.create(organization=self.organization, head_customer=self.head)
        stranger = Customer.objects.create(organization=self.other_organization, first_name='X', last_name='Y')
        response = self.client.post(
            f'{CUSTOMERS_URL}{self.head.pk}/household/members/', {'customer_id': str(stranger.pk)}, format='json',
        )
        self.assertEqual(response.status_code, 404)


class CustomerMembershipTests(OrganizationAPITestCase):

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.customer = Customer.objects.create(organization=cls.organization, first_name='Ann', last_name='Lee')
        cls.plan = MembershipPlan.objects.create(organization=cls.organization, name='Gold', price_cents=100)
        cls.reason = StatusReason.objects.create(
            organization=cls.organization, type='CANCELLATION', label='Moved', sort_order=1,
        )

    def test_assign_defaults(self):
        response = self.client.post(
            f'{CUSTOMERS_URL}{self.customer.pk}/membership/',
            {'membership_plan_id': str(self.plan.pk)}, format='json',
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['status'], CustomerMembership.Status.ACTIVE)
        self.assertIsNotNone(response.data['start_date'])
        self.assertEqual(response.data['membership_plan_name'], 'Gold')

    def test_assign_foreign_plan_is_404(self):
        foreign_plan = MembershipPlan.objects.create(organization=self.other_organization, name='X', price_cents=1)
        response = self.client.post(
            f'{CUSTOMERS_URL}{self.customer.pk}/membership/',
            {'membership_plan_id': str(foreign_plan.pk)}, format='json',
        )
        self.assertEqual(response.status_code, 404)

    def test_cancel_with_reason(self):
        membership = CustomerMembership.objects.create(
            organization=self.organization, head_customer=self.customer, membership_plan=self.plan,
            start_date=datetime.date(2025, 1, 1),
        )
        response = self.client.patch(
            f'{CUSTOMERS_URL}{self.customer.pk}/membership/{membership.pk}/',
            {'status': 'CANCELLED', 'cancel_reason_id': str(self.reason.pk), 'end_date': '2025-03-01'},
            format='json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['cancel_reason_label'], 'Moved')
        self.assertEqual(response.data['end_date'], '2025-03-01')

    def test_update_unknown_membership_is_404(self):
        response = self.client.patch(
            f'{CUSTOMERS_URL}{self.customer.pk}/membership/00000000-0000-0000-0000-000000000000/',
            {'status': 'FROZEN'}, format='json',
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['detail'], 'Membership not found')


class InteractionTests(OrganizationAPITestCase):

    def test_log_and_list(self):
        customer = Customer.objects.create(organization=self.organization, first_name='Ann', last_name='Lee')
        url = f'{CUSTOMERS_URL}{customer.pk}/interactions/'

        response = self.client.post(url, {
            'interaction_type': 'CALL', 'channel': 'PHONE', 'title': 'Follow-up call',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['created_by_id'], self.user.pk)
        self.assertEqual(response.data['body'], '')

        response = self.client.get(url)
        self.assertEqual([i['title'] for i in response.data], ['Follow-up call'])


@override_settings(
    EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend',
    DEFAULT_FROM_EMAIL='club@oakmont.test',
)
class CommsTests(OrganizationAPITestCase):

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.customer = Customer.objects.create(organization=cls.organization, first_name='Ann', last_name='Lee')

    def test_send_email_logs_message_and_interaction(self):
        response = self.client.post(f'{CUSTOMERS_URL}{self.customer.pk}/email/', {
            'to': 'ann@mail.test', 'subject': 'Welcome', 'body': '<p>Hello</p>',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['ann@mail.test'])
        self.assertEqual(mail.outbox[0].body, 'Hello')

        email = EmailMessage.objects.get(pk=response.data['id'])
        self.assertEqual(email.status, EmailMessage.Status.SENT)
        self.assertTrue(email.provider_message_id)
        interaction = Interaction.objects.get(related_email=email)
        self.assertEqual(interaction.interaction_type, Interaction.InteractionType.EMAIL)
        self.assertEqual(interaction.title, 'Welcome')

    def test_send_email_without_sender_is_500(self):
        with override_settings(DEFAULT_FROM_EMAIL=''):
            with self.assertRaisesMessage(ServiceMisconfigured, 'Email sender is not configured'):
                CommsService().send_email(
                    self.organization.pk, self.customer.pk, self.user.pk,
                    to='ann@mail.test', subject='S', body='B',
                )
        self.assertFalse(EmailMessage.objects.exists())

    def test_send_sms_is_stubbed(self):
        response = self.client.post(f'{CUSTOMERS_URL}{self.customer.pk}/sms/', {
            'to': '+15550001111', 'body': 'See you today',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['status'], SmsMessage.Status.STUB_SENT)
        interaction = Interaction.objects.get(related_sms_id=response.data['id'])
        self.assertEqual(interaction.title, 'SMS sent')
        self.assertEqual(interaction.channel, Interaction.Channel.SMS)


@override_settings(S3_BUCKET='catalog-files')
class FilesTests(OrganizationAPITestCase):

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.customer = Customer.objects.create(organization=cls.organization, first_name='Ann', last_name='Lee')

    def test_build_key_layout(self):
        key = FilesService.build_key('org', 'cust', 'my waiver form.pdf')
        self.assertTrue(key.startswith('customers/org/cust/'))
        self.assertTrue(key.endswith('-my-waiver-form.pdf'))

    def test_create_upload_url_uses_presigned_put(self):
        s3 = MagicMock()
        s3.generate_presigned_url.return_value = 'https://s3.test/upload'
        result = FilesService(s3_client=s3).create_upload_url(
            self.organization.pk, self.customer.pk, 'waiver.pdf', 'application/pdf', 1234,
        )

        self.assertEqual(result['upload_url'], 'https://s3.test/upload')
        args, kwargs = s3.generate_presigned_url.call_args
        self.assertEqual(args[0], 'put_object')
        self.assertEqual(kwargs['Params']['Bucket'], 'catalog-files')
        self.assertEqual(kwargs['Params']['Key'], result['key'])
        self.assertEqual(kwargs['ExpiresIn'], 600)

    def test_missing_bucket(self):
        with override_settings(S3_BUCKET=''):
            with self.assertRaisesMessage(ServiceMisconfigured, 'File storage bucket is not configured'):
                FilesService(s3_client=MagicMock()).create_upload_url(
                    self.organization.pk, self.customer.pk, 'a.pdf', 'application/pdf', 1,
                )

    def test_confirm_upload_and_list(self):
        key = FilesService.build_key(self.organization.pk, self.customer.pk, 'waiver.pdf')
        response = self.client.post(f'{CUSTOMERS_URL}{self.customer.pk}/files/confirm/', {
            'key': key, 'file_name': 'waiver.pdf', 'category': 'WAIVER',
            'content_type': 'application/pdf', 'size_bytes': 1234,
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['uploaded_by_id'], self.user.pk)

        response = self.client.get(f'{CUSTOMERS_URL}{self.customer.pk}/files/')
        self.assertEqual([f['s3_key'] for f in response.data], [key])

    def test_confirm_rejects_foreign_key(self):
        with self.assertRaisesMessage(BadRequest, 'Invalid file key'):
            FilesService.confirm_upload(
                self.organization.pk, self.customer.pk, self.user.pk,
                key='customers/other/prefix/file.pdf', file_name='file.pdf', category='OTHER',
                content_type='application/pdf', size_bytes=1,
            )
        self.assertFalse(CustomerFile.objects.exists())
