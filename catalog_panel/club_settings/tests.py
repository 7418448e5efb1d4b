"""
Тесты настроек клуба: локации, тарифные планы, причины статусов.

Запуск:
  python manage.py test club_settings -v2
"""
from core.exceptions import BadRequest
from core.testing import OrganizationAPITestCase
from tenants.models import OrganizationMembership
from .models import Location, MembershipPlan, StatusReason
from .services import MembershipPlansService, StatusReasonsService

LOCATIONS_URL = '/api/settings/customers/locations/'
PLANS_URL = '/api/settings/customers/membership-plans/'
REASONS_URL = '/api/settings/customers/status-reasons/'


class LocationApiTests(OrganizationAPITestCase):

    def test_create_uppercases_code(self):
        response = self.client.post(LOCATIONS_URL, {'name': ' Main ', 'code': 'main'}, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['name'], 'Main')
        self.assertEqual(response.data['code'], 'MAIN')

    def test_create_requires_name_and_code(self):
        response = self.client.post(LOCATIONS_URL, {'code': 'X'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'Location name is required')

        response = self.client.post(LOCATIONS_URL, {'name': 'X'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'Location code is required')

    def test_update_and_delete(self):
        location = Location.objects.create(organization=self.organization, name='Old', code='OLD')
        response = self.client.patch(f'{LOCATIONS_URL}{location.pk}/', {'city': 'Austin'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['city'], 'Austin')

        response = self.client.delete(f'{LOCATIONS_URL}{location.pk}/')
        self.assertEqual(response.status_code, 204)
        self.assertFalse(Location.objects.filter(pk=location.pk).exists())


class StaffReadOnlySettingsTests(OrganizationAPITestCase):
    role = OrganizationMembership.Role.ORG_STAFF

    def test_staff_can_read(self):
        response = self.client.get(LOCATIONS_URL)
        self.assertEqual(response.status_code, 200)

    def test_staff_cannot_write(self):
        response = self.client.post(LOCATIONS_URL, {'name': 'Main', 'code': 'MAIN'}, format='json')
        self.assertEqual(response.status_code, 403)


class MembershipPlanValidationTests(OrganizationAPITestCase):

    def assertRejected(self, data, message):
        with self.assertRaisesMessage(BadRequest, message):
            MembershipPlansService.create_plan(self.organization.pk, data)

    def test_name_required(self):
        self.assertRejected({'name': '  ', 'price_cents': 100}, 'Plan name is required')

    def test_price_must_be_non_negative(self):
        self.assertRejected({'name': 'Gold', 'price_cents': -1}, 'Price must be greater than or equal to zero')
        self.assertRejected({'name': 'Gold'}, 'Price must be greater than or equal to zero')

    def test_fixed_term_requires_months(self):
        self.assertRejected(
            {'name': 'Gold', 'price_cents': 100, 'term_type': MembershipPlan.TermType.FIXED_TERM},
            'Fixed-term plans require a termMonths value',
        )

    def test_intro_period_requires_months(self):
        self.assertRejected(
            {'name': 'Gold', 'price_cents': 100, 'has_intro_period': True},
            'Introductory period requires introMonths',
        )

    def test_specific_locations_require_location(self):
        self.assertRejected(
            {'name': 'Gold', 'price_cents': 100, 'scope_type': MembershipPlan.ScopeType.SPECIFIC_LOCATIONS},
            'Location-scoped plans must include at least one locationId',
        )

    def test_foreign_location_is_rejected(self):
        foreign = Location.objects.create(organization=self.other_organization, name='R', code='R')
        self.assertRejected(
            {
                'name': 'Gold', 'price_cents': 100,
                'scope_type': MembershipPlan.ScopeType.SPECIFIC_LOCATIONS,
                'location_ids': [foreign.pk],
            },
            'Unknown locationId for organization',
        )


class MembershipPlanApiTests(OrganizationAPITestCase):

    def test_create_plan_with_locations(self):
        location = Location.objects.create(organization=self.organization, name='Main', code='MAIN')
        response = self.client.post(PLANS_URL, {
            'name': 'Family Gold',
            'price_cents': 9900,
            'term_type': 'FIXED_TERM',
            'term_months': 12,
            'scope_type': 'SPECIFIC_LOCATIONS',
            'location_ids': [str(location.pk)],
            'allows_family_membership': True,
            'max_family_size': 4,
        }, format='json')

        self.assertEqual(response.status_code, 201)
        plan = MembershipPlan.objects.get(pk=response.data['id'])
        self.assertEqual(plan.term_months, 12)
        self.assertEqual(plan.currency, 'USD')
        self.assertEqual(list(plan.locations.all()), [location])

    def test_switching_to_org_wide_clears_locations(self):
        location = Location.objects.create(organization=self.organization, name='Main', code='MAIN')
        plan = MembershipPlansService.create_plan(self.organization.pk, {
            'name': 'Silver', 'price_cents': 500,
            'scope_type': MembershipPlan.ScopeType.SPECIFIC_LOCATIONS,
            'location_ids': [location.pk],
        })

        response = self.client.patch(f'{PLANS_URL}{plan.pk}/', {'scope_type': 'ORG_WIDE'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(plan.locations.count(), 0)

    def test_evergreen_update_drops_term_months(self):
        plan = MembershipPlansService.create_plan(self.organization.pk, {
            'name': 'Term', 'price_cents': 500,
            'term_type': MembershipPlan.TermType.FIXED_TERM, 'term_months': 6,
        })
        MembershipPlansService.update_plan(self.organization.pk, plan.pk, {'term_type': 'EVERGREEN'})
        plan.refresh_from_db()
        self.assertIsNone(plan.term_months)

    def test_unknown_plan_is_404(self):
        response = self.client.get(f'{PLANS_URL}00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['detail'], 'Membership plan not found')


class StatusReasonTests(OrganizationAPITestCase):

    def test_sort_order_appends_within_type(self):
        first = StatusReasonsService.create_reason(self.organization.pk, {
            'type': StatusReason.ReasonType.CANCELLATION, 'label': 'Moved away',
        })
        second = StatusReasonsService.create_reason(self.organization.pk, {
            'type': StatusReason.ReasonType.CANCELLATION, 'label': 'Too expensive',
        })
        freeze = StatusReasonsService.create_reason(self.organization.pk, {
            'type': StatusReason.ReasonType.FREEZE, 'label': 'Injury',
        })
        self.assertEqual((first.sort_order, second.sort_order, freeze.sort_order), (1, 2, 1))

    def test_label_required(self):
        response = self.client.post(REASONS_URL, {'type': 'FREEZE', 'label': ' '}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'Reason label is required')

    def test_list_filters_by_type(self):
        StatusReason.objects.create(organization=self.organization, type='FREEZE', label='Travel', sort_order=1)
        StatusReason.objects.create(organization=self.organization, type='CANCELLATION', label='Price', sort_order=1)

        response = self.client.get(REASONS_URL, {'type': 'FREEZE'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([r['label'] for r in response.data], ['Travel'])
