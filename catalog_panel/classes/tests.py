"""
Тесты занятий: генерация сессий из шаблона, пересоздание при изменении,
календарь, списки участников, справочники.

Запуск:
  python manage.py test classes -v2
"""
import datetime
from unittest.mock import patch
from zoneinfo import ZoneInfo

from django.test import SimpleTestCase

from accounts.models import User
from club_settings.models import Location
from core.exceptions import BadRequest
from core.testing import OrganizationAPITestCase
from customers.models import Customer
from tenants.models import OrganizationMembership
from .models import ClassSession, ClassTemplate, RosterEntry
from .services import ClassSessionsService, validate_schedule
from .session_generator import (
    generate_sessions,
    occurrence_dates,
    parse_hhmm,
    regenerate_future_sessions,
)
from .views import parse_range_value

TEMPLATES_URL = '/api/classes/templates/'
SESSIONS_URL = '/api/classes/sessions/'
LOOKUPS_URL = '/api/classes/lookups/'

D = datetime.date


class OccurrenceDatesTests(SimpleTestCase):

    def test_wednesdays_in_range(self):
        dates = list(occurrence_dates(D(2025, 1, 1), D(2025, 1, 15), [3]))
        self.assertEqual(dates, [D(2025, 1, 1), D(2025, 1, 8), D(2025, 1, 15)])

    def test_sunday_is_seven(self):
        dates = list(occurrence_dates(D(2025, 1, 1), D(2025, 1, 12), [7]))
        self.assertEqual(dates, [D(2025, 1, 5), D(2025, 1, 12)])

    def test_from_date_moves_cursor(self):
        dates = list(occurrence_dates(D(2025, 1, 1), D(2025, 1, 31), [3], from_date=D(2025, 1, 10)))
        self.assertEqual(dates, [D(2025, 1, 15), D(2025, 1, 22), D(2025, 1, 29)])

    def test_from_date_before_start_is_ignored(self):
        dates = list(occurrence_dates(D(2025, 1, 8), D(2025, 1, 8), [3], from_date=D(2024, 12, 1)))
        self.assertEqual(dates, [D(2025, 1, 8)])

    def test_open_ended_is_capped_by_horizon(self):
        dates = list(occurrence_dates(
            D(2025, 1, 1), None, [1, 2, 3, 4, 5, 6, 7], today=D(2025, 1, 1), horizon_days=6,
        ))
        self.assertEqual(len(dates), 7)
        self.assertEqual(dates[-1], D(2025, 1, 7))

    def test_open_ended_horizon_counts_from_today(self):
        dates = list(occurrence_dates(D(2025, 1, 1), None, [3], today=D(2025, 3, 1), horizon_days=7))
        self.assertEqual(dates[-1], D(2025, 3, 5))

    def test_no_matching_days(self):
        self.assertEqual(list(occurrence_dates(D(2025, 1, 1), D(2025, 1, 2), [5])), [])

    def test_parse_hhmm(self):
        self.assertEqual(parse_hhmm('07:30'), datetime.time(7, 30))
        self.assertEqual(parse_hhmm('23:05'), datetime.time(23, 5))


class ValidateScheduleTests(SimpleTestCase):

    def test_rules(self):
        cases = [
            ((D(2025, 1, 2), D(2025, 1, 1), [1], '10:00', '11:00'), 'End date must be on or after start date'),
            ((D(2025, 1, 1), None, [], '10:00', '11:00'), 'At least one day of week is required'),
            ((D(2025, 1, 1), None, [0], '10:00', '11:00'), 'Days of week must be between 1 and 7'),
            ((D(2025, 1, 1), None, [1], '10:00', '10:00'), 'End time must be after start time'),
        ]
        for args, message in cases:
            with self.subTest(message=message):
                with self.assertRaisesMessage(BadRequest, message):
                    validate_schedule(*args)

    def test_valid_schedule(self):
        validate_schedule(D(2025, 1, 1), D(2025, 1, 1), [3], '10:00', '11:00')


class ParseRangeValueTests(SimpleTestCase):

    def test_plain_date_stays_a_date(self):
        value = parse_range_value('2025-01-08', 'endDate')
        self.assertIs(type(value), datetime.date)
        self.assertEqual(value, D(2025, 1, 8))

    def test_datetime_is_parsed(self):
        value = parse_range_value('2025-01-08T12:30:00Z', 'endDate')
        self.assertEqual(value, datetime.datetime(2025, 1, 8, 12, 30, tzinfo=datetime.timezone.utc))

    def test_empty_and_invalid(self):
        self.assertIsNone(parse_range_value('', 'startDate'))
        with self.assertRaisesMessage(BadRequest, 'Invalid startDate'):
            parse_range_value('next week', 'startDate')


class ClassesTestCase(OrganizationAPITestCase):

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.location = Location.objects.create(organization=cls.organization, name='Main', code='MAIN')
        cls.instructor = User.objects.create_user(external_id='coach', email='coach@oakmont.test', name='Coach')
        OrganizationMembership.objects.create(
            organization=cls.organization, user=cls.instructor, role=OrganizationMembership.Role.ORG_STAFF,
        )

    def make_template(self, **overrides):
        values = {
            'organization': self.organization,
            'location': self.location,
            'name': 'Morning Yoga',
            'room': 'Studio A',
            'start_date': D(2025, 1, 1),
            'end_date': D(2025, 1, 31),
            'days_of_week': [3],
            'start_time': '10:00',
            'end_time': '11:00',
            'max_participants': 12,
            'primary_instructor_user': self.instructor,
            'instructor_display_name': 'Coach',
        }
        values.update(overrides)
        return ClassTemplate.objects.create(**values)

    def make_customer(self, organization=None, **overrides):
        values = {'first_name': 'Ann', 'last_name': 'Lee'}
        values.update(overrides)
        return Customer.objects.create(organization=organization or self.organization, **values)


class GenerateSessionsTests(ClassesTestCase):

    def test_sessions_copy_template_fields(self):
        template = self.make_template(end_date=D(2025, 1, 15))
        created = generate_sessions(template, today=D(2025, 1, 1))

        self.assertEqual(len(created), 3)
        sessions = list(ClassSession.objects.filter(template=template).order_by('start_datetime'))
        utc = datetime.timezone.utc
        self.assertEqual(
            [s.start_datetime for s in sessions],
            [datetime.datetime(2025, 1, day, 10, 0, tzinfo=utc) for day in (1, 8, 15)],
        )
        first = sessions[0]
        self.assertEqual(first.end_datetime, datetime.datetime(2025, 1, 1, 11, 0, tzinfo=utc))
        self.assertEqual(first.location_id, self.location.pk)
        self.assertEqual(first.room, 'Studio A')
        self.assertEqual(first.max_participants, 12)
        self.assertEqual(first.instructor_user_id, self.instructor.pk)
        self.assertEqual(first.instructor_display_name, 'Coach')
        self.assertEqual(first.status, ClassSession.Status.SCHEDULED)
        self.assertIsNone(first.cancel_reason)

    def test_times_use_organization_timezone(self):
        self.organization.timezone = 'America/New_York'
        self.organization.save()
        template = self.make_template(end_date=D(2025, 1, 1))

        generate_sessions(template, today=D(2025, 1, 1))

        session = ClassSession.objects.get(template=template)
        local = session.start_datetime.astimezone(ZoneInfo('America/New_York'))
        self.assertEqual((local.hour, local.minute), (10, 0))
        self.assertEqual(session.start_datetime.astimezone(datetime.timezone.utc).hour, 15)

    def test_nothing_to_generate_writes_nothing(self):
        template = self.make_template(start_date=D(2025, 1, 1), end_date=D(2025, 1, 2), days_of_week=[5])
        with self.assertNumQueries(0):
            created = generate_sessions(template, today=D(2025, 1, 1))
        self.assertEqual(created, [])


class RegenerateSessionsTests(ClassesTestCase):

    def setUp(self):
        super().setUp()
        self.template = self.make_template()
        generate_sessions(self.template, today=D(2025, 1, 1))
        self.customer = self.make_customer()
        self.rostered = ClassSession.objects.get(
            template=self.template, start_datetime__date=D(2025, 1, 22),
        )
        RosterEntry.objects.create(organization=self.organization, session=self.rostered, customer=self.customer)

    def starts(self):
        return sorted(
            (s.start_datetime.date(), s.start_datetime.strftime('%H:%M'))
            for s in ClassSession.objects.filter(template=self.template)
        )

    def test_keeps_past_and_rostered_sessions(self):
        past_ids = set(ClassSession.objects.filter(
            template=self.template, start_datetime__date__lt=D(2025, 1, 10),
        ).values_list('pk', flat=True))

        self.template.start_time = '09:00'
        self.template.end_time = '10:00'
        self.template.save()
        regenerate_future_sessions(self.template, today=D(2025, 1, 10))

        self.assertTrue(ClassSession.objects.filter(pk=self.rostered.pk).exists())
        self.assertEqual(
            past_ids,
            set(ClassSession.objects.filter(
                template=self.template, start_datetime__date__lt=D(2025, 1, 10),
            ).values_list('pk', flat=True)),
        )
        self.assertEqual(self.starts(), [
            (D(2025, 1, 1), '10:00'),
            (D(2025, 1, 8), '10:00'),
            (D(2025, 1, 15), '09:00'),
            (D(2025, 1, 22), '09:00'),
            (D(2025, 1, 22), '10:00'),
            (D(2025, 1, 29), '09:00'),
        ])

    def test_rostered_slot_is_not_duplicated(self):
        self.template.room = 'Studio B'
        self.template.save()
        regenerate_future_sessions(self.template, today=D(2025, 1, 10))

        sessions = ClassSession.objects.filter(template=self.template, start_datetime__date=D(2025, 1, 22))
        self.assertEqual(list(sessions), [self.rostered])
        self.assertEqual(
            ClassSession.objects.get(template=self.template, start_datetime__date=D(2025, 1, 15)).room,
            'Studio B',
        )
        self.assertEqual(ClassSession.objects.filter(template=self.template).count(), 5)


class ClassTemplateApiTests(ClassesTestCase):

    def payload(self, **overrides):
        data = {
            'location_id': str(self.location.pk),
            'name': 'Kids Swim',
            'program': 'Swim',
            'start_date': '2025-01-01',
            'end_date': '2025-01-15',
            'days_of_week': [3],
            'start_time': '16:00',
            'end_time': '17:00',
            'primary_instructor_user_id': self.instructor.pk,
            'tags': ['Kids'],
        }
        data.update(overrides)
        return data

    def test_create_generates_sessions(self):
        response = self.client.post(TEMPLATES_URL, self.payload(), format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['tags'], ['kids'])
        self.assertEqual(ClassSession.objects.filter(template_id=response.data['id']).count(), 3)

    def test_create_validation(self):
        cases = [
            ({'end_time': '15:00'}, 'End time must be after start time'),
            ({'end_date': '2024-12-31'}, 'End date must be on or after start date'),
        ]
        for overrides, message in cases:
            with self.subTest(message=message):
                response = self.client.post(TEMPLATES_URL, self.payload(**overrides), format='json')
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.data['detail'], message)

        response = self.client.post(TEMPLATES_URL, self.payload(start_time='7:5'), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('start_time', response.data)

        response = self.client.post(TEMPLATES_URL, self.payload(days_of_week=[8]), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('days_of_week', response.data)

    def test_create_with_foreign_instructor_is_400(self):
        outsider = User.objects.create_user(external_id='outsider')
        response = self.client.post(
            TEMPLATES_URL, self.payload(primary_instructor_user_id=outsider.pk), format='json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'Instructor is not a member of organization')

    def test_update_regenerates_from_today(self):
        template = self.make_template()
        generate_sessions(template, today=D(2025, 1, 1))

        with patch('classes.session_generator.organization_today', return_value=D(2025, 1, 10)):
            response = self.client.patch(
                f'{TEMPLATES_URL}{template.pk}/', {'start_time': '08:00', 'end_time': '09:00'}, format='json',
            )

        self.assertEqual(response.status_code, 200)
        times = {
            s.start_datetime.date(): s.start_datetime.strftime('%H:%M')
            for s in ClassSession.objects.filter(template=template)
        }
        self.assertEqual(times[D(2025, 1, 8)], '10:00')
        self.assertEqual(times[D(2025, 1, 15)], '08:00')

    def test_update_validates_merged_values(self):
        template = self.make_template()
        response = self.client.patch(f'{TEMPLATES_URL}{template.pk}/', {'end_time': '09:00'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'End time must be after start time')

    def test_list_filters(self):
        yoga = self.make_template(program='Yoga')
        self.make_template(name='Boxing', program='Boxing', is_active=False)

        response = self.client.get(TEMPLATES_URL, {'program': 'Yoga'})
        self.assertEqual([t['id'] for t in response.data], [str(yoga.pk)])

        response = self.client.get(TEMPLATES_URL, {'isActive': 'false'})
        self.assertEqual([t['name'] for t in response.data], ['Boxing'])

    def test_unknown_template_is_404(self):
        response = self.client.get(f'{TEMPLATES_URL}00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['detail'], 'Class template not found')


class ClassSessionApiTests(ClassesTestCase):

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.other_coach = User.objects.create_user(external_id='coach2', name='Second Coach')
        OrganizationMembership.objects.create(
            organization=cls.organization, user=cls.other_coach, role=OrganizationMembership.Role.ORG_STAFF,
        )

    def setUp(self):
        super().setUp()
        self.template = self.make_template(end_date=D(2025, 1, 15), program='Yoga')
        generate_sessions(self.template, today=D(2025, 1, 1))
        self.sessions = list(ClassSession.objects.filter(template=self.template).order_by('start_datetime'))

    def test_range_is_required(self):
        response = self.client.get(SESSIONS_URL, {'startDate': '2025-01-01'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'startDate and endDate are required')

    def test_range_end_date_is_inclusive(self):
        response = self.client.get(SESSIONS_URL, {'startDate': '2025-01-01', 'endDate': '2025-01-08'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([s['id'] for s in response.data], [str(s.pk) for s in self.sessions[:2]])
        self.assertEqual(response.data[0]['roster_count'], 0)
        self.assertEqual(response.data[0]['template']['program'], 'Yoga')

    def test_range_with_datetime_end_is_exact(self):
        response = self.client.get(SESSIONS_URL, {'startDate': '2025-01-01', 'endDate': '2025-01-08T10:30:00Z'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([s['id'] for s in response.data], [str(self.sessions[0].pk)])

    def test_instructor_filter_matches_session_or_template(self):
        override = self.sessions[1]
        override.instructor_user = self.other_coach
        override.save()

        sessions = ClassSessionsService.find_in_range(
            self.organization.pk, D(2025, 1, 1), D(2025, 1, 31), instructor_user_id=self.other_coach.pk,
        )
        self.assertEqual([s.pk for s in sessions], [override.pk])

        sessions = ClassSessionsService.find_in_range(
            self.organization.pk, D(2025, 1, 1), D(2025, 1, 31), instructor_user_id=self.instructor.pk,
        )
        self.assertEqual(len(sessions), 3)

    def test_program_and_status_filters(self):
        self.sessions[0].status = ClassSession.Status.CANCELLED
        self.sessions[0].save()

        response = self.client.get(SESSIONS_URL, {
            'startDate': '2025-01-01', 'endDate': '2025-01-31', 'program': 'Yoga', 'status': 'CANCELLED',
        })
        self.assertEqual([s['id'] for s in response.data], [str(self.sessions[0].pk)])

        response = self.client.get(SESSIONS_URL, {
            'startDate': '2025-01-01', 'endDate': '2025-01-31', 'program': 'Boxing',
        })
        self.assertEqual(response.data, [])

    def test_cancel_without_reason_sets_empty_string(self):
        session = self.sessions[0]
        response = self.client.patch(f'{SESSIONS_URL}{session.pk}/', {'status': 'CANCELLED'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['cancel_reason'], '')

    def test_cancel_keeps_previous_reason(self):
        session = self.sessions[0]
        session.cancel_reason = 'Snow storm'
        session.save()
        response = self.client.patch(f'{SESSIONS_URL}{session.pk}/', {'status': 'CANCELLED'}, format='json')
        self.assertEqual(response.data['cancel_reason'], 'Snow storm')

        response = self.client.patch(
            f'{SESSIONS_URL}{session.pk}/', {'status': 'CANCELLED', 'cancel_reason': 'Coach sick'}, format='json',
        )
        self.assertEqual(response.data['cancel_reason'], 'Coach sick')

    def test_instructor_override(self):
        session = self.sessions[0]
        response = self.client.patch(f'{SESSIONS_URL}{session.pk}/', {
            'instructor_user_id': self.other_coach.pk,
            'instructor_display_name': 'Second Coach',
            'room': 'Studio B',
        }, format='json')
        self.assertEqual(response.status_code, 200)
        session.refresh_from_db()
        self.assertEqual(session.instructor_user_id, self.other_coach.pk)
        self.assertEqual(session.room, 'Studio B')


class RosterApiTests(ClassesTestCase):

    def setUp(self):
        super().setUp()
        template = self.make_template(end_date=D(2025, 1, 1))
        generate_sessions(template, today=D(2025, 1, 1))
        self.session = ClassSession.objects.get(template=template)
        self.url = f'{SESSIONS_URL}{self.session.pk}/participants/'
        self.customer = self.make_customer()

    def test_add_existing_customer(self):
        response = self.client.post(self.url, {'customer_id': str(self.customer.pk)}, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['id'], str(self.session.pk))
        self.assertEqual(len(response.data['roster']), 1)
        entry = response.data['roster'][0]
        self.assertEqual(entry['status'], RosterEntry.Status.REGISTERED)
        self.assertEqual(entry['customer']['first_name'], 'Ann')
        self.assertEqual(entry['created_by_id'], self.user.pk)

    def test_customer_from_other_organization_is_403(self):
        stranger = self.make_customer(organization=self.other_organization)
        response = self.client.post(self.url, {'customer_id': str(stranger.pk)}, format='json')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['detail'], 'Customer not in organization')

    def test_duplicate_registration_is_409(self):
        self.client.post(self.url, {'customer_id': str(self.customer.pk)}, format='json')
        response = self.client.post(self.url, {'customer_id': str(self.customer.pk)}, format='json')
        self.assertEqual(response.status_code, 409)

    def test_add_new_customer(self):
        response = self.client.post(self.url, {
            'new_customer': {'first_name': 'New', 'last_name': 'Person', 'email': 'new@mail.test'},
        }, format='json')

        self.assertEqual(response.status_code, 201)
        customer = Customer.objects.get(first_name='New')
        self.assertEqual(customer.organization_id, self.organization.pk)
        self.assertEqual(customer.primary_email, 'new@mail.test')
        self.assertEqual(response.data['roster'][0]['customer_id'], customer.pk)

    def test_empty_payload_is_400(self):
        response = self.client.post(self.url, {}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_update_status_keeps_note(self):
        entry = RosterEntry.objects.create(
            organization=self.organization, session=self.session, customer=self.customer, note='Bring mat',
        )
        response = self.client.patch(f'{self.url}{entry.pk}/', {'status': 'ATTENDED'}, format='json')

        self.assertEqual(response.status_code, 200)
        entry.refresh_from_db()
        self.assertEqual(entry.status, RosterEntry.Status.ATTENDED)
        self.assertEqual(entry.note, 'Bring mat')
        self.assertEqual(entry.updated_by_id, self.user.pk)

    def test_remove_participant(self):
        entry = RosterEntry.objects.create(organization=self.organization, session=self.session, customer=self.customer)
        response = self.client.delete(f'{self.url}{entry.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['roster'], [])

    def test_unknown_entry_is_404(self):
        response = self.client.patch(
            f'{self.url}00000000-0000-0000-0000-000000000000/', {'status': 'NO_SHOW'}, format='json',
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['detail'], 'Roster entry not found')


class LookupApiTests(ClassesTestCase):

    def test_lookups(self):
        Location.objects.create(organization=self.organization, name='Closed', code='OLD', is_active=False)
        self.make_template(program='Yoga', room='Studio B')
        self.make_template(program='Boxing', room='Ring')
        self.make_template(program='Yoga', room=None)

        response = self.client.get(f'{LOOKUPS_URL}locations/')
        self.assertEqual([loc['code'] for loc in response.data], ['MAIN'])

        response = self.client.get(f'{LOOKUPS_URL}instructors/')
        # ORG_ADMIN из базового набора не инструктор
        self.assertEqual([i['id'] for i in response.data], [self.instructor.pk])

        response = self.client.get(f'{LOOKUPS_URL}programs/')
        self.assertEqual(response.data, ['Boxing', 'Yoga'])

        response = self.client.get(f'{LOOKUPS_URL}rooms/')
        self.assertEqual(response.data, ['Ring', 'Studio B'])
