"""
Сервисы занятий: шаблоны, сессии, списки участников, справочники для UI.
"""
import logging
from datetime import datetime, time

from django.db import transaction
from django.db.models import Count, Prefetch, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from club_settings.models import Location, MembershipPlan
from core.exceptions import BadRequest, ConflictError
from customers.models import Customer
from customers.services import CustomersService, normalize_tags
from tenants.models import Organization, OrganizationMembership
from .models import ClassSession, ClassTemplate, RosterEntry
from .session_generator import generate_sessions, parse_hhmm, regenerate_future_sessions

logger = logging.getLogger(__name__)

TEMPLATE_FIELDS = (
    'location_id', 'room', 'name', 'description', 'program', 'skill_level', 'tags',
    'start_date', 'end_date', 'days_of_week', 'start_time', 'end_time',
    'max_participants', 'access_type', 'drop_in_price_cents', 'currency',
    'min_age', 'max_age', 'age_label', 'members_only', 'prerequisite_label',
    'primary_instructor_user_id', 'instructor_display_name', 'is_active',
)


def validate_schedule(start_date, end_date, days_of_week, start_time, end_time):
    """Согласованность периода, дней недели и времени шаблона."""
    if end_date is not None and end_date < start_date:
        raise BadRequest('End date must be on or after start date')
    if not days_of_week:
        raise BadRequest('At least one day of week is required')
    if any(day not in range(1, 8) for day in days_of_week):
        raise BadRequest('Days of week must be between 1 and 7')
    if parse_hhmm(end_time) <= parse_hhmm(start_time):
        raise BadRequest('End time must be after start time')


def ensure_instructor(organization_id, user_id):
    """Инструктор должен быть сотрудником организации (None допустим)."""
    if user_id is None:
        return
    is_member = OrganizationMembership.objects.filter(
        organization_id=organization_id,
        user_id=user_id,
        role__in=OrganizationMembership.STAFF_ROLES,
    ).exists()
    if not is_member:
        raise BadRequest('Instructor is not a member of organization')


class ClassTemplatesService:

    @staticmethod
    def list_templates(organization_id, location_id=None, program=None, instructor_user_id=None, is_active=None):
        qs = ClassTemplate.objects.for_organization(organization_id)
        if location_id:
            qs = qs.filter(location_id=location_id)
        if program:
            qs = qs.filter(program=program)
        if instructor_user_id:
            qs = qs.filter(primary_instructor_user_id=instructor_user_id)
        if is_active is not None:
            qs = qs.filter(is_active=is_active)
        return (
            qs.select_related('location', 'primary_instructor_user')
            .prefetch_related('required_plans')
            .order_by('-created_at')
        )

    @staticmethod
    def get_template(organization_id, template_id):
        template = (
            ClassTemplate.objects.for_organization(organization_id)
            .select_related('organization', 'location', 'primary_instructor_user')
            .prefetch_related('required_plans')
            .filter(pk=template_id)
            .first()
        )
        if template is None:
            raise NotFound('Class template not found')
        return template

    @staticmethod
    def _check_references(organization_id, data):
        location_id = data.get('location_id')
        if location_id is not None and not Location.objects.for_organization(organization_id).filter(pk=location_id).exists():
            raise NotFound('Location not found')

        ensure_instructor(organization_id, data.get('primary_instructor_user_id'))

        plan_ids = data.get('required_plan_ids')
        if plan_ids:
            plans = list(MembershipPlan.objects.for_organization(organization_id).filter(pk__in=plan_ids))
            if len(plans) != len(set(plan_ids)):
                raise NotFound('Membership plan not found')
            return plans
        return []

    @classmethod
    def create_template(cls, organization_id, data):
        for field in ('location_id', 'name', 'start_date', 'days_of_week', 'start_time', 'end_time'):
            if data.get(field) in (None, '', []):
                raise BadRequest(f'{field} is required')
        validate_schedule(
            data['start_date'], data.get('end_date'), data['days_of_week'],
            data['start_time'], data['end_time'],
        )
        plans = cls._check_references(organization_id, data)

        values = {field: data[field] for field in TEMPLATE_FIELDS if field in data}
        values['tags'] = normalize_tags(values.get('tags'))

        with transaction.atomic():
            template = ClassTemplate.objects.create(organization_id=organization_id, **values)
            if plans:
                template.required_plans.set(plans)
            generate_sessions(template)

        logger.info(f'Class template {template.pk} created in organization {organization_id}')
        return cls.get_template(organization_id, template.pk)

    @classmethod
    def update_template(cls, organization_id, template_id, data):
        template = cls.get_template(organization_id, template_id)
        plans = cls._check_references(organization_id, data)

        for field in TEMPLATE_FIELDS:
            if field in data:
                value = normalize_tags(data[field]) if field == 'tags' else data[field]
                setattr(template, field, value)

        validate_schedule(
            template.start_date, template.end_date, template.days_of_week,
            template.start_time, template.end_time,
        )

        with transaction.atomic():
            template.save()
            if 'required_plan_ids' in data:
                template.required_plans.set(plans)
            regenerate_future_sessions(template)

        return cls.get_template(organization_id, template.pk)


class ClassSessionsService:

    @staticmethod
    def _range_bounds(organization_id, start, end):
        """
        Границы выборки. Дата без времени понимается в часовом поясе
        организации: start с начала дня, end до конца дня включительно.
        """
        organization = Organization.objects.filter(pk=organization_id).first()
        tz = organization.tzinfo if organization else timezone.get_current_timezone()

        def to_datetime(value, clock):
            if isinstance(value, datetime):
                return value if timezone.is_aware(value) else timezone.make_aware(value, tz)
            return timezone.make_aware(datetime.combine(value, clock), tz)

        return to_datetime(start, time.min), to_datetime(end, time.max)

    @classmethod
    def find_in_range(cls, organization_id, start, end, location_id=None, program=None,
                      instructor_user_id=None, room=None, status=None):
        if start is None or end is None:
            raise BadRequest('startDate and endDate are required')
        range_start, range_end = cls._range_bounds(organization_id, start, end)

        qs = ClassSession.objects.for_organization(organization_id).filter(
            start_datetime__gte=range_start,
            end_datetime__lte=range_end,
        )
        if location_id:
            qs = qs.filter(location_id=location_id)
        if instructor_user_id:
            qs = qs.filter(
                Q(instructor_user_id=instructor_user_id)
                | Q(template__primary_instructor_user_id=instructor_user_id)
            )
        if program:
            qs = qs.filter(template__program=program)
        if room:
            qs = qs.filter(room=room)
        if status:
            qs = qs.filter(status=status)

        return (
            qs.select_related('location', 'template', 'instructor_user')
            .annotate(roster_count=Count('roster_entries'))
            .order_by('start_datetime')
        )

    @staticmethod
    def get_session_with_roster(organization_id, session_id):
        session = (
            ClassSession.objects.for_organization(organization_id)
            .select_related('location', 'template', 'instructor_user')
            .prefetch_related(
                'template__required_plans',
                Prefetch(
                    'roster_entries',
                    queryset=RosterEntry.objects.select_related('customer').order_by('created_at'),
                ),
            )
            .filter(pk=session_id)
            .first()
        )
        if session is None:
            raise NotFound('Class session not found')
        return session

    @classmethod
    def update_session(cls, organization_id, session_id, data):
        session = ClassSession.objects.for_organization(organization_id).filter(pk=session_id).first()
        if session is None:
            raise NotFound('Class session not found')

        new_status = data.get('status')
        if new_status:
            session.status = new_status
            if new_status == ClassSession.Status.CANCELLED:
                reason = data.get('cancel_reason')
                if reason is None:
                    reason = session.cancel_reason if session.cancel_reason is not None else ''
                session.cancel_reason = reason

        if 'instructor_user_id' in data:
            ensure_instructor(organization_id, data['instructor_user_id'])
            session.instructor_user_id = data['instructor_user_id']

        for field in ('instructor_display_name', 'room', 'max_participants'):
            if field in data:
                setattr(session, field, data[field])

        session.save()
        logger.info(f'Class session {session.pk} updated (status={session.status})')
        return cls.get_session_with_roster(organization_id, session.pk)


class RosterService:
    """Участники занятия. Каждый вызов сначала проверяет сессию в организации."""

    @staticmethod
    def _get_session_or_404(organization_id, session_id):
        session = ClassSession.objects.for_organization(organization_id).filter(pk=session_id).first()
        if session is None:
            raise NotFound('Class session not found')
        return session

    @staticmethod
    def _ensure_customer_in_org(organization_id, customer_id):
        if not Customer.objects.for_organization(organization_id).filter(pk=customer_id).exists():
            raise PermissionDenied('Customer not in organization')

    @staticmethod
    def _get_entry_or_404(organization_id, session, entry_id):
        entry = RosterEntry.objects.for_organization(organization_id).filter(
            pk=entry_id, session=session,
        ).first()
        if entry is None:
            raise NotFound('Roster entry not found')
        return entry

    @classmethod
    def add_existing_participant(cls, organization_id, session_id, customer_id,
                                 status=RosterEntry.Status.REGISTERED, acting_user_id=None):
        session = cls._get_session_or_404(organization_id, session_id)
        cls._ensure_customer_in_org(organization_id, customer_id)
        if session.roster_entries.filter(customer_id=customer_id).exists():
            raise ConflictError('Customer is already on the roster')

        entry = RosterEntry.objects.create(
            organization_id=organization_id,
            session=session,
            customer_id=customer_id,
            status=status or RosterEntry.Status.REGISTERED,
            created_by_id=acting_user_id,
            updated_by_id=acting_user_id,
        )
        logger.info(f'Customer {customer_id} added to class session {session.pk}')
        return entry

    @classmethod
    def add_new_customer_and_participant(cls, organization_id, session_id, new_customer, acting_user_id=None):
        cls._get_session_or_404(organization_id, session_id)
        with transaction.atomic():
            customer = CustomersService.create_customer(organization_id, {
                'first_name': new_customer['first_name'],
                'last_name': new_customer['last_name'],
                'primary_email': new_customer.get('email'),
                'primary_phone': new_customer.get('phone'),
                'date_of_birth': new_customer.get('date_of_birth'),
            })
            return cls.add_existing_participant(
                organization_id, session_id, customer.pk,
                status=RosterEntry.Status.REGISTERED,
                acting_user_id=acting_user_id,
            )

    @classmethod
    def update_participant(cls, organization_id, session_id, entry_id, status, note=None, acting_user_id=None):
        session = cls._get_session_or_404(organization_id, session_id)
        entry = cls._get_entry_or_404(organization_id, session, entry_id)
        entry.status = status
        if note is not None:
            entry.note = note
        entry.updated_by_id = acting_user_id
        entry.save(update_fields=['status', 'note', 'updated_by', 'updated_at'])
        return entry

    @classmethod
    def remove_participant(cls, organization_id, session_id, entry_id):
        session = cls._get_session_or_404(organization_id, session_id)
        entry = cls._get_entry_or_404(organization_id, session, entry_id)
        entry.delete()


class ClassLookupsService:
    """Справочники для фильтров и форм календаря."""

    @staticmethod
    def locations(organization_id):
        return list(
            Location.objects.for_organization(organization_id)
            .filter(is_active=True)
            .order_by('name')
            .values('id', 'name', 'code')
        )

    @staticmethod
    def instructors(organization_id):
        memberships = (
            OrganizationMembership.objects
            .filter(organization_id=organization_id, role=OrganizationMembership.Role.ORG_STAFF)
            .select_related('user')
        )
        return [
            {'id': m.user.pk, 'name': m.user.name, 'email': m.user.email}
            for m in memberships
        ]

    @staticmethod
    def _distinct_values(organization_id, field):
        values = (
            ClassTemplate.objects.for_organization(organization_id)
            .exclude(**{f'{field}__isnull': True})
            .exclude(**{field: ''})
            .order_by(field)
            .values_list(field, flat=True)
            .distinct()
        )
        return sorted(set(values))

    @classmethod
    def programs(cls, organization_id):
        return cls._distinct_values(organization_id, 'program')

    @classmethod
    def rooms(cls, organization_id):
        return cls._distinct_values(organization_id, 'room')
