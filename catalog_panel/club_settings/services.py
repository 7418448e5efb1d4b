"""
Сервисы настроек клуба. Все методы принимают organization_id явно:
любой поиск по id означает поиск по id И организации.
"""
import logging

from django.db import transaction
from rest_framework.exceptions import NotFound

from core.exceptions import BadRequest
from .models import Location, MembershipPlan, StatusReason

logger = logging.getLogger(__name__)

_MISSING = object()


def _clean_text(value):
    return value.strip() if isinstance(value, str) else value


class LocationsService:
    """Локации клуба"""

    @staticmethod
    def list_locations(organization_id):
        return Location.objects.for_organization(organization_id).order_by('name')

    @staticmethod
    def get_location(organization_id, location_id):
        location = Location.objects.for_organization(organization_id).filter(pk=location_id).first()
        if location is None:
            raise NotFound('Location not found')
        return location

    @staticmethod
    def create_location(organization_id, data):
        name = _clean_text(data.get('name') or '')
        code = _clean_text(data.get('code') or '')
        if not name:
            raise BadRequest('Location name is required')
        if not code:
            raise BadRequest('Location code is required')

        location = Location.objects.create(
            organization_id=organization_id,
            name=name,
            code=code.upper(),
            address_line1=data.get('address_line1'),
            address_line2=data.get('address_line2'),
            city=data.get('city'),
            state=data.get('state'),
            postal_code=data.get('postal_code'),
            country=data.get('country'),
            is_active=data.get('is_active', True),
        )
        logger.info(f'Location {location.code} created in organization {organization_id}')
        return location

    @classmethod
    def update_location(cls, organization_id, location_id, data):
        location = cls.get_location(organization_id, location_id)

        if 'name' in data:
            name = _clean_text(data['name'] or '')
            if not name:
                raise BadRequest('Location name cannot be empty')
            location.name = name
        if 'code' in data:
            code = _clean_text(data['code'] or '')
            if not code:
                raise BadRequest('Location code cannot be empty')
            location.code = code.upper()

        for field in ('address_line1', 'address_line2', 'city', 'state', 'postal_code', 'country', 'is_active'):
            if field in data:
                setattr(location, field, data[field])

        location.save()
        return location

    @classmethod
    def delete_location(cls, organization_id, location_id):
        location = cls.get_location(organization_id, location_id)
        location.delete()


class MembershipPlansService:
    """Тарифные планы. Создание/изменение вместе со связями на локации в одной транзакции."""

    @staticmethod
    def list_plans(organization_id):
        return (
            MembershipPlan.objects.for_organization(organization_id)
            .prefetch_related('locations')
            .order_by('-created_at')
        )

    @staticmethod
    def get_plan(organization_id, plan_id):
        plan = (
            MembershipPlan.objects.for_organization(organization_id)
            .prefetch_related('locations')
            .filter(pk=plan_id)
            .first()
        )
        if plan is None:
            raise NotFound('Membership plan not found')
        return plan

    @staticmethod
    def _resolve_locations(organization_id, location_ids):
        location_ids = list(dict.fromkeys(location_ids or []))
        locations = list(Location.objects.for_organization(organization_id).filter(pk__in=location_ids))
        if len(locations) != len(location_ids):
            raise BadRequest('Unknown locationId for organization')
        return locations

    @staticmethod
    def _validate_create(data):
        name = data.get('name')
        if not name or not name.strip():
            raise BadRequest('Plan name is required')
        price = data.get('price_cents')
        if price is None or price < 0:
            raise BadRequest('Price must be greater than or equal to zero')
        if data.get('term_type') == MembershipPlan.TermType.FIXED_TERM and (data.get('term_months') or 0) <= 0:
            raise BadRequest('Fixed-term plans require a termMonths value')
        if data.get('has_intro_period'):
            if (data.get('intro_months') or 0) <= 0:
                raise BadRequest('Introductory period requires introMonths')
            if (data.get('intro_price_cents') or 0) < 0:
                raise BadRequest('Introductory price must be >= 0')
        scope = data.get('scope_type') or MembershipPlan.ScopeType.ORG_WIDE
        if scope == MembershipPlan.ScopeType.SPECIFIC_LOCATIONS and not data.get('location_ids'):
            raise BadRequest('Location-scoped plans must include at least one locationId')

    @classmethod
    def create_plan(cls, organization_id, data):
        cls._validate_create(data)

        scope = data.get('scope_type') or MembershipPlan.ScopeType.ORG_WIDE
        term_type = data.get('term_type') or MembershipPlan.TermType.EVERGREEN
        has_intro = bool(data.get('has_intro_period', False))
        allows_family = bool(data.get('allows_family_membership', False))
        locations = []
        if scope == MembershipPlan.ScopeType.SPECIFIC_LOCATIONS:
            locations = cls._resolve_locations(organization_id, data.get('location_ids'))

        with transaction.atomic():
            plan = MembershipPlan.objects.create(
                organization_id=organization_id,
                name=data['name'].strip(),
                description=data.get('description'),
                cadence=data.get('cadence') or MembershipPlan.Cadence.MONTHLY,
                price_cents=data['price_cents'],
                currency=data.get('currency') or 'USD',
                term_type=term_type,
                term_months=data.get('term_months') if term_type == MembershipPlan.TermType.FIXED_TERM else None,
                has_intro_period=has_intro,
                intro_months=data.get('intro_months') if has_intro else None,
                intro_price_cents=data.get('intro_price_cents') if has_intro else None,
                scope_type=scope,
                allows_family_membership=allows_family,
                max_family_size=data.get('max_family_size') if allows_family else None,
                is_active=data.get('is_active', True),
            )
            if locations:
                plan.locations.set(locations)

        logger.info(f'Membership plan {plan.pk} created in organization {organization_id}')
        return plan

    @classmethod
    def update_plan(cls, organization_id, plan_id, data):
        plan = cls.get_plan(organization_id, plan_id)

        if 'name' in data and not (data['name'] or '').strip():
            raise BadRequest('Plan name is required')
        if data.get('price_cents') is not None and data['price_cents'] < 0:
            raise BadRequest('Price must be greater than or equal to zero')
        term_type = data.get('term_type') or plan.term_type
        if data.get('term_type') == MembershipPlan.TermType.FIXED_TERM:
            if (data.get('term_months') or plan.term_months or 0) <= 0:
                raise BadRequest('Fixed-term plans require a termMonths value')

        has_intro = data.get('has_intro_period', plan.has_intro_period)
        allows_family = data.get('allows_family_membership', plan.allows_family_membership)
        scope = data.get('scope_type') or plan.scope_type

        locations = []
        if scope == MembershipPlan.ScopeType.SPECIFIC_LOCATIONS:
            if data.get('location_ids') is not None:
                locations = cls._resolve_locations(organization_id, data['location_ids'])
            else:
                locations = list(plan.locations.all())

        if 'name' in data:
            plan.name = data['name'].strip()
        for field in ('description', 'cadence', 'price_cents', 'currency', 'is_active'):
            value = data.get(field, _MISSING)
            if value is not _MISSING and (value is not None or field == 'description'):
                setattr(plan, field, value)
        plan.term_type = term_type
        plan.term_months = (
            data.get('term_months') or plan.term_months
            if term_type == MembershipPlan.TermType.FIXED_TERM else None
        )
        plan.has_intro_period = has_intro
        plan.intro_months = (data.get('intro_months') or plan.intro_months) if has_intro else None
        if has_intro:
            intro_price = data.get('intro_price_cents')
            plan.intro_price_cents = intro_price if intro_price is not None else plan.intro_price_cents
        else:
            plan.intro_price_cents = None
        plan.scope_type = scope
        plan.allows_family_membership = allows_family
        plan.max_family_size = (data.get('max_family_size') or plan.max_family_size) if allows_family else None

        with transaction.atomic():
            plan.save()
            # Для ORG_WIDE связи с локациями снимаются
            plan.locations.set(locations)

        return plan

    @classmethod
    def delete_plan(cls, organization_id, plan_id):
        plan = cls.get_plan(organization_id, plan_id)
        with transaction.atomic():
            plan.locations.clear()
            plan.delete()


class StatusReasonsService:
    """Справочник причин отмены / заморозки"""

    @staticmethod
    def list_reasons(organization_id, reason_type=None):
        qs = StatusReason.objects.for_organization(organization_id)
        if reason_type:
            qs = qs.filter(type=reason_type)
        return qs.order_by('sort_order')

    @staticmethod
    def get_reason(organization_id, reason_id):
        reason = StatusReason.objects.for_organization(organization_id).filter(pk=reason_id).first()
        if reason is None:
            raise NotFound('Status reason not found')
        return reason

    @staticmethod
    def create_reason(organization_id, data):
        label = _clean_text(data.get('label') or '')
        if not label:
            raise BadRequest('Reason label is required')
        if not data.get('type'):
            raise BadRequest('Reason type is required')

        sort_order = data.get('sort_order')
        if sort_order is None:
            sort_order = StatusReason.objects.for_organization(organization_id).filter(
                type=data['type'],
            ).count() + 1

        return StatusReason.objects.create(
            organization_id=organization_id,
            type=data['type'],
            label=label,
            sort_order=sort_order,
            is_active=data.get('is_active', True),
        )

    @classmethod
    def update_reason(cls, organization_id, reason_id, data):
        reason = cls.get_reason(organization_id, reason_id)
        if 'label' in data:
            label = _clean_text(data['label'] or '')
            if not label:
                raise BadRequest('Reason label is required')
            reason.label = label
        if data.get('sort_order') is not None:
            reason.sort_order = data['sort_order']
        if data.get('is_active') is not None:
            reason.is_active = data['is_active']
        reason.save()
        return reason

    @classmethod
    def delete_reason(cls, organization_id, reason_id):
        reason = cls.get_reason(organization_id, reason_id)
        reason.delete()
