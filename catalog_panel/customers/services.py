"""
Сервисы клиентов. Каждый метод принимает organization_id первым аргументом
и никогда не ищет запись только по id.
"""
import json
import logging

from django.db import connection
from django.db.models import Exists, OuterRef, Prefetch, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound

from club_settings.models import Location, MembershipPlan, StatusReason
from core.exceptions import BadRequest, ConflictError
from .models import (
    BillingEvent,
    Customer,
    CustomerMembership,
    Household,
    HouseholdMember,
    Interaction,
)

logger = logging.getLogger(__name__)

SEARCH_FIELDS = (
    'first_name', 'last_name', 'preferred_name',
    'primary_email', 'primary_phone', 'secondary_phone',
)


def normalize_tags(tags):
    """Теги храним без пробелов по краям, в нижнем регистре, без повторов."""
    seen = []
    for tag in tags or []:
        cleaned = str(tag).strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


def tags_overlap_q(tags, field='tags'):
    """
    Пересечение множеств: клиент подходит, если у него есть хотя бы один тег
    из списка. На PostgreSQL через jsonb @>, на SQLite через поиск JSON-литерала в тексте.
    """
    condition = Q()
    for tag in normalize_tags(tags):
        if connection.features.supports_json_field_contains:
            condition |= Q(**{f'{field}__contains': [tag]})
        else:
            condition |= Q(**{f'{field}__icontains': json.dumps(tag)})
    return condition


class CustomersService:

    @staticmethod
    def _latest_membership_prefetch():
        return Prefetch(
            'memberships',
            queryset=CustomerMembership.objects.select_related(
                'membership_plan', 'cancel_reason', 'freeze_reason',
            ).order_by('-created_at'),
        )

    @classmethod
    def list_customers(cls, organization_id, search=None, statuses=None, location_id=None,
                       location_ids=None, membership_plan_ids=None, has_membership=None, tags=None):
        qs = Customer.objects.for_organization(organization_id)

        term = (search or '').strip()
        if term:
            condition = Q()
            for field in SEARCH_FIELDS:
                condition |= Q(**{f'{field}__icontains': term})
            qs = qs.filter(condition)

        if statuses:
            qs = qs.filter(status__in=statuses)

        if location_ids:
            qs = qs.filter(primary_location_id__in=location_ids)
        elif location_id:
            qs = qs.filter(primary_location_id=location_id)

        if tags:
            qs = qs.filter(tags_overlap_q(tags))

        memberships = CustomerMembership.objects.filter(head_customer=OuterRef('pk'))
        if membership_plan_ids:
            qs = qs.filter(Exists(memberships.filter(membership_plan_id__in=membership_plan_ids)))
        elif has_membership is True:
            qs = qs.filter(Exists(memberships))
        elif has_membership is False:
            qs = qs.filter(~Exists(memberships))

        return (
            qs.select_related('primary_location')
            .prefetch_related(cls._latest_membership_prefetch())
            .order_by('-updated_at')
        )

    @classmethod
    def get_customer(cls, organization_id, customer_id):
        customer = (
            Customer.objects.for_organization(organization_id)
            .select_related('primary_location')
            .prefetch_related(cls._latest_membership_prefetch())
            .filter(pk=customer_id)
            .first()
        )
        if customer is None:
            raise NotFound('Customer not found')
        return customer

    @staticmethod
    def _check_location(organization_id, data):
        location_id = data.get('primary_location_id')
        if location_id is None:
            return
        if not Location.objects.for_organization(organization_id).filter(pk=location_id).exists():
            raise BadRequest('Unknown primary location')

    @classmethod
    def create_customer(cls, organization_id, data):
        cls._check_location(organization_id, data)
        data = dict(data)
        data['tags'] = normalize_tags(data.get('tags'))
        customer = Customer.objects.create(organization_id=organization_id, **data)
        logger.info(f'Customer {customer.pk} created in organization {organization_id}')
        return customer

    @classmethod
    def update_customer(cls, organization_id, customer_id, data):
        customer = cls.get_customer(organization_id, customer_id)
        cls._check_location(organization_id, data)
        for field, value in data.items():
            if field == 'tags':
                value = normalize_tags(value)
            setattr(customer, field, value)
        customer.save()
        return customer


class HouseholdsService:

    @staticmethod
    def get_household_for_customer(organization_id, head_customer_id):
        return (
            Household.objects.for_organization(organization_id)
            .select_related('head_customer')
            .prefetch_related(Prefetch(
                'members',
                queryset=HouseholdMember.objects.select_related('customer').order_by('created_at'),
            ))
            .filter(head_customer_id=head_customer_id)
            .first()
        )

    @staticmethod
    def create_household(organization_id, head_customer_id):
        CustomersService.get_customer(organization_id, head_customer_id)
        exists = Household.objects.for_organization(organization_id).filter(
            head_customer_id=head_customer_id,
        ).exists()
        if exists:
            raise ConflictError('Head customer already has a household')
        return Household.objects.create(organization_id=organization_id, head_customer_id=head_customer_id)

    @staticmethod
    def _find_household_or_404(organization_id, head_customer_id):
        household = Household.objects.for_organization(organization_id).filter(
            head_customer_id=head_customer_id,
        ).first()
        if household is None:
            raise NotFound('Household not found for customer')
        return household

    @classmethod
    def add_member(cls, organization_id, head_customer_id, customer_id, relationship=None):
        household = cls._find_household_or_404(organization_id, head_customer_id)
        # Член семьи тоже должен принадлежать организации
        CustomersService.get_customer(organization_id, customer_id)
        if household.members.filter(customer_id=customer_id).exists():
            raise ConflictError('Customer is already a household member')
        return HouseholdMember.objects.create(
            organization_id=organization_id,
            household=household,
            customer_id=customer_id,
            relationship=relationship,
        )

    @classmethod
    def remove_member(cls, organization_id, head_customer_id, member_id):
        household = cls._find_household_or_404(organization_id, head_customer_id)
        member = HouseholdMember.objects.for_organization(organization_id).filter(
            pk=member_id, household=household,
        ).first()
        if member is None:
            raise NotFound('Household member not found')
        member.delete()


class CustomerMembershipsService:

    @staticmethod
    def get_membership_for_head(organization_id, head_customer_id):
        return (
            CustomerMembership.objects.for_organization(organization_id)
            .select_related('membership_plan', 'cancel_reason', 'freeze_reason')
            .filter(head_customer_id=head_customer_id)
            .order_by('-created_at')
            .first()
        )

    @staticmethod
    def _check_references(organization_id, data):
        plan_id = data.get('membership_plan_id')
        if plan_id is not None and not MembershipPlan.objects.for_organization(organization_id).filter(pk=plan_id).exists():
            raise NotFound('Membership plan not found')
        for field in ('cancel_reason_id', 'freeze_reason_id'):
            reason_id = data.get(field)
            if reason_id is not None and not StatusReason.objects.for_organization(organization_id).filter(pk=reason_id).exists():
                raise NotFound('Status reason not found')

    @classmethod
    def assign_membership(cls, organization_id, head_customer_id, data):
        CustomersService.get_customer(organization_id, head_customer_id)
        cls._check_references(organization_id, data)
        membership = CustomerMembership.objects.create(
            organization_id=organization_id,
            head_customer_id=head_customer_id,
            membership_plan_id=data['membership_plan_id'],
            status=data.get('status') or CustomerMembership.Status.ACTIVE,
            start_date=data.get('start_date') or timezone.localdate(),
            end_date=data.get('end_date'),
            renewal_date=data.get('renewal_date'),
            external_subscription_id=data.get('external_subscription_id'),
        )
        logger.info(
            f'Membership {membership.pk} (plan {membership.membership_plan_id}) '
            f'assigned to customer {head_customer_id}'
        )
        return membership

    @classmethod
    def update_membership(cls, organization_id, head_customer_id, membership_id, data):
        membership = CustomerMembership.objects.for_organization(organization_id).filter(
            pk=membership_id, head_customer_id=head_customer_id,
        ).first()
        if membership is None:
            raise NotFound('Membership not found')
        cls._check_references(organization_id, data)
        for field, value in data.items():
            setattr(membership, field, value)
        membership.save()
        return membership


class BillingService:
    """Биллинг только отображается: события пишет внешняя система."""

    @staticmethod
    def list_billing_events(organization_id, customer_id):
        return BillingEvent.objects.for_organization(organization_id).filter(
            customer_id=customer_id,
        ).order_by('-date')


class InteractionsService:

    @staticmethod
    def log_interaction(organization_id, customer_id, created_by_id, interaction_type, channel,
                        title, body=None, related_email_id=None, related_sms_id=None):
        return Interaction.objects.create(
            organization_id=organization_id,
            customer_id=customer_id,
            created_by_id=created_by_id,
            interaction_type=interaction_type,
            channel=channel,
            title=title,
            body=body or '',
            related_email_id=related_email_id,
            related_sms_id=related_sms_id,
        )

    @staticmethod
    def list_interactions(organization_id, customer_id):
        return (
            Interaction.objects.for_organization(organization_id)
            .filter(customer_id=customer_id)
            .select_related('created_by', 'related_email', 'related_sms')
            .order_by('-created_at')
        )
