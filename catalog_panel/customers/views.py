"""
API клиентов: /api/customers/...
Все вложенные ресурсы (household, membership, files, ...) адресуются через
id клиента, который сначала проверяется на принадлежность организации.
"""
import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.utils import UUID_LOOKUP_REGEX, parse_bool, parse_uuid, parse_uuid_list, split_csv
from tenants.mixins import OrganizationContextMixin
from tenants.permissions import IsOrganizationStaff
from .comms_service import CommsService
from .models import Customer
from .serializers import (
    AssignMembershipInputSerializer,
    BillingEventSerializer,
    ConfirmUploadInputSerializer,
    CustomerFileSerializer,
    CustomerInputSerializer,
    CustomerMembershipSerializer,
    CustomerSerializer,
    EmailMessageSerializer,
    HouseholdMemberInputSerializer,
    HouseholdMemberSerializer,
    HouseholdSerializer,
    InteractionInputSerializer,
    InteractionSerializer,
    SendEmailInputSerializer,
    SendSmsInputSerializer,
    SmsMessageSerializer,
    UpdateMembershipInputSerializer,
    UploadUrlInputSerializer,
)
from .services import (
    BillingService,
    CustomerMembershipsService,
    CustomersService,
    HouseholdsService,
    InteractionsService,
)
from .storage_service import FilesService

logger = logging.getLogger(__name__)


def parse_statuses(raw):
    """'active, lead,unknown' → ['ACTIVE', 'LEAD'] (неизвестные значения отбрасываются)"""
    valid = set(Customer.Status.values)
    return [value.upper() for value in split_csv(raw) if value.upper() in valid]


class CustomerViewSet(OrganizationContextMixin, viewsets.ViewSet):
    lookup_value_regex = UUID_LOOKUP_REGEX
    permission_classes = [IsAuthenticated, IsOrganizationStaff]

    def _customer(self, pk):
        return CustomersService.get_customer(self.organization_id, pk)

    # --- Клиенты ---

    def list(self, request):
        params = request.query_params
        raw_statuses = params.get('status') or params.get('statuses')
        location_id = params.get('locationId')

        customers = CustomersService.list_customers(
            self.organization_id,
            search=params.get('search'),
            statuses=parse_statuses(raw_statuses),
            location_id=parse_uuid(location_id, 'locationId') if location_id else None,
            location_ids=parse_uuid_list(params.get('locations') or params.get('locationIds'), 'locationId'),
            membership_plan_ids=parse_uuid_list(params.get('membershipPlanIds'), 'membershipPlanId'),
            has_membership=parse_bool(params.get('hasMembership')),
            tags=split_csv(params.get('tags')),
        )
        return Response(CustomerSerializer(customers, many=True).data)

    def retrieve(self, request, pk=None):
        return Response(CustomerSerializer(self._customer(pk)).data)

    def create(self, request):
        data = self.validated_input(CustomerInputSerializer)
        customer = CustomersService.create_customer(self.organization_id, data)
        customer = self._customer(customer.pk)
        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        data = self.validated_input(CustomerInputSerializer, partial=True)
        customer = CustomersService.update_customer(self.organization_id, pk, data)
        return Response(CustomerSerializer(self._customer(customer.pk)).data)

    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        """Карточка клиента целиком: семья, абонемент, биллинг, файлы, взаимодействия"""
        customer = self._customer(pk)
        org_id = self.organization_id
        household = HouseholdsService.get_household_for_customer(org_id, customer.pk)
        membership = CustomerMembershipsService.get_membership_for_head(org_id, customer.pk)
        return Response({
            'customer': CustomerSerializer(customer).data,
            'household': HouseholdSerializer(household).data if household else None,
            'membership': CustomerMembershipSerializer(membership).data if membership else None,
            'billing_events': BillingEventSerializer(
                BillingService.list_billing_events(org_id, customer.pk), many=True,
            ).data,
            'files': CustomerFileSerializer(FilesService.list_files(org_id, customer.pk), many=True).data,
            'interactions': InteractionSerializer(
                InteractionsService.list_interactions(org_id, customer.pk), many=True,
            ).data,
        })

    # --- Семья ---

    @action(detail=True, methods=['get', 'post'])
    def household(self, request, pk=None):
        customer = self._customer(pk)
        if request.method == 'POST':
            HouseholdsService.create_household(self.organization_id, customer.pk)
            household = HouseholdsService.get_household_for_customer(self.organization_id, customer.pk)
            return Response(HouseholdSerializer(household).data, status=status.HTTP_201_CREATED)

        household = HouseholdsService.get_household_for_customer(self.organization_id, customer.pk)
        return Response(HouseholdSerializer(household).data if household else None)

    @action(detail=True, methods=['post'], url_path='household/members')
    def add_household_member(self, request, pk=None):
        customer = self._customer(pk)
        data = self.validated_input(HouseholdMemberInputSerializer)
        member = HouseholdsService.add_member(
            self.organization_id, customer.pk,
            customer_id=data['customer_id'],
            relationship=data.get('relationship'),
        )
        return Response(HouseholdMemberSerializer(member).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['delete'], url_path=rf'household/members/(?P<member_id>{UUID_LOOKUP_REGEX})')
    def remove_household_member(self, request, pk=None, member_id=None):
        customer = self._customer(pk)
        HouseholdsService.remove_member(self.organization_id, customer.pk, member_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # --- Абонемент ---

    @action(detail=True, methods=['get', 'post'])
    def membership(self, request, pk=None):
        customer = self._customer(pk)
        if request.method == 'POST':
            data = self.validated_input(AssignMembershipInputSerializer)
            membership = CustomerMembershipsService.assign_membership(self.organization_id, customer.pk, data)
            return Response(CustomerMembershipSerializer(membership).data, status=status.HTTP_201_CREATED)

        membership = CustomerMembershipsService.get_membership_for_head(self.organization_id, customer.pk)
        return Response(CustomerMembershipSerializer(membership).data if membership else None)

    @action(detail=True, methods=['patch'], url_path=rf'membership/(?P<membership_id>{UUID_LOOKUP_REGEX})')
    def update_membership(self, request, pk=None, membership_id=None):
        customer = self._customer(pk)
        data = self.validated_input(UpdateMembershipInputSerializer, partial=True)
        membership = CustomerMembershipsService.update_membership(
            self.organization_id, customer.pk, membership_id, data,
        )
        return Response(CustomerMembershipSerializer(membership).data)

    # --- Взаимодействия и коммуникации ---

    @action(detail=True, methods=['get', 'post'])
    def interactions(self, request, pk=None):
        customer = self._customer(pk)
        if request.method == 'POST':
            data = self.validated_input(InteractionInputSerializer)
            interaction = InteractionsService.log_interaction(
                self.organization_id, customer.pk,
                created_by_id=request.user.pk,
                **data,
            )
            return Response(InteractionSerializer(interaction).data, status=status.HTTP_201_CREATED)

        interactions = InteractionsService.list_interactions(self.organization_id, customer.pk)
        return Response(InteractionSerializer(interactions, many=True).data)

    @action(detail=True, methods=['post'])
    def email(self, request, pk=None):
        customer = self._customer(pk)
        data = self.validated_input(SendEmailInputSerializer)
        message = CommsService().send_email(
            self.organization_id, customer.pk,
            created_by_id=request.user.pk,
            **data,
        )
        return Response(EmailMessageSerializer(message).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def sms(self, request, pk=None):
        customer = self._customer(pk)
        data = self.validated_input(SendSmsInputSerializer)
        message = CommsService().send_sms(
            self.organization_id, customer.pk,
            created_by_id=request.user.pk,
            **data,
        )
        return Response(SmsMessageSerializer(message).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'], url_path='billing-events')
    def billing_events(self, request, pk=None):
        customer = self._customer(pk)
        events = BillingService.list_billing_events(self.organization_id, customer.pk)
        return Response(BillingEventSerializer(events, many=True).data)

    # --- Файлы ---

    @action(detail=True, methods=['get'])
    def files(self, request, pk=None):
        customer = self._customer(pk)
        files = FilesService.list_files(self.organization_id, customer.pk)
        return Response(CustomerFileSerializer(files, many=True).data)

    @action(detail=True, methods=['post'], url_path='files/upload-url')
    def upload_url(self, request, pk=None):
        customer = self._customer(pk)
        data = self.validated_input(UploadUrlInputSerializer)
        result = FilesService().create_upload_url(self.organization_id, customer.pk, **data)
        return Response(result, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='files/confirm')
    def confirm_upload(self, request, pk=None):
        customer = self._customer(pk)
        data = self.validated_input(ConfirmUploadInputSerializer)
        customer_file = FilesService.confirm_upload(
            self.organization_id, customer.pk,
            uploaded_by_id=request.user.pk,
            **data,
        )
        return Response(CustomerFileSerializer(customer_file).data, status=status.HTTP_201_CREATED)
