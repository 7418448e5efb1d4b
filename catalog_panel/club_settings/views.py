"""
API настроек клуба: /api/settings/customers/{locations,membership-plans,status-reasons}/
Чтение доступно сотрудникам, изменения: только ORG_ADMIN.
"""
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.utils import UUID_LOOKUP_REGEX
from tenants.mixins import OrganizationContextMixin
from tenants.permissions import IsOrganizationAdminOrReadOnly
from .serializers import (
    LocationInputSerializer,
    LocationSerializer,
    MembershipPlanInputSerializer,
    MembershipPlanSerializer,
    StatusReasonInputSerializer,
    StatusReasonSerializer,
)
from .services import LocationsService, MembershipPlansService, StatusReasonsService


class LocationViewSet(OrganizationContextMixin, viewsets.ViewSet):
    lookup_value_regex = UUID_LOOKUP_REGEX
    permission_classes = [IsAuthenticated, IsOrganizationAdminOrReadOnly]

    def list(self, request):
        locations = LocationsService.list_locations(self.organization_id)
        return Response(LocationSerializer(locations, many=True).data)

    def retrieve(self, request, pk=None):
        location = LocationsService.get_location(self.organization_id, pk)
        return Response(LocationSerializer(location).data)

    def create(self, request):
        data = self.validated_input(LocationInputSerializer)
        location = LocationsService.create_location(self.organization_id, data)
        return Response(LocationSerializer(location).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        data = self.validated_input(LocationInputSerializer, partial=True)
        location = LocationsService.update_location(self.organization_id, pk, data)
        return Response(LocationSerializer(location).data)

    def destroy(self, request, pk=None):
        LocationsService.delete_location(self.organization_id, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MembershipPlanViewSet(OrganizationContextMixin, viewsets.ViewSet):
    lookup_value_regex = UUID_LOOKUP_REGEX
    permission_classes = [IsAuthenticated, IsOrganizationAdminOrReadOnly]

    def list(self, request):
        plans = MembershipPlansService.list_plans(self.organization_id)
        return Response(MembershipPlanSerializer(plans, many=True).data)

    def retrieve(self, request, pk=None):
        plan = MembershipPlansService.get_plan(self.organization_id, pk)
        return Response(MembershipPlanSerializer(plan).data)

    def create(self, request):
        data = self.validated_input(MembershipPlanInputSerializer)
        plan = MembershipPlansService.create_plan(self.organization_id, data)
        return Response(MembershipPlanSerializer(plan).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        data = self.validated_input(MembershipPlanInputSerializer, partial=True)
        plan = MembershipPlansService.update_plan(self.organization_id, pk, data)
        return Response(MembershipPlanSerializer(plan).data)

    def destroy(self, request, pk=None):
        MembershipPlansService.delete_plan(self.organization_id, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class StatusReasonViewSet(OrganizationContextMixin, viewsets.ViewSet):
    lookup_value_regex = UUID_LOOKUP_REGEX
    permission_classes = [IsAuthenticated, IsOrganizationAdminOrReadOnly]

    def list(self, request):
        reason_type = request.query_params.get('type')
        reasons = StatusReasonsService.list_reasons(self.organization_id, reason_type)
        return Response(StatusReasonSerializer(reasons, many=True).data)

    def create(self, request):
        data = self.validated_input(StatusReasonInputSerializer)
        reason = StatusReasonsService.create_reason(self.organization_id, data)
        return Response(StatusReasonSerializer(reason).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        data = self.validated_input(StatusReasonInputSerializer, partial=True)
        reason = StatusReasonsService.update_reason(self.organization_id, pk, data)
        return Response(StatusReasonSerializer(reason).data)

    def destroy(self, request, pk=None):
        StatusReasonsService.delete_reason(self.organization_id, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
