"""
API занятий:
  /api/classes/templates/                         шаблоны
  /api/classes/sessions/                          календарь и списки участников
  /api/classes/lookups/{locations,instructors,programs,rooms}/
"""
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import BadRequest
from core.utils import UUID_LOOKUP_REGEX, parse_bool, parse_uuid
from tenants.mixins import OrganizationContextMixin
from tenants.permissions import IsOrganizationStaff
from .models import ClassSession
from .serializers import (
    AddParticipantInputSerializer,
    ClassSessionDetailSerializer,
    ClassSessionSerializer,
    ClassSessionUpdateSerializer,
    ClassTemplateInputSerializer,
    ClassTemplateSerializer,
    UpdateParticipantInputSerializer,
)
from .services import ClassLookupsService, ClassSessionsService, ClassTemplatesService, RosterService


def parse_range_value(value, field_name):
    """'2025-01-01' → date, '2025-01-01T10:00:00Z' → datetime, пусто → None"""
    if not value:
        return None
    try:
        # Сначала дата: parse_datetime на новых Python принимает и '2025-01-08'
        parsed = parse_date(value) or parse_datetime(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise BadRequest(f'Invalid {field_name}')
    return parsed


def parse_int(value, field_name):
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise BadRequest(f'Invalid {field_name}')


class ClassTemplateViewSet(OrganizationContextMixin, viewsets.ViewSet):
    lookup_value_regex = UUID_LOOKUP_REGEX
    permission_classes = [IsAuthenticated, IsOrganizationStaff]

    def list(self, request):
        params = request.query_params
        location_id = params.get('locationId')
        templates = ClassTemplatesService.list_templates(
            self.organization_id,
            location_id=parse_uuid(location_id, 'locationId') if location_id else None,
            program=params.get('program') or None,
            instructor_user_id=parse_int(params.get('instructorUserId'), 'instructorUserId'),
            is_active=parse_bool(params.get('isActive')),
        )
        return Response(ClassTemplateSerializer(templates, many=True).data)

    def retrieve(self, request, pk=None):
        template = ClassTemplatesService.get_template(self.organization_id, pk)
        return Response(ClassTemplateSerializer(template).data)

    def create(self, request):
        data = self.validated_input(ClassTemplateInputSerializer)
        template = ClassTemplatesService.create_template(self.organization_id, data)
        return Response(ClassTemplateSerializer(template).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        data = self.validated_input(ClassTemplateInputSerializer, partial=True)
        template = ClassTemplatesService.update_template(self.organization_id, pk, data)
        return Response(ClassTemplateSerializer(template).data)


class ClassSessionViewSet(OrganizationContextMixin, viewsets.ViewSet):
    lookup_value_regex = UUID_LOOKUP_REGEX
    permission_classes = [IsAuthenticated, IsOrganizationStaff]

    def _session_response(self, session_id, response_status=status.HTTP_200_OK):
        session = ClassSessionsService.get_session_with_roster(self.organization_id, session_id)
        return Response(ClassSessionDetailSerializer(session).data, status=response_status)

    def list(self, request):
        params = request.query_params
        location_id = params.get('locationId')
        session_status = params.get('status')
        if session_status and session_status not in ClassSession.Status.values:
            raise BadRequest('Invalid status')

        sessions = ClassSessionsService.find_in_range(
            self.organization_id,
            start=parse_range_value(params.get('startDate'), 'startDate'),
            end=parse_range_value(params.get('endDate'), 'endDate'),
            location_id=parse_uuid(location_id, 'locationId') if location_id else None,
            program=params.get('program') or None,
            instructor_user_id=parse_int(params.get('instructorUserId'), 'instructorUserId'),
            room=params.get('room') or None,
            status=session_status or None,
        )
        return Response(ClassSessionSerializer(sessions, many=True).data)

    def retrieve(self, request, pk=None):
        return self._session_response(pk)

    def partial_update(self, request, pk=None):
        data = self.validated_input(ClassSessionUpdateSerializer, partial=True)
        session = ClassSessionsService.update_session(self.organization_id, pk, data)
        return Response(ClassSessionDetailSerializer(session).data)

    @action(detail=True, methods=['post'])
    def participants(self, request, pk=None):
        data = self.validated_input(AddParticipantInputSerializer)
        if data.get('customer_id'):
            RosterService.add_existing_participant(
                self.organization_id, pk, data['customer_id'],
                status=data.get('status'),
                acting_user_id=request.user.pk,
            )
        else:
            RosterService.add_new_customer_and_participant(
                self.organization_id, pk, data['new_customer'],
                acting_user_id=request.user.pk,
            )
        return self._session_response(pk, status.HTTP_201_CREATED)

    @action(detail=True, methods=['patch'], url_path=rf'participants/(?P<participant_id>{UUID_LOOKUP_REGEX})')
    def participant(self, request, pk=None, participant_id=None):
        data = self.validated_input(UpdateParticipantInputSerializer)
        RosterService.update_participant(
            self.organization_id, pk, participant_id,
            status=data['status'],
            note=data.get('note'),
            acting_user_id=request.user.pk,
        )
        return self._session_response(pk)

    @participant.mapping.delete
    def remove_participant(self, request, pk=None, participant_id=None):
        RosterService.remove_participant(self.organization_id, pk, participant_id)
        return self._session_response(pk)


class ClassLookupViewSet(OrganizationContextMixin, viewsets.ViewSet):
    """Справочники для фильтров календаря и формы шаблона."""

    permission_classes = [IsAuthenticated, IsOrganizationStaff]

    @action(detail=False, methods=['get'])
    def locations(self, request):
        return Response(ClassLookupsService.locations(self.organization_id))

    @action(detail=False, methods=['get'])
    def instructors(self, request):
        return Response(ClassLookupsService.instructors(self.organization_id))

    @action(detail=False, methods=['get'])
    def programs(self, request):
        return Response(ClassLookupsService.programs(self.organization_id))

    @action(detail=False, methods=['get'])
    def rooms(self, request):
        return Response(ClassLookupsService.rooms(self.organization_id))
