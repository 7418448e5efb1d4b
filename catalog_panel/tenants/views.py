from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .mixins import OrganizationContextMixin
from .permissions import IsOrganizationStaff
from .serializers import OrganizationSerializer


class CurrentOrganizationView(OrganizationContextMixin, APIView):
    """Организация, определённая для запроса, и роль текущего пользователя."""

    permission_classes = [IsAuthenticated, IsOrganizationStaff]

    def get(self, request):
        data = OrganizationSerializer(request.organization).data
        data['role'] = request.organization_membership.role
        return Response(data)
