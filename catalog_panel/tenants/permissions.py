"""
Organization-aware permissions для DRF.
Работают после OrganizationContextMixin (request.organization_membership уже есть).
"""
from rest_framework.permissions import SAFE_METHODS, BasePermission

from .models import OrganizationMembership


class IsOrganizationStaff(BasePermission):
    """Активный сотрудник (ORG_ADMIN / ORG_STAFF) текущей организации."""

    message = 'User is not authorized for organization'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        membership = getattr(request, 'organization_membership', None)
        if membership is None:
            return False
        return membership.role in OrganizationMembership.STAFF_ROLES


class IsOrganizationAdmin(BasePermission):
    """Только ORG_ADMIN текущей организации."""

    message = 'Organization admin role required'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        membership = getattr(request, 'organization_membership', None)
        if membership is None:
            return False
        return membership.role == OrganizationMembership.Role.ORG_ADMIN


class IsOrganizationAdminOrReadOnly(BasePermission):
    """ORG_ADMIN: полный доступ; остальные сотрудники: только чтение."""

    message = 'Organization admin role required'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        membership = getattr(request, 'organization_membership', None)
        if membership is None:
            return False
        if request.method in SAFE_METHODS:
            return True
        return membership.role == OrganizationMembership.Role.ORG_ADMIN
