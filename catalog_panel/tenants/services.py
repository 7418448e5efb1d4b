"""
Определение организации (тенанта) для запроса.

Логика:
  1. X-Catalog-Organization: oakmont  → slug='oakmont' (заголовок приоритетнее)
  2. oakmont.catalog.app (PLATFORM_DOMAIN=catalog.app) → slug='oakmont'
  3. oakmont.example.com (PLATFORM_DOMAIN не задан)   → первая метка хоста
  4. localhost без заголовка → 401

После slug проверяется членство пользователя: только ORG_ADMIN / ORG_STAFF.
"""
import logging

from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed, NotFound, PermissionDenied

from .models import Organization, OrganizationMembership

logger = logging.getLogger(__name__)


class OrganizationsService:
    ALLOWED_ROLES = OrganizationMembership.STAFF_ROLES

    def __init__(self, platform_domain=None):
        if platform_domain is None:
            platform_domain = getattr(settings, 'PLATFORM_DOMAIN', '')
        self.platform_domain = (platform_domain or '').strip().lower()

    def extract_subdomain(self, host):
        if not host:
            return None
        hostname = host.split(':')[0].strip().lower()
        if not hostname:
            return None

        if self.platform_domain and hostname.endswith(self.platform_domain):
            suffix = f'.{self.platform_domain}'
            # Сам платформенный домен (без поддомена) организацию не задаёт
            if not hostname.endswith(suffix):
                return None
            return hostname[:-len(suffix)] or None

        labels = hostname.split('.')
        if len(labels) < 2:
            return None
        return labels[0] or None

    def resolve_slug(self, host, explicit_slug=None):
        if explicit_slug and explicit_slug.strip():
            return explicit_slug.strip()
        return self.extract_subdomain(host)

    @staticmethod
    def get_organization_by_slug(slug):
        organization = Organization.objects.filter(slug=slug).first()
        if organization is None:
            logger.warning(f'Organization not found for slug: {slug}')
            raise NotFound('Organization not found')
        return organization

    def get_membership(self, organization, user):
        membership = OrganizationMembership.objects.filter(
            organization=organization,
            user=user,
            role__in=self.ALLOWED_ROLES,
        ).first()
        if membership is None:
            logger.warning(
                f'User {user.pk} has no staff membership in organization {organization.slug}'
            )
            raise PermissionDenied('User is not authorized for organization')
        return membership

    def resolve_for_request(self, user, host, explicit_slug=None):
        """Возвращает (organization, membership) или бросает 401/404/403."""
        slug = self.resolve_slug(host, explicit_slug)
        if not slug:
            raise AuthenticationFailed('Tenant host missing')
        organization = self.get_organization_by_slug(slug)
        membership = self.get_membership(organization, user)
        return organization, membership
