"""
Tenant mixins: переиспользуемые компоненты для моделей и views,
привязанных к организации.
"""
from django.conf import settings
from django.db import models

from catalog_panel.sentry_config import set_user_context
from core.models import TimeStampedModel
from .context import RequestContext, clear_current_organization, set_current_organization
from .services import OrganizationsService


# ═══════════════════════════════════════════════════════════════
# MODEL MIXINS
# ═══════════════════════════════════════════════════════════════

class OrganizationQuerySet(models.QuerySet):
    """QuerySet с обязательной фильтрацией по организации."""

    def for_organization(self, organization_id):
        # Без организации данных нет: никаких "глобальных" выборок из API
        if organization_id is None:
            return self.none()
        return self.filter(organization_id=organization_id)


class OrganizationManager(models.Manager):
    """Manager, который возвращает OrganizationQuerySet."""

    def get_queryset(self):
        return OrganizationQuerySet(self.model, using=self._db)

    def for_organization(self, organization_id):
        return self.get_queryset().for_organization(organization_id)


class OrganizationScopedModel(TimeStampedModel):
    """
    Абстрактная модель с FK на организацию.

    Использование:
        class Location(OrganizationScopedModel):
            name = models.CharField(...)
    """
    organization = models.ForeignKey(
        'tenants.Organization',
        on_delete=models.CASCADE,
        related_name='%(app_label)s_%(class)ss',
        verbose_name='Организация',
        db_index=True,
    )

    objects = OrganizationManager()

    class Meta:
        abstract = True


# ═══════════════════════════════════════════════════════════════
# VIEW MIXINS
# ═══════════════════════════════════════════════════════════════

class OrganizationContextMixin:
    """
    Mixin для APIView / ViewSet: сразу после аутентификации определяет
    организацию и членство, до проверки permissions.

    Ставит:
      - request.organization
      - request.organization_membership
      - self.request_context = RequestContext(user, organization, membership)
    """

    def perform_authentication(self, request):
        super().perform_authentication(request)
        organization, membership = OrganizationsService().resolve_for_request(
            user=request.user,
            host=request.get_host(),
            explicit_slug=request.headers.get(settings.TENANT_HEADER),
        )
        # DRF Request проксирует чтение атрибутов в HttpRequest, но не запись;
        # middleware метрик читает организацию из исходного HttpRequest
        for target in (request, request._request):
            target.organization = organization
            target.organization_membership = membership
        self.request_context = RequestContext(request.user, organization, membership)
        set_current_organization(organization)
        set_user_context(request.user, organization)

    def finalize_response(self, request, response, *args, **kwargs):
        clear_current_organization()
        return super().finalize_response(request, response, *args, **kwargs)

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['request_context'] = getattr(self, 'request_context', None)
        return context

    @property
    def organization_id(self):
        return self.request_context.organization_id

    def validated_input(self, serializer_class, partial=False):
        """Проверить тело запроса входным сериализатором и вернуть validated_data."""
        serializer = serializer_class(data=self.request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data
