"""
Исключения API поверх стандартных DRF.

401/403/404/400 покрываются AuthenticationFailed, PermissionDenied,
NotFound и ValidationError из rest_framework.exceptions. Здесь только то,
чего в DRF нет.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class ConflictError(APIException):
    """Нарушение уникальности бизнес-сущности (например, второй household у head)."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict'
    default_code = 'conflict'


class ServiceMisconfigured(APIException):
    """Внешний сервис (S3, email) не настроен в окружении."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Service is not configured'
    default_code = 'misconfigured'


class BadRequest(APIException):
    """Нарушение бизнес-правила во входных данных (ответ {'detail': ...})."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Bad request'
    default_code = 'bad_request'
