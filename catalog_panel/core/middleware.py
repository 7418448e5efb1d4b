"""
Middleware: метрики запросов (CORS обслуживает django-cors-headers).
"""
import time
import logging

from django.utils.deprecation import MiddlewareMixin

metrics_logger = logging.getLogger('request_metrics')


class RequestMetricsMiddleware(MiddlewareMixin):
    """
    Логирование метрик каждого запроса:
    метод, путь, статус, длительность, пользователь и организация.
    """

    SLOW_REQUEST_SECONDS = 2.0

    def process_request(self, request):
        request._start_time = time.time()
        return None

    def process_response(self, request, response):
        if not hasattr(request, '_start_time'):
            return response

        duration = time.time() - request._start_time

        user = getattr(request, 'user', None)
        user_id = 'anonymous'
        if user is not None and user.is_authenticated:
            user_id = user.pk
        organization = getattr(request, 'organization', None)
        org_slug = organization.slug if organization is not None else '-'

        metrics_logger.info(
            f"method={request.method} "
            f"path={request.path} "
            f"status={response.status_code} "
            f"duration={duration:.3f}s "
            f"user={user_id} "
            f"org={org_slug}"
        )

        response['X-Request-Duration'] = f"{duration:.3f}"

        if duration > self.SLOW_REQUEST_SECONDS:
            metrics_logger.warning(
                f"SLOW_REQUEST: {request.method} {request.path} "
                f"took {duration:.3f}s (user={user_id}, org={org_slug})"
            )

        return response
