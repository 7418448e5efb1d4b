"""
Health Check Endpoint for Monitoring
=====================================
Используется системой мониторинга (и балансировщиком) для проверки состояния.
Аутентификация и тенант не требуются.
"""
import time

from django.conf import settings
from django.db import connection
from django.db.utils import DatabaseError
from django.http import JsonResponse


def health_check(request):
    """
    Возвращает 200 если база доступна и критичные настройки заданы, иначе 500.
    """
    status = {
        'status': 'ok',
        'service': 'catalog_panel',
        'timestamp': time.time(),
        'version': getattr(settings, 'VERSION', '0.1.0'),
        'checks': {},
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
        status['checks']['database'] = 'ok'
    except DatabaseError as e:
        status['status'] = 'unhealthy'
        status['checks']['database'] = f'error: {str(e)[:100]}'

    # Без ключа проверки JWT ни один запрос не пройдёт аутентификацию
    if getattr(settings, 'CLERK_JWT_PUBLIC_KEY', ''):
        status['checks']['jwt_public_key'] = 'ok'
    else:
        status['checks']['jwt_public_key'] = 'missing'

    http_status = 200 if status['status'] == 'ok' else 500
    return JsonResponse(status, status=http_status)


def ready_check(request):
    """Readiness probe - готово ли приложение обслуживать запросы."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        return JsonResponse({'ready': True})
    except DatabaseError:
        return JsonResponse({'ready': False}, status=503)


def live_check(request):
    """Liveness probe - минимальная проверка что процесс жив."""
    return JsonResponse({'alive': True, 'timestamp': time.time()})
