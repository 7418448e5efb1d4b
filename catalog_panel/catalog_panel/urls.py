"""
URL configuration for catalog_panel project.

Все API под /api/; каждое приложение подключается своим urls.py.
"""
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path

from .health import health_check, live_check, ready_check


def root(request):
    return JsonResponse({
        'status': 'ok',
        'service': 'catalog_panel_backend',
    })


urlpatterns = [
    path('', root, name='root'),
    path('admin/', admin.site.urls),

    # Health checks (без аутентификации)
    path('api/health/', health_check, name='health'),
    path('api/health/ready/', ready_check, name='health-ready'),
    path('api/health/live/', live_check, name='health-live'),

    path('api/auth/', include('accounts.urls')),
    path('api/organizations/', include('tenants.urls')),
    path('api/settings/customers/', include('club_settings.urls')),
    path('api/customers/', include('customers.urls')),
    path('api/classes/', include('classes.urls')),
]
