"""
Development settings - локальная разработка
"""
from .settings import *  # noqa: F401,F403

DEBUG = True
ALLOWED_HOSTS = ['*']

# Локально организация обычно передаётся заголовком X-Catalog-Organization,
# но поддомены вида oakmont.catalog.localhost тоже работают
PLATFORM_DOMAIN = 'catalog.localhost'

# Email в консоль
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'
DEFAULT_FROM_EMAIL = DEFAULT_FROM_EMAIL or 'no-reply@catalog.localhost'  # noqa: F405

LOGGING['root']['level'] = 'DEBUG'  # noqa: F405
