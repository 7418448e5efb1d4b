"""
Приёмники сигналов ядра.
"""
import logging

from corsheaders.signals import check_request_enabled
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(check_request_enabled)
def log_blocked_cors_origin(sender, request, **kwargs):
    # django-cors-headers спрашивает сигнал только про Origin вне allow-list
    logger.warning(f"CORS blocked origin: {request.headers.get('Origin')}")
    return False
