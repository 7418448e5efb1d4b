"""Базовые абстрактные модели, общие для всех приложений."""
import uuid

from django.db import models


class TimeStampedModel(models.Model):
    """UUID-первичный ключ и отметки создания/обновления."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
