"""
Сервис аутентификации: разбор заголовка Authorization, проверка JWT (RS256)
публичным ключом провайдера и upsert локального пользователя по claim sub.
"""
import logging

import jwt
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.backends import TokenBackend
from rest_framework_simplejwt.exceptions import TokenBackendError

from .models import User

logger = logging.getLogger(__name__)

# Домен для синтетического email, если провайдер не прислал адрес
PLACEHOLDER_EMAIL_DOMAIN = 'clerk.local'


class AuthService:
    """Проверка bearer-токенов. Алгоритм фиксирован, заголовок токена его не выбирает."""

    def __init__(self, public_key=None, algorithm=None):
        self.public_key = settings.CLERK_JWT_PUBLIC_KEY if public_key is None else public_key
        self.algorithm = algorithm or getattr(settings, 'JWT_ALGORITHM', 'RS256')

    @staticmethod
    def extract_token_from_header(header):
        """Ожидается ровно 'Bearer <token>' (схема без учёта регистра)."""
        if not header:
            raise AuthenticationFailed('Missing Authorization header')

        parts = header.split(' ')
        if len(parts) != 2:
            raise AuthenticationFailed('Invalid Authorization header')

        scheme, token = parts
        if scheme.lower() != 'bearer' or not token:
            raise AuthenticationFailed('Invalid Authorization header')
        return token

    def verify_token(self, token):
        if not self.public_key:
            logger.error('CLERK_JWT_PUBLIC_KEY is not configured, cannot verify tokens')
            raise AuthenticationFailed('Authentication is not configured')

        backend = TokenBackend(algorithm=self.algorithm, verifying_key=self.public_key)
        try:
            return backend.decode(token, verify=True)
        except (TokenBackendError, jwt.PyJWTError, ValueError) as exc:
            # Причину не раскрываем клиенту, только в лог
            logger.info(f'JWT verification failed: {exc}')
            raise AuthenticationFailed('Invalid token')

    @staticmethod
    def get_or_create_user_from_claims(claims):
        subject = claims.get('sub')
        if not subject:
            raise AuthenticationFailed('Token missing subject')

        email = (
            claims.get('email')
            or claims.get('email_address')
            or f'{subject}@{PLACEHOLDER_EMAIL_DOMAIN}'
        )
        name_parts = [claims.get('first_name'), claims.get('last_name')]
        name = claims.get('name') or ' '.join(p for p in name_parts if p) or None
        if name:
            # claim ничем не ограничен, колонка ограничена
            name = name[:User._meta.get_field('name').max_length]

        user, created = User.objects.update_or_create(
            external_id=subject,
            defaults={'email': email, 'name': name},
        )
        if created:
            logger.info(f'Created user {user.pk} for subject {subject}')
        return user

    def authenticate_header_value(self, header):
        """Полный цикл: заголовок → claims → пользователь."""
        token = self.extract_token_from_header(header)
        claims = self.verify_token(token)
        return self.get_or_create_user_from_claims(claims), claims
