"""
DRF authentication class: Bearer JWT от внешнего провайдера.
"""
from rest_framework.authentication import BaseAuthentication

from catalog_panel.sentry_config import set_user_context
from .services import AuthService


class BearerTokenAuthentication(BaseAuthentication):
    """
    Каждый запрос к API обязан нести 'Authorization: Bearer <JWT>'.
    Отсутствующий заголовок тоже даёт 401, а не анонимный доступ.
    """

    keyword = 'Bearer'

    def authenticate(self, request):
        header = request.META.get('HTTP_AUTHORIZATION')
        user, claims = AuthService().authenticate_header_value(header)
        set_user_context(user)
        return user, claims

    def authenticate_header(self, request):
        # Наличие WWW-Authenticate заставляет DRF отвечать 401 вместо 403
        return self.keyword
