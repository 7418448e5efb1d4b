"""
Контекст запроса: пользователь + организация + членство.

RequestContext передаётся в сервисы явно (каждый запрос к данным получает
organization_id аргументом). Дополнительно текущая организация кладётся в
contextvar нужен только для логов и Sentry, не для фильтрации данных.
"""
import contextvars
from dataclasses import dataclass

_current_organization: contextvars.ContextVar = contextvars.ContextVar(
    'current_organization', default=None
)


@dataclass(frozen=True)
class RequestContext:
    user: object
    organization: object
    membership: object

    @property
    def organization_id(self):
        return self.organization.pk

    @property
    def user_id(self):
        return self.user.pk


def set_current_organization(organization):
    """Установить текущую организацию в context."""
    _current_organization.set(organization)


def get_current_organization():
    """Текущая организация из context или None."""
    return _current_organization.get()


def clear_current_organization():
    _current_organization.set(None)
