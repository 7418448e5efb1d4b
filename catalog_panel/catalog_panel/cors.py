"""
Разбор CORS_ORIGINS в настройки django-cors-headers.

- пустой список или '*' → разрешены все Origin
- запись со '*' → регулярное выражение, '*' совпадает с любой подстрокой
- иначе точное совпадение
"""
import re


def wildcard_to_regex(origin):
    """'http://*.catalog.localhost:5173' → r'^http://.*\\.catalog\\.localhost:5173$'"""
    return '^' + '.*'.join(re.escape(part) for part in origin.split('*')) + '$'


def split_cors_origins(origins):
    """Возвращает (allow_all, точные Origin, регулярные выражения)."""
    cleaned = [o.strip().lower().rstrip('/') for o in origins if o and o.strip()]
    allow_all = not cleaned or '*' in cleaned
    exact = [o for o in cleaned if '*' not in o]
    patterns = [wildcard_to_regex(o) for o in cleaned if '*' in o and o != '*']
    return allow_all, exact, patterns
