"""Разбор query-параметров списков (comma-separated)."""
import uuid

from core.exceptions import BadRequest


def split_csv(value):
    """'a, b,,c' → ['a', 'b', 'c']; None → []"""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def parse_uuid(value, field_name='id'):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise BadRequest(f'Invalid {field_name}')


def parse_uuid_list(value, field_name='id'):
    return [parse_uuid(item, field_name) for item in split_csv(value)]


def parse_bool(value):
    """'true'/'false' (без учёта регистра) → bool, всё остальное → None"""
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False
    return None


UUID_LOOKUP_REGEX = r'[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}'
