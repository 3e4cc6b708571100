import re
from typing import Optional

from app.exceptions import ValidationError

TRUTHY_VALUES = {'1', 'true', 'yes', 'on'}


def get_bearer(auth: str):
    """Extract bearer token from Authorization header"""
    try:
        scheme, token = auth.split(' ', 1)
    except (AttributeError, ValueError):
        return None
    if scheme != 'Bearer':
        return None
    return token


def is_truthy(value: Optional[str]) -> bool:
    """Query-string flags like `?noOptions=1` or `?noOptions=true`"""
    if value is None:
        return False
    return value.strip().lower() in TRUTHY_VALUES


def first_value(items) -> str:
    """
    Bitrix multi-fields (EMAIL, PHONE, WEB, IM) come as `[{'VALUE': ..., 'VALUE_TYPE': ...}, ...]`.
    Returns the first VALUE or an empty string.
    """
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0].get('VALUE') or ''
    return ''


def join_non_empty(parts, sep: str) -> str:
    return sep.join(str(p) for p in parts if p).strip()


def parse_id(value: str, error_message: str) -> int:
    """Numeric path ids such as the SPA `entityTypeId`"""
    if value is None or not re.fullmatch(r'[0-9]+', value.strip()):
        raise ValidationError(error_message)
    return int(value)


def parse_int_param(value: Optional[str], name: str, *, minimum: int = 0) -> Optional[int]:
    """Optional integer query params; missing or blank means "not supplied"."""
    if value is None or not value.strip():
        return None
    try:
        parsed = int(value)
    except ValueError:
        raise ValidationError(f'{name} debe ser un número entero')
    if parsed < minimum:
        raise ValidationError(f'{name} debe ser mayor o igual que {minimum}')
    return parsed
