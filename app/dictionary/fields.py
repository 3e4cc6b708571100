"""
Normalisation of Bitrix field metadata.

Bitrix describes fields in two conventions. Native catalogs (`crm.company.fields`, `crm.item.fields`) use
camelCase (`title`, `isRequired`, `isMultiple`, `items`), while user field listings (`crm.*.userfield.list`)
use upper case (`EDIT_FORM_LABEL`, `MANDATORY: 'Y'`, `LIST`) and `userfieldconfig.list` uses camelCase again with
different names (`editFormLabel`, `mandatory`, `enum`). Each attribute of a FieldDescriptor is resolved through an
ordered tuple of keys, the first non-empty value wins.
"""

import logging
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from app.core.config import settings

logger = logging.getLogger('iris.dictionary')

TITLE_KEYS = (
    'title',
    'editFormLabel',
    'EDIT_FORM_LABEL',
    'listLabel',
    'listColumnLabel',
    'LIST_COLUMN_LABEL',
    'formLabel',
    'filterLabel',
)
TYPE_KEYS = ('type', 'userTypeId', 'USER_TYPE_ID')
MULTIPLE_KEYS = ('isMultiple', 'multiple', 'MULTIPLE')
MANDATORY_KEYS = ('isRequired', 'mandatory', 'MANDATORY')
OPTION_LIST_KEYS = ('items', 'LIST', 'list', 'enum', 'ENUM')
OPTION_ID_KEYS = ('ID', 'id')
OPTION_VALUE_KEYS = ('VALUE', 'value')
CODE_KEYS = ('fieldName', 'FIELD_NAME')
CODE_FALLBACK_KEYS = ('field', 'FIELD')

OPTION_SEPARATOR = ' | '


class FieldSource(str, Enum):
    NATIVE = 'native'
    USER_DEFINED = 'userDefined'


class FieldDescriptor(BaseModel):
    code: str
    title: str
    type: str = ''
    multiple: bool = False
    mandatory: bool = False
    source: FieldSource
    options: str = ''

    model_config = ConfigDict(use_enum_values=True)


def _label(value: Any) -> str:
    """
    Labels are plain strings, except in user field listings where they can be `{'es': 'Sector', 'en': 'Sector'}`.
    """
    if isinstance(value, dict):
        preferred = value.get(settings.bitrix_label_lang)
        if preferred:
            return str(preferred)
        return next((str(v) for v in value.values() if v), '')
    if value is None:
        return ''
    return str(value)


def _first_label(raw: dict, keys: tuple) -> str:
    for key in keys:
        if label := _label(raw.get(key)):
            return label
    return ''


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.upper() == 'Y'
    return value is True


def _any_flag(raw: dict, keys: tuple) -> bool:
    return any(_flag(raw.get(key)) for key in keys)


def _first_present(raw: dict, keys: tuple) -> Optional[Any]:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ''):
            return value
    return None


def field_code(raw: dict) -> str:
    """Code of a user field record, `fieldName` style first then `field` style"""
    if not isinstance(raw, dict):
        return ''
    code = _first_present(raw, CODE_KEYS)
    if code is None:
        code = _first_present(raw, CODE_FALLBACK_KEYS)
    return '' if code is None else str(code)


def normalize_field(code: str, raw: dict, source: FieldSource) -> FieldDescriptor:
    """Builds a FieldDescriptor without options"""
    raw = raw if isinstance(raw, dict) else {}
    return FieldDescriptor(
        code=code,
        title=_first_label(raw, TITLE_KEYS) or code,
        type=_first_label(raw, TYPE_KEYS),
        multiple=_any_flag(raw, MULTIPLE_KEYS),
        mandatory=_any_flag(raw, MANDATORY_KEYS),
        source=source,
    )


def format_options(raw: dict) -> str:
    """
    `[{'ID': '45', 'VALUE': 'Retail'}, {'ID': '46', 'VALUE': 'Wholesale'}]` -> `'45:Retail | 46:Wholesale'`.
    Entries without an id use their value as id.
    """
    if not isinstance(raw, dict):
        return ''
    options = next((raw[k] for k in OPTION_LIST_KEYS if isinstance(raw.get(k), list)), None)
    if not options:
        return ''

    formatted = []
    for option in options:
        if not isinstance(option, dict):
            formatted.append(f'{option}:{option}')
            continue
        value = _first_present(option, OPTION_VALUE_KEYS)
        value = '' if value is None else value
        option_id = _first_present(option, OPTION_ID_KEYS)
        formatted.append(f'{value if option_id is None else option_id}:{value}')
    return OPTION_SEPARATOR.join(formatted)


def attach_options(descriptor: FieldDescriptor, raw: dict) -> FieldDescriptor:
    descriptor.options = format_options(raw)
    return descriptor
