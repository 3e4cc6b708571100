"""
Field catalogs for the `/api/dict/*` endpoints.

A catalog is the native fields of an entity (one call, small, never paginated) followed by its user fields, which
Bitrix pages with a `next` cursor. `iter_pages` walks the cursor, `build_catalog` decides when to stop.
"""

import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional

from pydantic import BaseModel

from app.bitrix.api import bitrix_call, bitrix_request, spa_userfield_params
from app.dictionary.fields import FieldDescriptor, FieldSource, attach_options, field_code, normalize_field

logger = logging.getLogger('iris.dictionary')


@dataclass(frozen=True)
class EntityKind:
    """Which pair of Bitrix methods describes an entity's fields"""

    label: str
    fields_method: str
    userfields_method: str
    fields_params: dict = field(default_factory=dict)
    userfields_params: dict = field(default_factory=dict)

    @classmethod
    def spa(cls, entity_type_id: int) -> 'EntityKind':
        return cls(
            label=f'spa:{entity_type_id}',
            fields_method='crm.item.fields',
            userfields_method='userfieldconfig.list',
            fields_params={'entityTypeId': entity_type_id},
            userfields_params=spa_userfield_params(entity_type_id),
        )


COMPANY = EntityKind(
    label='company', fields_method='crm.company.fields', userfields_method='crm.company.userfield.list'
)
DEAL = EntityKind(label='deal', fields_method='crm.deal.fields', userfields_method='crm.deal.userfield.list')


@dataclass
class CatalogPage:
    items: list
    next: Optional[int] = None


class SpaType(BaseModel):
    id: Optional[int] = None
    title: str = ''
    code: str = ''


def _page_items(result, key: Optional[str] = None) -> list:
    """
    List methods return their rows either directly (`crm.company.userfield.list`) or wrapped
    (`userfieldconfig.list` -> `{'fields': [...]}`, `crm.type.list` -> `{'types': [...]}`).
    """
    if isinstance(result, dict):
        if key:
            result = result.get(key)
        else:
            result = next((v for v in result.values() if isinstance(v, list)), None)
    return result if isinstance(result, list) else []


async def iter_pages(
    method: str, params: Optional[dict] = None, *, start: int = 0, items_key: Optional[str] = None
) -> AsyncIterator[CatalogPage]:
    """
    Yields pages of a Bitrix list method, following `next` until Bitrix stops returning one.
    A page can be empty and still carry a cursor, so only the cursor ends the walk.
    """
    cursor = start
    while True:
        envelope = await bitrix_request(method, {**(params or {}), 'start': cursor})
        page = CatalogPage(items=_page_items(envelope.get('result'), items_key), next=envelope.get('next'))
        logger.debug(f'{method} start={cursor} items={len(page.items)} next={page.next}')
        yield page
        if page.next is None:
            return
        cursor = page.next


def _record_id(raw) -> str:
    if isinstance(raw, dict):
        return f'id={raw.get("ID") or raw.get("id")}'
    return repr(raw)


def _native_entries(result) -> dict:
    """`crm.item.fields` wraps its catalog as `{'fields': {...}}`, the crm.<entity>.fields methods don't"""
    if isinstance(result, dict) and isinstance(result.get('fields'), dict):
        return result['fields']
    return result if isinstance(result, dict) else {}


async def get_native_fields(kind: EntityKind, *, skip_options: bool = False) -> list[FieldDescriptor]:
    result = await bitrix_call(kind.fields_method, kind.fields_params)
    descriptors = []
    for code, raw in _native_entries(result).items():
        descriptor = normalize_field(code, raw, FieldSource.NATIVE)
        if not skip_options:
            attach_options(descriptor, raw)
        descriptors.append(descriptor)
    return descriptors


async def build_catalog(
    kind: EntityKind, *, start: Optional[int] = None, limit: Optional[int] = None, skip_options: bool = False
) -> list[FieldDescriptor]:
    """
    Native fields followed by user fields.

    With `limit`, stops as soon as the combined list reaches it, possibly in the middle of a page, and never fetches
    a page it doesn't need. Native fields always come back whole, so if they alone reach `limit` no user field page
    is requested.
    """
    fields = await get_native_fields(kind, skip_options=skip_options)
    native_count = len(fields)
    if limit is not None and native_count >= limit:
        logger.info(f'{kind.label}: {native_count} native fields already reach limit={limit}')
        return fields

    pages = iter_pages(kind.userfields_method, kind.userfields_params, start=start or 0)
    try:
        async for page in pages:
            for raw in page.items:
                code = field_code(raw)
                if not code:
                    logger.warning(f'{kind.label}: user field without code: {_record_id(raw)}')
                descriptor = normalize_field(code, raw, FieldSource.USER_DEFINED)
                if not skip_options:
                    attach_options(descriptor, raw)
                fields.append(descriptor)
                if limit is not None and len(fields) >= limit:
                    return fields[:limit]
    finally:
        await pages.aclose()

    logger.info(f'{kind.label}: {native_count} native + {len(fields) - native_count} user fields')
    return fields


async def list_spa_types() -> list[SpaType]:
    """All smart process (SPA) type definitions, following the cursor to the end"""
    types = []
    async for page in iter_pages('crm.type.list', items_key='types'):
        for raw in page.items:
            types.append(
                SpaType(
                    id=raw.get('entityTypeId') or raw.get('id'),
                    title=raw.get('title') or '',
                    code=raw.get('code') or '',
                )
            )
    return types
