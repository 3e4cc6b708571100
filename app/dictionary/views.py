from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.common.api.errors import handle_errors
from app.common.auth import check_api_key
from app.common.utils import is_truthy, parse_id, parse_int_param
from app.dictionary.catalog import COMPANY, DEAL, EntityKind, build_catalog, list_spa_types

router = APIRouter(prefix='/api/dict', tags=['dictionary'], dependencies=[Depends(check_api_key)])


async def _catalog_response(kind: EntityKind, start: Optional[str], limit: Optional[str], no_options: Optional[str]):
    fields = await build_catalog(
        kind,
        start=parse_int_param(start, 'start'),
        limit=parse_int_param(limit, 'limit', minimum=1),
        skip_options=is_truthy(no_options),
    )
    return {'entity': kind.label, 'count': len(fields), 'fields': [f.model_dump() for f in fields]}


@router.get('/company', name='dict-company')
@handle_errors
async def company_dictionary(
    start: Optional[str] = None, limit: Optional[str] = None, no_options: Optional[str] = Query(None, alias='noOptions')
):
    """Native and user fields of companies, normalised"""
    return await _catalog_response(COMPANY, start, limit, no_options)


@router.get('/deal', name='dict-deal')
@handle_errors
async def deal_dictionary(
    start: Optional[str] = None, limit: Optional[str] = None, no_options: Optional[str] = Query(None, alias='noOptions')
):
    """Native and user fields of deals, normalised"""
    return await _catalog_response(DEAL, start, limit, no_options)


@router.get('/spa/{entity_type_id}', name='dict-spa')
@handle_errors
async def spa_dictionary(
    entity_type_id: str,
    start: Optional[str] = None,
    limit: Optional[str] = None,
    no_options: Optional[str] = Query(None, alias='noOptions'),
):
    """Native and user fields of a smart process, by its entityTypeId"""
    kind = EntityKind.spa(parse_id(entity_type_id, 'entityTypeId inválido'))
    return await _catalog_response(kind, start, limit, no_options)


@router.get('/spas', name='dict-spas')
@handle_errors
async def spa_types():
    """Every smart process type: `{id, title, code}`"""
    types = await list_spa_types()
    return {'count': len(types), 'types': [t.model_dump() for t in types]}
