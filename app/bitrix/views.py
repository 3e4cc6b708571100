from fastapi import APIRouter, Depends

from app.bitrix import api
from app.bitrix.search import search_companies_by_name
from app.common.api.errors import handle_errors
from app.common.auth import check_api_key
from app.common.utils import parse_id

router = APIRouter(prefix='/api/bitrix', tags=['bitrix'], dependencies=[Depends(check_api_key)])


@router.get('/companies/search/normalized', name='search-companies-normalized')
@handle_errors
async def search_companies_normalized(name: str = ''):
    """
    Companies whose title contains `name`, with contacts and tax details, in a flat shape for the frontend.
    """
    results = await search_companies_by_name(name)
    return [r.model_dump(by_alias=True) for r in results]


# Raw pass-through endpoints: Bitrix's `result` as-is, useful when mapping fields by hand.


@router.get('/company/fields', name='company-fields')
@handle_errors
async def company_fields():
    return await api.get_company_fields()


@router.get('/company/userfields', name='company-userfields')
@handle_errors
async def company_userfields():
    return await api.list_company_userfields()


@router.get('/deal/fields', name='deal-fields')
@handle_errors
async def deal_fields():
    return await api.get_deal_fields()


@router.get('/deal/userfields', name='deal-userfields')
@handle_errors
async def deal_userfields():
    return await api.list_deal_userfields()


@router.get('/deal/userfields/{field_id}', name='deal-userfield')
@handle_errors
async def deal_userfield(field_id: str):
    return await api.get_deal_userfield(parse_id(field_id, 'id inválido'))


@router.get('/types', name='types')
@handle_errors
async def types():
    return await api.list_types()


@router.get('/types/{entity_type_id}/fields', name='type-fields')
@handle_errors
async def type_fields(entity_type_id: str):
    return await api.get_spa_fields(parse_id(entity_type_id, 'entityTypeId inválido'))


@router.get('/types/{entity_type_id}/userfields', name='type-userfields')
@handle_errors
async def type_userfields(entity_type_id: str):
    return await api.list_spa_userfields(parse_id(entity_type_id, 'entityTypeId inválido'))
