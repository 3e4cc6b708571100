import asyncio
import logging

from app.bitrix import api
from app.bitrix.models import CompanyRecord, ContactRecord, LegalInfo, SearchResult
from app.exceptions import NotFoundError, ValidationError

logger = logging.getLogger('iris.bitrix')


async def gather_or_cancel(*aws) -> list:
    """
    Like `asyncio.gather`, but when one awaitable fails the others are cancelled and awaited before the error is
    raised.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def get_legal_info(company_id) -> LegalInfo:
    """
    Requisites are optional in Bitrix and the method is often not allowed for the webhook's scope, so any failure
    here gives an empty LegalInfo instead of failing the whole search.
    """
    try:
        requisites = await api.list_company_requisites(company_id)
    except Exception as e:
        logger.warning(f'Could not fetch requisites for company {company_id}: {e}')
        return LegalInfo()
    requisite = requisites[0] if isinstance(requisites, list) and requisites else None
    return LegalInfo.from_requisite(requisite)


async def get_company_contacts(company_id) -> list[ContactRecord]:
    links = await api.get_company_contact_items(company_id) or []
    contacts = await gather_or_cancel(*(api.get_contact(link['CONTACT_ID']) for link in links))
    return [ContactRecord.from_bitrix(c) for c in contacts if c]


async def build_search_result(company_id) -> SearchResult:
    company, contacts, legal = await gather_or_cancel(
        api.get_company(company_id), get_company_contacts(company_id), get_legal_info(company_id)
    )
    return SearchResult(company=CompanyRecord.from_bitrix(company or {'ID': company_id}, legal), contacts=contacts)


async def search_companies_by_name(name: str) -> list[SearchResult]:
    """
    Every company whose title contains `name`, each with its contacts and tax details.
    Results keep the order Bitrix returned the matches in.
    """
    name = (name or '').strip()
    if not name:
        raise ValidationError('Falta el parámetro ?name=')

    matches = await api.search_companies(name)
    if not matches:
        raise NotFoundError(f'No se encontraron compañías que contengan: {name}')

    logger.info(f'Company search name={name!r} matches={len(matches)}')
    return await gather_or_cancel(*(build_search_result(m['ID']) for m in matches))
