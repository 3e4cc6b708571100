import logging
import time
from typing import Optional

import httpx
import logfire

from app.core.config import settings
from app.exceptions import ConfigurationError, UnexpectedError, UpstreamError

logger = logging.getLogger('iris.bitrix')

# Single client so connections to the portal are reused across requests.
_client: Optional[httpx.AsyncClient] = None

# crm.requisite.list ENTITY_TYPE_ID for companies
COMPANY_ENTITY_TYPE_ID = 4


def _get_client() -> httpx.AsyncClient:
    global _client
    if _client is None:
        _client = httpx.AsyncClient()
    return _client


async def close_client():
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def _method_url(method: str) -> str:
    if not settings.bitrix_webhook_base:
        raise ConfigurationError('BITRIX_WEBHOOK_BASE is not configured')
    return f'{settings.bitrix_webhook_base.rstrip("/")}/{method}.json'


async def bitrix_request(method: str, params: Optional[dict] = None) -> dict:
    """
    Call a Bitrix24 REST method through the inbound webhook.

    Args:
        method: REST method name, e.g. `crm.company.list`
        params: Method parameters, sent as the JSON body

    Returns:
        The whole decoded envelope: `{'result': ..., 'next': ..., 'total': ..., 'time': ...}`, which the
        paginated listings need for the `next` cursor

    Raises:
        ConfigurationError: the webhook base is not set (raised before any network call)
        UpstreamError: the envelope contains `error`, whatever the HTTP status
        UnexpectedError: network failure or a body that isn't a JSON object
    """
    url = _method_url(method)
    params = params or {}

    with logfire.span('bitrix {method}', method=method):
        started = time.monotonic()
        try:
            response = await _get_client().post(url, json=params, timeout=settings.bitrix_timeout)
        except httpx.HTTPError as e:
            logger.error(f'Bitrix request failed method={method}: {e!r}')
            raise UnexpectedError(f'Bitrix request failed: {e.__class__.__name__}') from e

        logger.info(
            f'Request method={method} status_code={response.status_code} '
            f'elapsed={(time.monotonic() - started) * 1000:.0f}ms'
        )
        try:
            envelope = response.json()
        except ValueError as e:
            logger.error(f'Bitrix returned invalid JSON for {method}. Response: {response.text[:500]}')
            raise UnexpectedError(f'Invalid JSON from Bitrix for {method}') from e

        if not isinstance(envelope, dict):
            raise UnexpectedError(f'Unexpected response from Bitrix for {method}')
        if envelope.get('error'):
            message = envelope.get('error_description') or envelope['error']
            logger.warning(f'Bitrix API error method={method} error={envelope["error"]}: {message}')
            raise UpstreamError(message, code=envelope['error'])
        return envelope


async def bitrix_call(method: str, params: Optional[dict] = None):
    """Call a method and return only its `result`"""
    return (await bitrix_request(method, params)).get('result')


async def search_companies(name: str) -> list:
    """IDs of companies whose TITLE contains `name`"""
    return await bitrix_call('crm.company.list', {'filter': {'%TITLE': name}, 'select': ['ID']})


async def get_company(company_id) -> dict:
    return await bitrix_call('crm.company.get', {'ID': company_id})


async def get_company_contact_items(company_id) -> list:
    return await bitrix_call('crm.company.contact.items.get', {'ID': company_id})


async def get_contact(contact_id) -> dict:
    return await bitrix_call('crm.contact.get', {'ID': contact_id})


async def list_company_requisites(company_id) -> list:
    return await bitrix_call(
        'crm.requisite.list', {'filter': {'ENTITY_TYPE_ID': COMPANY_ENTITY_TYPE_ID, 'ENTITY_ID': company_id}}
    )


async def get_company_fields() -> dict:
    return await bitrix_call('crm.company.fields')


async def list_company_userfields() -> list:
    return await bitrix_call('crm.company.userfield.list')


async def get_deal_fields() -> dict:
    return await bitrix_call('crm.deal.fields')


async def list_deal_userfields() -> list:
    return await bitrix_call('crm.deal.userfield.list')


async def get_deal_userfield(field_id: int) -> dict:
    return await bitrix_call('crm.deal.userfield.get', {'id': field_id})


async def list_types() -> dict:
    return await bitrix_call('crm.type.list')


def spa_userfield_params(entity_type_id: int) -> dict:
    return {'moduleId': 'crm', 'filter': {'entityId': f'CRM_{entity_type_id}'}}


async def get_spa_fields(entity_type_id: int) -> dict:
    return await bitrix_call('crm.item.fields', {'entityTypeId': entity_type_id})


async def list_spa_userfields(entity_type_id: int) -> dict:
    return await bitrix_call('userfieldconfig.list', spa_userfield_params(entity_type_id))
