"""Shared utilities for Bitrix tests."""

import json

import httpx

WEBHOOK_BASE = 'https://test.bitrix24.es/rest/1/s3cr3t/'


class FakeBitrix:
    """
    Stands in for a Bitrix24 portal behind an httpx.MockTransport.

    Routes map a REST method name to either an envelope dict or a callable taking the request params and returning
    an envelope. Every call is recorded in `calls` as `(method, params)`.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method: str, result=None, **extra):
        self.routes[method] = {'result': result, **extra}

    def add_callable(self, method: str, func):
        self.routes[method] = func

    def add_pages(self, method: str, pages: list[list], *, page_size: int = 50, wrap_key: str = None):
        """
        Serves `pages` as a cursor chain: page i answers `start=i * page_size` and points to the next one, the
        last page has no `next`.
        """

        def _page(params):
            index = params.get('start', 0) // page_size
            items = pages[index]
            envelope = {'result': {wrap_key: items} if wrap_key else items, 'total': sum(len(p) for p in pages)}
            if index + 1 < len(pages):
                envelope['next'] = (index + 1) * page_size
            return envelope

        self.routes[method] = _page

    def fail(self, method: str, error: str, description: str = None, status_code: int = 400):
        envelope = {'error': error}
        if description is not None:
            envelope['error_description'] = description
        self.routes[method] = (status_code, envelope)

    def calls_to(self, method: str) -> list[dict]:
        return [params for m, params in self.calls if m == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit('/', 1)[-1].removesuffix('.json')
        params = json.loads(request.content or b'{}')
        self.calls.append((method, params))

        route = self.routes.get(method)
        if route is None:
            return httpx.Response(
                400, json={'error': 'ERROR_METHOD_NOT_FOUND', 'error_description': 'Method not found!'}
            )
        if isinstance(route, tuple):
            status_code, envelope = route
            return httpx.Response(status_code, json=envelope)
        envelope = route(params) if callable(route) else route
        return httpx.Response(200, json=envelope)


def company_data(company_id: int = 10, **kwargs) -> dict:
    data = {
        'ID': str(company_id),
        'TITLE': 'Acme Iberia',
        'COMPANY_TYPE': 'CUSTOMER',
        'INDUSTRY': 'MANUFACTURING',
        'EMAIL': [{'ID': '1', 'VALUE': 'hola@acme.es', 'VALUE_TYPE': 'WORK'}],
        'PHONE': [{'ID': '2', 'VALUE': '+34 910 000 000', 'VALUE_TYPE': 'WORK'}],
        'WEB': [{'ID': '3', 'VALUE': 'https://acme.es', 'VALUE_TYPE': 'WORK'}],
        'ADDRESS': 'Calle Mayor 1',
        'ADDRESS_2': None,
        'ADDRESS_CITY': 'Madrid',
        'ADDRESS_POSTAL_CODE': '28013',
        'ADDRESS_REGION': '',
        'ADDRESS_PROVINCE': 'Madrid',
        'ADDRESS_COUNTRY': 'España',
    }
    data.update(kwargs)
    return data


def contact_data(contact_id: int = 20, **kwargs) -> dict:
    data = {
        'ID': str(contact_id),
        'HONORIFIC': 'Sra.',
        'NAME': 'Ana',
        'LAST_NAME': 'García',
        'POST': 'CFO',
        'EMAIL': [{'ID': '5', 'VALUE': 'ana@acme.es', 'VALUE_TYPE': 'WORK'}],
        'PHONE': [],
    }
    data.update(kwargs)
    return data


def requisite_data(**kwargs) -> dict:
    data = {'ID': '7', 'RQ_COMPANY_NAME': 'Acme Iberia S.L.', 'RQ_VAT_ID': 'ESB12345678', 'RQ_INN': ''}
    data.update(kwargs)
    return data


def setup_company_search(fake: FakeBitrix, companies: list[dict], contacts_by_company: dict = None):
    """Routes for a full search: list, get, contact links, contact detail and requisites"""
    contacts_by_company = contacts_by_company or {}
    companies_by_id = {c['ID']: c for c in companies}
    contacts_by_id = {c['ID']: c for cs in contacts_by_company.values() for c in cs}

    fake.add('crm.company.list', [{'ID': c['ID']} for c in companies])
    fake.add_callable('crm.company.get', lambda p: {'result': companies_by_id[str(p['ID'])]})
    fake.add_callable(
        'crm.company.contact.items.get',
        lambda p: {'result': [{'CONTACT_ID': c['ID']} for c in contacts_by_company.get(str(p['ID']), [])]},
    )
    fake.add_callable('crm.contact.get', lambda p: {'result': contacts_by_id[str(p['ID'])]})
    fake.add('crm.requisite.list', [requisite_data()])
