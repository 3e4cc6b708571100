from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.common.utils import first_value, join_non_empty

ADDRESS_FIELDS = (
    'ADDRESS',
    'ADDRESS_2',
    'ADDRESS_CITY',
    'ADDRESS_POSTAL_CODE',
    'ADDRESS_REGION',
    'ADDRESS_PROVINCE',
    'ADDRESS_COUNTRY',
)
VAT_FIELDS = ('RQ_VAT_ID', 'RQ_VAT', 'RQ_INN')


class LegalInfo(BaseModel):
    """Tax details from the company's first requisite. Empty when the company has none or the lookup failed."""

    legal_name: str = Field(default='', serialization_alias='legalName')
    vat_number: str = Field(default='', serialization_alias='vatNumber')

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_requisite(cls, requisite: Optional[dict]) -> 'LegalInfo':
        if not requisite:
            return cls()
        return cls(
            legal_name=requisite.get('RQ_COMPANY_NAME') or '',
            vat_number=next((requisite[k] for k in VAT_FIELDS if requisite.get(k)), ''),
        )


class ContactRecord(BaseModel):
    id: str
    name: str = ''
    position: str = ''
    email: str = ''
    phone: str = ''

    @classmethod
    def from_bitrix(cls, contact: dict) -> 'ContactRecord':
        return cls(
            id=str(contact.get('ID', '')),
            name=join_non_empty([contact.get('HONORIFIC'), contact.get('NAME'), contact.get('LAST_NAME')], ' '),
            position=contact.get('POST') or '',
            email=first_value(contact.get('EMAIL')),
            phone=first_value(contact.get('PHONE')),
        )


class CompanyRecord(BaseModel):
    id: str
    title: str = ''
    type: str = ''
    industry: str = ''
    email: str = ''
    phone: str = ''
    website: str = ''
    address: str = ''
    legal: LegalInfo = LegalInfo()

    @classmethod
    def from_bitrix(cls, company: dict, legal: LegalInfo) -> 'CompanyRecord':
        return cls(
            id=str(company.get('ID', '')),
            title=company.get('TITLE') or '',
            type=company.get('COMPANY_TYPE') or '',
            industry=company.get('INDUSTRY') or '',
            email=first_value(company.get('EMAIL')),
            phone=first_value(company.get('PHONE')),
            website=first_value(company.get('WEB')),
            address=join_non_empty([company.get(f) for f in ADDRESS_FIELDS], ', '),
            legal=legal,
        )


class SearchResult(BaseModel):
    company: CompanyRecord
    contacts: list[ContactRecord] = []
