"""Company Pydantic schemas (request DTOs and response models)."""


from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from partners_hub.schemas.common import CamelModel

class CompanyCreate(CamelModel):
    company_name: str = Field(min_length=1, max_length=255)
    netsuite_number: str | None = None
    company_email: str | None = None
    class_id: str | None = None
    support_fund_level_id: str | None = None
    incoterm: str | None = None
    payment_term: str | None = None
    contract_start_date: date | None = None
    contract_end_date: date | None = None
    annual_target: Decimal | None = Field(default=None, ge=0)
    ship_to_name: str | None = None
    ship_to_street: str | None = None
    ship_to_city: str | None = None
    ship_to_state: str | None = None
    ship_to_zip: str | None = None
    ship_to_country: str | None = None
    ship_to_contact_name: str | None = None
    ship_to_contact_email: str | None = None
    ship_to_contact_phone: str | None = None

class CompanyUpdate(CamelModel):
    company_name: str | None = Field(default=None, min_length=1, max_length=255)
    netsuite_number: str | None = None
    company_email: str | None = None
    class_id: str | None = None
    support_fund_level_id: str | None = None
    incoterm: str | None = None
    payment_term: str | None = None
    contract_start_date: date | None = None
    contract_end_date: date | None = None
    annual_target: Decimal | None = Field(default=None, ge=0)
    ship_to_name: str | None = None
    ship_to_street: str | None = None
    ship_to_city: str | None = None
    ship_to_state: str | None = None
    ship_to_zip: str | None = None
    ship_to_country: str | None = None
    ship_to_contact_name: str | None = None
    ship_to_contact_email: str | None = None
    ship_to_contact_phone: str | None = None

class CompanyOut(CamelModel):
    id: str
    company_name: str
    netsuite_number: str | None = None
    company_email: str | None = None
    class_id: str | None = None
    class_name: str | None = None
    support_fund_level_id: str | None = None
    support_fund_percent: Decimal
    incoterm: str | None = None
    payment_term: str | None = None
    contract_start_date: date | None = None
    contract_end_date: date | None = None
    annual_target: Decimal | None = None
    ship_to_name: str | None = None
    ship_to_street: str | None = None
    ship_to_city: str | None = None
    ship_to_state: str | None = None
    ship_to_zip: str | None = None
    ship_to_country: str | None = None
    ship_to_contact_name: str | None = None
    ship_to_contact_email: str | None = None
    ship_to_contact_phone: str | None = None
    created_at: datetime
    updated_at: datetime
