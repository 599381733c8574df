"""Product and catalog Pydantic schemas."""


from datetime import datetime
from decimal import Decimal

from pydantic import Field

from partners_hub.schemas.common import CamelModel

_PRICE = {"ge": 0, "max_digits": 12, "decimal_places": 2}

class ProductCreate(CamelModel):
    sku: str = Field(min_length=1, max_length=100)
    item_name: str = Field(min_length=1, max_length=255)
    upc: str | None = None
    size: str | None = None
    category_id: str | None = None
    price_americas: Decimal = Field(**_PRICE)
    price_international: Decimal = Field(**_PRICE)
    case_pack: int = Field(default=1, ge=1)
    enable: bool = True
    list_in_support_funds: bool = False
    visible_to_americas: bool = True
    visible_to_international: bool = True

class ProductUpdate(CamelModel):
    sku: str | None = Field(default=None, min_length=1, max_length=100)
    item_name: str | None = Field(default=None, min_length=1, max_length=255)
    upc: str | None = None
    size: str | None = None
    category_id: str | None = None
    price_americas: Decimal | None = Field(default=None, **_PRICE)
    price_international: Decimal | None = Field(default=None, **_PRICE)
    case_pack: int | None = Field(default=None, ge=1)
    enable: bool | None = None
    list_in_support_funds: bool | None = None
    visible_to_americas: bool | None = None
    visible_to_international: bool | None = None

class ProductOut(CamelModel):
    id: str
    sku: str
    item_name: str
    upc: str | None = None
    size: str | None = None
    category_id: str | None = None
    price_americas: Decimal
    price_international: Decimal
    case_pack: int
    enable: bool
    list_in_support_funds: bool
    visible_to_americas: bool
    visible_to_international: bool
    picture_url: str | None = None
    created_at: datetime
    updated_at: datetime

class CatalogProductOut(CamelModel):
    """A product as one company sees it: a single unit price for its tier."""

    id: str
    sku: str
    item_name: str
    upc: str | None = None
    size: str | None = None
    category_id: str | None = None
    category_name: str | None = None
    case_pack: int
    unit_price: Decimal
    list_in_support_funds: bool
    picture_url: str | None = None

class CatalogOut(CamelModel):
    company_id: str
    price_tier: str
    products: list[CatalogProductOut]
