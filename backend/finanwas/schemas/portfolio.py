"""Portfolio Schemas — assets, dividends and snapshot request bodies.

Invariants:
    - type in AssetType values, currency in CURRENCIES keys
    - quantity and purchase_price strictly positive
    - Tickers sanitized (uppercase, [A-Z0-9.-]) and then format-checked
    - Update schemas are all-optional; routes apply model_dump(exclude_unset=True)

Design Decisions:
    - Annotated + AfterValidator: one checker shared by create and update models
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from finanwas.core.domain_types import AssetType, CURRENCIES, PaymentType
from finanwas.core.sanitize import sanitize_string, sanitize_ticker
from finanwas.core.validators import is_valid_ticker

ASSET_TYPE_VALUES = {t.value for t in AssetType}


def _check_type(v: str) -> str:
    v = v.strip()
    if v not in ASSET_TYPE_VALUES:
        raise ValueError("Tipo de activo inválido")
    return v


def _check_currency(v: str) -> str:
    v = v.strip().upper()
    if v not in CURRENCIES:
        raise ValueError("Moneda inválida")
    return v


def _check_ticker(v: str) -> str | None:
    if not v.strip():
        return None
    ticker = sanitize_ticker(v)
    if not is_valid_ticker(ticker):
        raise ValueError("Ticker inválido")
    return ticker


def _check_name(v: str) -> str:
    v = sanitize_string(v, max_length=255)
    if not v:
        raise ValueError("El nombre es requerido")
    return v


AssetTypeStr = Annotated[str, AfterValidator(_check_type)]
CurrencyStr = Annotated[str, AfterValidator(_check_currency)]
TickerStr = Annotated[str, AfterValidator(_check_ticker)]
NameStr = Annotated[str, AfterValidator(_check_name)]


class AssetCreate(BaseModel):
    type: AssetTypeStr
    ticker: TickerStr | None = None
    name: NameStr
    quantity: float = Field(gt=0)
    purchase_price: float = Field(gt=0)
    purchase_date: date
    currency: CurrencyStr
    current_price: float | None = Field(None, gt=0)
    notes: str | None = Field(None, max_length=5000)
    dividend_yield: float | None = Field(None, ge=0, le=100)
    dividend_frequency: str | None = Field(None, max_length=20)
    next_dividend_date: date | None = None


class AssetUpdate(BaseModel):
    type: AssetTypeStr | None = None
    ticker: TickerStr | None = None
    name: NameStr | None = None
    quantity: float | None = Field(None, gt=0)
    purchase_price: float | None = Field(None, gt=0)
    purchase_date: date | None = None
    currency: CurrencyStr | None = None
    current_price: float | None = Field(None, gt=0)
    notes: str | None = Field(None, max_length=5000)
    dividend_yield: float | None = Field(None, ge=0, le=100)
    dividend_frequency: str | None = Field(None, max_length=20)
    next_dividend_date: date | None = None


class SnapshotRequest(BaseModel):
    date: str | None = None
    currency: CurrencyStr = "ARS"


class DividendCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    asset_id: UUID
    payment_date: date
    amount_per_share: float = Field(ge=0)
    total_amount: float = Field(gt=0)
    currency: CurrencyStr = "USD"
    payment_type: PaymentType = PaymentType.CASH.value
    shares_received: float | None = Field(None, ge=0)
    reinvested: bool = False
    withholding_tax: float = Field(0.0, ge=0)
    notes: str | None = Field(None, max_length=2000)


class DividendUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    payment_date: date | None = None
    amount_per_share: float | None = Field(None, ge=0)
    total_amount: float | None = Field(None, gt=0)
    currency: CurrencyStr | None = None
    payment_type: PaymentType | None = None
    shares_received: float | None = Field(None, ge=0)
    reinvested: bool | None = None
    withholding_tax: float | None = Field(None, ge=0)
    notes: str | None = Field(None, max_length=2000)
