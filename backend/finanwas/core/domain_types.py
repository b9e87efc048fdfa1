"""Domain Types — enums and reference data shared by core, services and schemas.

Invariants:
    - Enum values are the exact strings persisted in the database
    - AssetType values and CURRENCIES keys are the closed sets accepted by the API

Design Decisions:
    - str-based Enums: JSON-serializable and comparable to raw column values
    - Spanish asset type values kept as-is: they are user-visible and stored
"""

from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class AssetType(str, Enum):
    ACCION = "Acción"
    ETF = "ETF"
    BONO = "Bono"
    CRYPTO = "Crypto"
    EFECTIVO = "Efectivo"
    FONDO_COMUN = "Fondo Común"
    CEDEAR = "Cedear"
    ON = "ON"
    PLAZO_FIJO = "Plazo Fijo"
    OTRO = "Otro"


CURRENCIES: dict[str, str] = {
    "ARS": "$",
    "USD": "US$",
    "EUR": "€",
    "BRL": "R$",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "CA$",
    "CHF": "CHF",
    "CNY": "¥",
    "MXN": "MX$",
}
DEFAULT_CURRENCY = "ARS"


class PriceSource(str, Enum):
    MANUAL = "manual"
    YAHOO_FINANCE = "yahoo-finance"


class PaymentType(str, Enum):
    CASH = "cash"
    STOCK = "stock"
    DRIP = "drip"


class AuditCategory(str, Enum):
    AUTHENTICATION = "authentication"
    PORTFOLIO = "portfolio"
    SETTINGS = "settings"
    EXPORT = "export"
    ADMIN = "admin"
    GOAL = "goal"
    DATA = "data"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"


class ErrorLevel(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    CRITICAL = "critical"


class ErrorSource(str, Enum):
    CLIENT = "client"
    SERVER = "server"
    API = "api"


class PerformancePeriod(str, Enum):
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    ALL = "ALL"


class InvestorType(str, Enum):
    CONSERVADOR = "conservador"
    MODERADO = "moderado"
    AGRESIVO = "agresivo"
