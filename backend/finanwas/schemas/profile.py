"""Profile Schemas — partial update of the investor questionnaire."""

from pydantic import BaseModel, Field, field_validator

from finanwas.core.domain_types import CURRENCIES


class ProfileUpdate(BaseModel):
    country: str | None = Field(None, max_length=100)
    knowledge_level: str | None = Field(None, max_length=50)
    main_goal: str | None = Field(None, max_length=100)
    risk_tolerance: str | None = Field(None, max_length=50)
    has_debt: bool | None = None
    has_emergency_fund: bool | None = None
    has_investments: bool | None = None
    income_range: str | None = Field(None, max_length=50)
    expense_range: str | None = Field(None, max_length=50)
    investment_horizon: str | None = Field(None, max_length=50)
    questionnaire_completed: bool | None = None
    preferred_currency: str | None = None

    @field_validator("preferred_currency")
    @classmethod
    def known_currency(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().upper()
        if v not in CURRENCIES:
            raise ValueError("Moneda inválida")
        return v
