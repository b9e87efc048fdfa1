"""Goal Schemas — savings goal and contribution request bodies."""

from datetime import date

from pydantic import BaseModel, Field, field_validator

from finanwas.schemas.portfolio import CurrencyStr


class GoalCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    target_amount: float = Field(gt=0)
    current_amount: float = Field(0.0, ge=0)
    currency: CurrencyStr = "ARS"
    target_date: date | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("El nombre es requerido")
        return v


class GoalUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    target_amount: float | None = Field(None, gt=0)
    current_amount: float | None = Field(None, ge=0)
    currency: CurrencyStr | None = None
    target_date: date | None = None


class ContributionCreate(BaseModel):
    amount: float
    date: str | None = None
    notes: str | None = Field(None, max_length=1000)
