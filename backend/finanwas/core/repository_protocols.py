"""Boundary Protocols — structural contracts for rows passed into core functions.

Invariants:
    - Core NEVER imports ORM models — dependency arrows point inward only
    - ORM rows (models/) and plain test doubles both satisfy these protocols

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Read-only attribute sets: core computes, services persist
"""

from datetime import date, datetime
from typing import Protocol


class AssetLike(Protocol):
    """What portfolio math and health scoring read from an asset."""
    type: str
    ticker: str | None
    name: str
    quantity: float
    purchase_price: float
    purchase_date: date
    currency: str
    current_price: float | None
    current_price_updated_at: datetime | None
    dividend_yield: float | None
    updated_at: datetime


class ProfileLike(Protocol):
    """Questionnaire answers used for risk alignment and investor type."""
    knowledge_level: str | None
    risk_tolerance: str | None
    investment_horizon: str | None
    has_emergency_fund: bool | None
    questionnaire_completed: bool


class SnapshotLike(Protocol):
    snapshot_date: date
    total_value: float
    total_cost: float
    total_gain_loss: float
    gain_loss_percentage: float


class DividendLike(Protocol):
    asset_id: object
    payment_date: date
    total_amount: float
    withholding_tax: float
    reinvested: bool


class ProgressLike(Protocol):
    course_slug: str
    lesson_slug: str
    completed: bool
    time_spent_seconds: int
    progress_percentage: int
    last_accessed_at: datetime
