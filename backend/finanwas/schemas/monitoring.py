"""Monitoring Schemas — client error reports and admin resolution toggles."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from finanwas.core.domain_types import ErrorLevel, ErrorSource


class ErrorReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    level: ErrorLevel
    source: ErrorSource
    message: str = Field(min_length=1)
    stack_trace: str | None = Field(None, alias="stackTrace")
    error_code: str | None = Field(None, alias="errorCode", max_length=100)
    url: str | None = None
    metadata: dict = Field(default_factory=dict)


class ErrorResolve(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    error_id: UUID = Field(alias="errorId")
    resolved: bool
