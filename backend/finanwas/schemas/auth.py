"""Auth Schemas — login, registration and two-factor request bodies.

Invariants:
    - Fields default to "" so routes can answer missing values with Spanish messages
    - userId / isBackupCode accepted in camelCase (aliases) and snake_case

Design Decisions:
    - Password rules are not enforced here: core/validators.py reports every
      violation at once, pydantic would stop at the first
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class RegisterRequest(BaseModel):
    email: str = ""
    password: str = ""
    name: str = ""
    code: str = ""


class ValidateCodeRequest(BaseModel):
    code: str = ""


class TwoFactorEnableRequest(BaseModel):
    secret: str = Field(min_length=16, max_length=64)
    token: str = Field(min_length=6, max_length=6, pattern=r"^\d{6}$")


class TwoFactorDisableRequest(BaseModel):
    password: str = ""


class TwoFactorVerifyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID = Field(alias="userId")
    token: str = Field(min_length=1, max_length=32)
    is_backup_code: bool = Field(False, alias="isBackupCode")


class PasswordChangeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_password: str = Field("", alias="oldPassword")
    new_password: str = Field("", alias="newPassword")
