"""Two-Factor Auth — TOTP secrets, QR provisioning and single-use backup codes.

Invariants:
    - TOTP verification tolerates ±1 time step (30s) of clock drift
    - Backup codes: 8 codes, "XXXX-XXXX-XXXX", alphabet without 0/O/1/I
    - Backup codes persisted only as bcrypt hashes; plaintext shown once
    - match_backup_code returns the index of the matched hash (caller removes it)

Design Decisions:
    - pyotp for RFC 6238; qrcode renders a PNG data URL the frontend embeds directly
    - secrets.choice for code generation (CSPRNG)
"""

import base64
import io
import secrets

import pyotp
import qrcode

from finanwas.config import get_settings
from finanwas.infrastructure.security import hash_password, verify_password

BACKUP_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
BACKUP_CODE_COUNT = 8


def generate_secret() -> str:
    return pyotp.random_base32()


def provisioning_uri(secret: str, email: str) -> str:
    return pyotp.TOTP(secret).provisioning_uri(
        name=email, issuer_name=get_settings().two_factor_issuer,
    )


def qr_code_data_url(uri: str) -> str:
    image = qrcode.make(uri)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def verify_totp(secret: str | None, token: str | None) -> bool:
    if not secret or not token:
        return False
    token = token.strip().replace(" ", "")
    if not token.isdigit():
        return False
    return pyotp.TOTP(secret).verify(token, valid_window=1)


def generate_backup_codes(count: int = BACKUP_CODE_COUNT) -> list[str]:
    def block() -> str:
        return "".join(secrets.choice(BACKUP_CODE_ALPHABET) for _ in range(4))

    return [f"{block()}-{block()}-{block()}" for _ in range(count)]


def hash_backup_codes(codes: list[str]) -> list[str]:
    return [hash_password(code) for code in codes]


def match_backup_code(code: str, hashed_codes: list[str] | None) -> int | None:
    """Index of the hash matching `code`, or None."""
    if not code or not hashed_codes:
        return None
    normalized = code.strip().upper()
    for index, hashed in enumerate(hashed_codes):
        if verify_password(normalized, hashed):
            return index
    return None
