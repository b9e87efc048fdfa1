"""Validators — pure input checks for emails, passwords, tickers and numbers.

Invariants:
    - Never raise: every check returns a result the caller turns into a 400
    - Password errors are all collected (not first-failure) in Spanish
    - Ticker validation operates on the uppercased value

Design Decisions:
    - Result dataclasses over bare bools: routes surface the messages verbatim
"""

import re
from dataclasses import dataclass, field

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)
TICKER_PATTERN = re.compile(r"^[A-Z]{1,5}(\.[A-Z]{1,2})?$")

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128

COMMON_PASSWORDS = frozenset({
    "password", "password1", "password123", "12345678", "123456789",
    "1234567890", "qwerty123", "qwertyuiop", "abc12345", "11111111",
    "iloveyou", "admin123", "welcome1", "letmein1", "monkey123",
    "dragon123", "sunshine1", "football1", "baseball1", "contraseña",
    "contrasena1", "argentina1", "Password1", "Passw0rd", "P@ssw0rd",
})

_SEQUENCES = (
    "0123456789",
    "abcdefghijklmnopqrstuvwxyz",
)


@dataclass
class PasswordValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


def is_valid_email(email: str | None) -> bool:
    if not email or not isinstance(email, str):
        return False
    email = email.strip()
    if len(email) < 3 or len(email) > 254:
        return False
    if not EMAIL_PATTERN.match(email):
        return False
    local = email.split("@", 1)[0]
    if len(local) > 64:
        return False
    if ".." in email:
        return False
    if local.startswith(".") or local.endswith("."):
        return False
    return True


def _has_repeated_run(password: str, run: int = 4) -> bool:
    count = 1
    for prev, cur in zip(password, password[1:]):
        count = count + 1 if cur == prev else 1
        if count >= run:
            return True
    return False


def _has_sequence(password: str, length: int = 4) -> bool:
    lowered = password.lower()
    for seq in _SEQUENCES:
        for i in range(len(seq) - length + 1):
            if seq[i:i + length] in lowered:
                return True
    return False


def validate_password(password: str | None) -> PasswordValidation:
    """Check password strength rules. Returns every failed rule."""
    if not password:
        return PasswordValidation(False, ["La contraseña es requerida"])

    errors: list[str] = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(
            f"La contraseña debe tener al menos {PASSWORD_MIN_LENGTH} caracteres"
        )
    if len(password) > PASSWORD_MAX_LENGTH:
        errors.append(
            f"La contraseña no puede tener más de {PASSWORD_MAX_LENGTH} caracteres"
        )
    if not re.search(r"[A-Z]", password):
        errors.append("La contraseña debe contener al menos una letra mayúscula")
    if not re.search(r"[a-z]", password):
        errors.append("La contraseña debe contener al menos una letra minúscula")
    if not re.search(r"[0-9]", password):
        errors.append("La contraseña debe contener al menos un número")
    if password.lower() in {p.lower() for p in COMMON_PASSWORDS}:
        errors.append("Esta contraseña es demasiado común. Elige una más segura")
    if _has_repeated_run(password):
        errors.append("La contraseña no puede tener caracteres repetidos consecutivos")
    if _has_sequence(password):
        errors.append("La contraseña no puede contener secuencias obvias (ej: 1234, abcd)")

    return PasswordValidation(not errors, errors)


def password_strength(password: str | None) -> tuple[int, str]:
    """Score 0-100 and label: weak, medium, strong, very-strong."""
    if not password:
        return 0, "weak"

    score = 0
    length = len(password)
    if length >= 8:
        score += 20
    if length >= 12:
        score += 10
    if length >= 16:
        score += 10
    if re.search(r"[a-z]", password):
        score += 10
    if re.search(r"[A-Z]", password):
        score += 15
    if re.search(r"[0-9]", password):
        score += 15
    if re.search(r"[^A-Za-z0-9]", password):
        score += 20
    if _has_repeated_run(password):
        score -= 15
    if _has_sequence(password):
        score -= 15
    if password.lower() in {p.lower() for p in COMMON_PASSWORDS}:
        score = min(score, 10)

    score = max(0, min(100, score))
    if score < 40:
        label = "weak"
    elif score < 60:
        label = "medium"
    elif score < 80:
        label = "strong"
    else:
        label = "very-strong"
    return score, label


def is_valid_ticker(ticker: str | None) -> bool:
    if not ticker:
        return False
    return bool(TICKER_PATTERN.match(ticker.strip().upper()))


def is_positive_number(value) -> bool:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return number > 0 and number == number and number != float("inf")


def is_valid_percentage(value) -> bool:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return 0 <= number <= 100
