"""Sanitizers — normalize untrusted strings and numbers before they reach the DB."""

import html
import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_TICKER_CHARS = re.compile(r"[^A-Za-z0-9.\-]")


def sanitize_string(value: str | None, max_length: int = 1000) -> str:
    if value is None:
        return ""
    cleaned = _CONTROL_CHARS.sub("", str(value)).strip()
    return cleaned[:max_length]


def sanitize_email(value: str | None) -> str:
    return sanitize_string(value, 254).lower()


def sanitize_ticker(value: str | None) -> str:
    if not value:
        return ""
    return _TICKER_CHARS.sub("", value).upper()[:20]


def sanitize_number(
    value, default: float = 0.0,
    minimum: float | None = None, maximum: float | None = None,
) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    if minimum is not None and number < minimum:
        number = minimum
    if maximum is not None and number > maximum:
        number = maximum
    return number


def sanitize_html(value: str | None) -> str:
    """Escape HTML special characters, including the forward slash."""
    if not value:
        return ""
    return html.escape(value, quote=True).replace("/", "&#x2F;")
