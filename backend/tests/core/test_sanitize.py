"""Sanitizers — control characters, casing, clamping and HTML escaping."""

from finanwas.core.sanitize import (
    sanitize_email, sanitize_html, sanitize_number, sanitize_string, sanitize_ticker,
)


def test_sanitize_string_strips_control_chars_and_truncates():
    assert sanitize_string("  ho\x00la\x07  ") == "hola"
    assert sanitize_string("abcdef", max_length=3) == "abc"
    assert sanitize_string(None) == ""


def test_sanitize_email_lowercases():
    assert sanitize_email("  Ana@Example.COM ") == "ana@example.com"


def test_sanitize_ticker_keeps_only_symbol_chars():
    assert sanitize_ticker(" ggal.ba ") == "GGAL.BA"
    assert sanitize_ticker("BRK-B<script>") == "BRK-BSCRIPT"
    assert sanitize_ticker(None) == ""


def test_sanitize_number_defaults_and_clamps():
    assert sanitize_number("12.5") == 12.5
    assert sanitize_number("x", default=1.0) == 1.0
    assert sanitize_number(float("nan"), default=2.0) == 2.0
    assert sanitize_number(-5, minimum=0) == 0
    assert sanitize_number(500, maximum=100) == 100


def test_sanitize_html_escapes_slash():
    assert sanitize_html("<a href='/x'>") == "&lt;a href=&#x27;&#x2F;x&#x27;&gt;"
    assert sanitize_html(None) == ""
