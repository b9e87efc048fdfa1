"""Portfolio CSV — BOM, Spanish headers, N/A placeholders and quoting."""

import csv
import io
from datetime import date

from finanwas.core.csv_export import BOM, HEADERS, generate_portfolio_csv
from tests.core.fakes import FakeAsset


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text[len(BOM):])))


def test_starts_with_bom_and_headers():
    text = generate_portfolio_csv([])
    assert text.startswith(BOM)
    assert _rows(text) == [list(HEADERS)]


def test_priced_asset_row():
    asset = FakeAsset(
        name="Apple, Inc.", ticker="AAPL", type="Acción", quantity=10,
        purchase_price=100.0, purchase_date=date(2024, 1, 15), currency="USD",
        current_price=120.0,
    )
    text = generate_portfolio_csv([asset])
    assert '"Apple, Inc."' in text
    assert _rows(text)[1] == [
        "Apple, Inc.", "AAPL", "Acción", "10", "100.0", "USD",
        "15/01/2024", "120.0", "20.00", "1200.00",
    ]


def test_unpriced_asset_uses_placeholders():
    asset = FakeAsset(name="Plazo fijo", type="Plazo Fijo", quantity=1, purchase_price=5000.0)
    row = _rows(generate_portfolio_csv([asset]))[1]
    assert row[1] == "N/A"
    assert row[7] == "N/A"
    assert row[8] == "N/A"
    assert row[9] == "5000.00"
