"""Portfolio CSV — spreadsheet-friendly export of a user's assets.

Invariants:
    - Output starts with a UTF-8 BOM so Excel detects the encoding
    - Missing ticker / current price render as "N/A"
    - Fields containing comma, quote or newline are quoted (csv.QUOTE_MINIMAL)
"""

import csv
import io
from collections.abc import Sequence

from finanwas.core.repository_protocols import AssetLike

BOM = "\ufeff"

HEADERS = (
    "Nombre", "Ticker", "Tipo", "Cantidad", "Precio Compra", "Moneda",
    "Fecha", "Precio Actual", "Rendimiento %", "Valor Total",
)


def _row(asset: AssetLike) -> list:
    if asset.current_price:
        return_pct = (
            (asset.current_price - asset.purchase_price) / asset.purchase_price * 100
        )
        return_cell = f"{return_pct:.2f}"
    else:
        return_cell = "N/A"
    price = asset.current_price if asset.current_price is not None else asset.purchase_price
    return [
        asset.name,
        asset.ticker or "N/A",
        asset.type,
        asset.quantity,
        asset.purchase_price,
        asset.currency,
        asset.purchase_date.strftime("%d/%m/%Y"),
        asset.current_price if asset.current_price is not None else "N/A",
        return_cell,
        f"{price * asset.quantity:.2f}",
    ]


def generate_portfolio_csv(assets: Sequence[AssetLike]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HEADERS)
    for asset in assets:
        writer.writerow(_row(asset))
    return BOM + buffer.getvalue()
