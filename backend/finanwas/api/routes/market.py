"""Market Routes — exchange rates, Argentine dollar quotes and stock lookups.

Invariants:
    - Exchange-rate conversion requires amount > 0
    - Unknown tickers answer 404, provider outages on /dollar answer 503
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from finanwas.core.domain_types import CURRENCIES
from finanwas.core.errors import ExternalServiceError, ResourceNotFoundError, ValidationFailedError
from finanwas.core.sanitize import sanitize_ticker
from finanwas.infrastructure.dollar_rates import DollarRateService, get_dollar_rate_service
from finanwas.infrastructure.exchange_rates import ExchangeRateService, get_exchange_rate_service
from finanwas.infrastructure.stock_quotes import StockQuoteService, get_stock_quote_service

router = APIRouter(prefix="/api/v1/market", tags=["market"])


@router.get("/exchange-rates")
async def exchange_rates(
    from_currency: str | None = Query(None, alias="from"),
    to_currency: str | None = Query(None, alias="to"),
    amount: float = Query(1.0),
    fx: ExchangeRateService = Depends(get_exchange_rate_service),
):
    if from_currency and to_currency:
        source = from_currency.strip().upper()
        target = to_currency.strip().upper()
        if source not in CURRENCIES or target not in CURRENCIES:
            raise ValidationFailedError("Moneda inválida")
        if amount <= 0:
            raise ValidationFailedError("El monto debe ser mayor a 0", field="amount")
        rate = await fx.get_exchange_rate(source, target)
        return {
            "from": source,
            "to": target,
            "amount": amount,
            "converted": await fx.convert(amount, source, target),
            "rate": rate,
        }

    rates = await fx.get_rates()
    if rates is None:
        raise ExternalServiceError(
            "exchangerate-api", "No se pudieron obtener los tipos de cambio",
        )
    return {
        "base": "USD",
        "rates": rates,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/dollar")
async def dollar(service: DollarRateService = Depends(get_dollar_rate_service)):
    return await service.get_rates()


@router.get("/stock/{ticker}")
async def stock(
    ticker: str,
    quotes: StockQuoteService = Depends(get_stock_quote_service),
):
    symbol = sanitize_ticker(ticker)
    if not symbol:
        raise ValidationFailedError("Ticker inválido", field="ticker")
    quote = await quotes.get_quote(symbol)
    if quote is None:
        raise ResourceNotFoundError("stock", symbol, "No encontramos esa empresa")
    stats = await quotes.get_stats(symbol)
    return {
        "quote": quote.to_dict(),
        "stats": stats.to_dict() if stats else None,
    }
