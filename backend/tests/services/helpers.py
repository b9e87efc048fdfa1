"""Shared helpers for route tests."""

from finanwas.infrastructure.security import create_token
from finanwas.infrastructure.stock_quotes import StockQuote
from finanwas.models.user import User


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_token(str(user.id), user.email, user.role)}"}


class FakeExchangeRates:
    """Stands in for ExchangeRateService; rates=None simulates an outage."""

    def __init__(self, rates: dict[str, float] | None = None):
        self.rates = rates

    async def get_rates(self):
        return self.rates

    async def convert(self, amount, from_currency, to_currency):
        if from_currency == to_currency or not self.rates:
            return amount
        return amount / self.rates[from_currency] * self.rates[to_currency]

    async def get_exchange_rate(self, from_currency, to_currency):
        return await self.convert(1.0, from_currency, to_currency)


class FakeQuotes:
    """Stands in for StockQuoteService with fixed prices per symbol."""

    def __init__(self, prices: dict[str, float] | None = None, stats=None):
        self.prices = prices or {}
        self.stats = stats

    async def get_quote(self, ticker):
        price = self.prices.get(ticker.upper())
        if price is None:
            return None
        return StockQuote(symbol=ticker.upper(), price=price, change=1.5, change_percent=0.75)

    async def get_stats(self, ticker):
        return self.stats

    async def get_quotes(self, tickers):
        return {t.upper(): await self.get_quote(t) for t in tickers}


def asset_payload(**overrides) -> dict:
    payload = {
        "type": "Acción",
        "ticker": "AAPL",
        "name": "Apple Inc.",
        "quantity": 10,
        "purchase_price": 100,
        "purchase_date": "2024-01-15",
        "currency": "USD",
    }
    payload.update(overrides)
    return payload
