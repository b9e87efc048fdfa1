"""Exchange Rates — USD-based FX table from exchangerate-api with an in-process cache.

Invariants:
    - Cache holds one USD-based rates dict for cache_seconds (default 1h)
    - get_rates() returns None on provider failure (callers degrade to identity)
    - convert() never raises: failure returns the original amount

Design Decisions:
    - httpx.AsyncClient per call: requests are hourly, pooling buys nothing
    - Pure conversion math lives in core/portfolio_math.convert_amount
"""

import logging
import time
from functools import lru_cache

import httpx

from finanwas.config import get_settings
from finanwas.core.portfolio_math import convert_amount

logger = logging.getLogger(__name__)


class ExchangeRateService:
    """Fetches and caches USD-based exchange rates."""

    def __init__(
        self, url: str, cache_seconds: int = 3600, timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.cache_seconds = cache_seconds
        self.timeout = timeout
        self.transport = transport
        self._rates: dict[str, float] | None = None
        self._fetched_at: float = 0.0

    async def _fetch(self) -> dict[str, float]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(self.url)
            response.raise_for_status()
            data = response.json()
        rates = data.get("rates")
        if not isinstance(rates, dict) or not rates:
            raise ValueError("exchange rate payload has no rates")
        return {k: float(v) for k, v in rates.items()}

    async def get_rates(self) -> dict[str, float] | None:
        if self._rates is not None and time.monotonic() - self._fetched_at < self.cache_seconds:
            return self._rates
        try:
            self._rates = await self._fetch()
            self._fetched_at = time.monotonic()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Exchange rate fetch failed: {e}")
            return self._rates
        return self._rates

    async def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        if from_currency == to_currency:
            return amount
        rates = await self.get_rates()
        return convert_amount(amount, from_currency, to_currency, rates)

    async def get_exchange_rate(self, from_currency: str, to_currency: str) -> float:
        return await self.convert(1.0, from_currency, to_currency)

    def clear_cache(self) -> None:
        self._rates = None
        self._fetched_at = 0.0


@lru_cache
def get_exchange_rate_service() -> ExchangeRateService:
    settings = get_settings()
    return ExchangeRateService(
        settings.exchange_rate_api_url,
        cache_seconds=settings.exchange_rate_cache_seconds,
        timeout=settings.http_timeout_seconds,
    )
