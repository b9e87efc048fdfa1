"""Argentine Dollar Rates — official, blue, MEP and CCL quotes from DolarAPI.

Invariants:
    - All four endpoints fetched concurrently; any failure fails the whole call
    - Each rate is the endpoint's "venta" (sell) price
    - Successful result cached for cache_seconds (default 1h)
    - Failures raise ExternalServiceError (503), never return partial data
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from functools import lru_cache

import httpx

from finanwas.config import get_settings
from finanwas.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

DOLLAR_ENDPOINTS = {
    "official": "oficial",
    "blue": "blue",
    "mep": "bolsa",
    "ccl": "contadoconliqui",
}


class DollarRateService:
    def __init__(
        self, base_url: str, cache_seconds: int = 3600, timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache_seconds = cache_seconds
        self.timeout = timeout
        self.transport = transport
        self._cached: dict | None = None
        self._fetched_at: float = 0.0

    async def _fetch_one(self, client: httpx.AsyncClient, path: str) -> float:
        response = await client.get(f"{self.base_url}/{path}")
        response.raise_for_status()
        return float(response.json()["venta"])

    async def get_rates(self) -> dict:
        if self._cached is not None and time.monotonic() - self._fetched_at < self.cache_seconds:
            return self._cached
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport,
            ) as client:
                values = await asyncio.gather(*(
                    self._fetch_one(client, path) for path in DOLLAR_ENDPOINTS.values()
                ))
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.error(f"DolarAPI fetch failed: {e}")
            raise ExternalServiceError(
                "dolarapi", "No se pudieron obtener las cotizaciones del dólar",
            )
        result = dict(zip(DOLLAR_ENDPOINTS.keys(), values))
        result["timestamp"] = datetime.now(timezone.utc).isoformat()
        result["source"] = "dolarapi.com"
        self._cached = result
        self._fetched_at = time.monotonic()
        return result

    def clear_cache(self) -> None:
        self._cached = None
        self._fetched_at = 0.0


@lru_cache
def get_dollar_rate_service() -> DollarRateService:
    settings = get_settings()
    return DollarRateService(
        settings.dolar_api_url,
        cache_seconds=settings.dollar_cache_seconds,
        timeout=settings.http_timeout_seconds,
    )
