"""Stock Quotes — price quotes and fundamentals from Yahoo Finance via yfinance.

Invariants:
    - Tickers are uppercased before lookup and as cache keys
    - Quotes and stats cached per ticker for cache_seconds (default 15 min)
    - Unknown ticker / provider failure returns None (routes map to 404)
    - get_quotes() fetches concurrently; one failure never sinks the batch

Design Decisions:
    - yfinance is synchronous: each lookup runs in asyncio.to_thread
    - fast_info first for price fields, get_info() for fundamentals
      (get_info is slow and rate-limited by Yahoo)
"""

import asyncio
import logging
import time
from dataclasses import dataclass, asdict
from functools import lru_cache

import yfinance as yf

from finanwas.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class StockQuote:
    symbol: str
    price: float
    change: float
    change_percent: float
    currency: str = "USD"

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "price": self.price,
            "change": self.change,
            "changePercent": self.change_percent,
            "currency": self.currency,
        }


@dataclass
class StockStats:
    pe_ratio: float | None = None
    pb_ratio: float | None = None
    roe: float | None = None
    roa: float | None = None
    debt_to_equity: float | None = None
    dividend_yield: float | None = None
    market_cap: float | None = None
    sector: str | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            "peRatio": data["pe_ratio"],
            "pbRatio": data["pb_ratio"],
            "roe": data["roe"],
            "roa": data["roa"],
            "debtToEquity": data["debt_to_equity"],
            "dividendYield": data["dividend_yield"],
            "marketCap": data["market_cap"],
            "sector": data["sector"],
        }


def _number(value) -> float | None:
    if isinstance(value, (int, float)) and value == value:
        return float(value)
    return None


def _fetch_quote_sync(symbol: str) -> StockQuote | None:
    ticker = yf.Ticker(symbol)
    finfo = ticker.fast_info
    price = _number(finfo.get("last_price"))
    if not price:
        history = ticker.history(period="5d")
        if history.empty:
            return None
        price = float(history["Close"].iloc[-1])
    previous = _number(finfo.get("previous_close")) or price
    change = price - previous
    return StockQuote(
        symbol=symbol,
        price=price,
        change=change,
        change_percent=(change / previous * 100) if previous else 0.0,
        currency=finfo.get("currency") or "USD",
    )


def _fetch_stats_sync(symbol: str) -> StockStats | None:
    info = yf.Ticker(symbol).get_info() or {}
    if not info or info.get("quoteType") in (None, "NONE"):
        return None
    return StockStats(
        pe_ratio=_number(info.get("trailingPE")),
        pb_ratio=_number(info.get("priceToBook")),
        roe=_number(info.get("returnOnEquity")),
        roa=_number(info.get("returnOnAssets")),
        debt_to_equity=_number(info.get("debtToEquity")),
        dividend_yield=_number(info.get("dividendYield")),
        market_cap=_number(info.get("marketCap")),
        sector=info.get("sector"),
    )


class StockQuoteService:
    """Cached async facade over yfinance lookups."""

    def __init__(self, cache_seconds: int = 900):
        self.cache_seconds = cache_seconds
        self._quotes: dict[str, tuple[float, StockQuote]] = {}
        self._stats: dict[str, tuple[float, StockStats]] = {}

    def _fresh(self, entry) -> bool:
        return entry is not None and time.monotonic() - entry[0] < self.cache_seconds

    async def get_quote(self, ticker: str) -> StockQuote | None:
        symbol = ticker.strip().upper()
        cached = self._quotes.get(symbol)
        if self._fresh(cached):
            return cached[1]
        try:
            quote = await asyncio.to_thread(_fetch_quote_sync, symbol)
        except Exception as e:
            # yfinance surfaces provider errors as assorted exception types
            logger.warning(f"Quote lookup failed: {e}", extra={"ticker": symbol})
            return None
        if quote is not None:
            self._quotes[symbol] = (time.monotonic(), quote)
        return quote

    async def get_stats(self, ticker: str) -> StockStats | None:
        symbol = ticker.strip().upper()
        cached = self._stats.get(symbol)
        if self._fresh(cached):
            return cached[1]
        try:
            stats = await asyncio.to_thread(_fetch_stats_sync, symbol)
        except Exception as e:
            logger.warning(f"Stats lookup failed: {e}", extra={"ticker": symbol})
            return None
        if stats is not None:
            self._stats[symbol] = (time.monotonic(), stats)
        return stats

    async def get_quotes(self, tickers: list[str]) -> dict[str, StockQuote | None]:
        symbols = list(dict.fromkeys(t.strip().upper() for t in tickers if t))
        results = await asyncio.gather(*(self.get_quote(s) for s in symbols))
        return dict(zip(symbols, results))

    def clear_cache(self) -> None:
        self._quotes.clear()
        self._stats.clear()


@lru_cache
def get_stock_quote_service() -> StockQuoteService:
    return StockQuoteService(cache_seconds=get_settings().quote_cache_seconds)
