"""Rate Limiter — in-memory fixed-window counter keyed by client and endpoint.

Invariants:
    - Key is "{identifier}:{endpoint}"
    - A new or expired window starts at count 1 and is always allowed
    - allowed == (count <= max_requests); remaining == max(0, max_requests - count)
    - info() never increments

Design Decisions:
    - Process-local dict: single uvicorn worker, counters lost on restart
    - Clock injected (callable returning epoch ms) so tests control time
    - Expired entries purged lazily on check(), never by a background task
"""

import math
import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class RateLimitConfig:
    max_requests: int
    window_ms: int


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_time: int  # epoch ms when the window closes


RATE_LIMITS: dict[str, RateLimitConfig] = {
    "login": RateLimitConfig(5, 60_000),
    "register": RateLimitConfig(3, 60_000),
    "password_reset": RateLimitConfig(3, 3_600_000),
    "api": RateLimitConfig(100, 60_000),
    "strict_api": RateLimitConfig(10, 60_000),
}


def _now_ms() -> int:
    return int(time.time() * 1000)


class RateLimiter:
    """Fixed-window request counter."""

    def __init__(self, clock: Callable[[], int] = _now_ms):
        self._clock = clock
        self._entries: dict[str, tuple[int, int]] = {}  # key -> (count, reset_time)

    @staticmethod
    def _key(identifier: str, endpoint: str) -> str:
        return f"{identifier}:{endpoint}"

    def check(
        self, identifier: str, endpoint: str, config: RateLimitConfig,
    ) -> RateLimitResult:
        """Count one request and report whether it is allowed."""
        now = self._clock()
        self._purge(now)
        key = self._key(identifier, endpoint)
        entry = self._entries.get(key)

        if entry is None or now >= entry[1]:
            reset_time = now + config.window_ms
            self._entries[key] = (1, reset_time)
            return RateLimitResult(
                True, config.max_requests, config.max_requests - 1, reset_time,
            )

        count = entry[0] + 1
        self._entries[key] = (count, entry[1])
        return RateLimitResult(
            allowed=count <= config.max_requests,
            limit=config.max_requests,
            remaining=max(0, config.max_requests - count),
            reset_time=entry[1],
        )

    def info(
        self, identifier: str, endpoint: str, config: RateLimitConfig,
    ) -> RateLimitResult:
        """Current window state without counting a request."""
        now = self._clock()
        entry = self._entries.get(self._key(identifier, endpoint))
        if entry is None or now >= entry[1]:
            return RateLimitResult(
                True, config.max_requests, config.max_requests,
                now + config.window_ms,
            )
        return RateLimitResult(
            allowed=entry[0] < config.max_requests,
            limit=config.max_requests,
            remaining=max(0, config.max_requests - entry[0]),
            reset_time=entry[1],
        )

    def reset(self, identifier: str, endpoint: str) -> None:
        self._entries.pop(self._key(identifier, endpoint), None)

    def clear_all(self) -> None:
        self._entries.clear()

    def seconds_until_reset(self, result: RateLimitResult) -> int:
        return max(0, math.ceil((result.reset_time - self._clock()) / 1000))

    def _purge(self, now: int) -> None:
        expired = [k for k, (_, reset) in self._entries.items() if now >= reset]
        for k in expired:
            del self._entries[k]


def rate_limit_message(seconds: int) -> str:
    """Spanish wait message: seconds under a minute, rounded-up minutes otherwise."""
    if seconds < 60:
        unit = "segundo" if seconds == 1 else "segundos"
        return f"Demasiados intentos. Intenta de nuevo en {seconds} {unit}."
    minutes = math.ceil(seconds / 60)
    unit = "minuto" if minutes == 1 else "minutos"
    return f"Demasiados intentos. Intenta de nuevo en {minutes} {unit}."


def client_ip(headers) -> str:
    """Best-effort client IP from proxy headers."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = headers.get(header)
        if value:
            return value.strip()
    return "unknown"
