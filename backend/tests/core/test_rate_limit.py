"""Rate Limiter — fixed window counting with an injected clock.

Tests:
    - First N requests allowed, N+1 rejected
    - Window expiry resets the counter
    - info() does not count
    - Spanish wait message switches from seconds to minutes
"""

from finanwas.core.rate_limit import (
    RateLimitConfig, RateLimiter, client_ip, rate_limit_message,
)


class _Clock:
    def __init__(self, now: int = 1_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


def test_allows_up_to_max_then_rejects():
    limiter = RateLimiter(clock=_Clock())
    config = RateLimitConfig(3, 60_000)
    results = [limiter.check("1.2.3.4", "login", config) for _ in range(4)]
    assert [r.allowed for r in results] == [True, True, True, False]
    assert [r.remaining for r in results] == [2, 1, 0, 0]


def test_keys_are_independent_per_endpoint_and_client():
    limiter = RateLimiter(clock=_Clock())
    config = RateLimitConfig(1, 60_000)
    assert limiter.check("a", "login", config).allowed
    assert limiter.check("a", "register", config).allowed
    assert limiter.check("b", "login", config).allowed
    assert not limiter.check("a", "login", config).allowed


def test_window_expiry_resets_counter():
    clock = _Clock()
    limiter = RateLimiter(clock=clock)
    config = RateLimitConfig(1, 60_000)
    limiter.check("a", "login", config)
    assert not limiter.check("a", "login", config).allowed
    clock.now += 60_000
    result = limiter.check("a", "login", config)
    assert result.allowed
    assert result.remaining == 0


def test_info_does_not_count():
    limiter = RateLimiter(clock=_Clock())
    config = RateLimitConfig(2, 60_000)
    limiter.info("a", "login", config)
    limiter.info("a", "login", config)
    assert limiter.check("a", "login", config).remaining == 1


def test_reset_and_clear_all():
    limiter = RateLimiter(clock=_Clock())
    config = RateLimitConfig(1, 60_000)
    limiter.check("a", "login", config)
    limiter.reset("a", "login")
    assert limiter.check("a", "login", config).allowed
    limiter.clear_all()
    assert limiter.check("a", "login", config).allowed


def test_seconds_until_reset_rounds_up():
    clock = _Clock()
    limiter = RateLimiter(clock=clock)
    result = limiter.check("a", "login", RateLimitConfig(1, 60_000))
    clock.now += 500
    assert limiter.seconds_until_reset(result) == 60


def test_rate_limit_message_units():
    assert rate_limit_message(1) == "Demasiados intentos. Intenta de nuevo en 1 segundo."
    assert rate_limit_message(30) == "Demasiados intentos. Intenta de nuevo en 30 segundos."
    assert rate_limit_message(60) == "Demasiados intentos. Intenta de nuevo en 1 minuto."
    assert rate_limit_message(61) == "Demasiados intentos. Intenta de nuevo en 2 minutos."


def test_client_ip_prefers_forwarded_for():
    assert client_ip({"x-forwarded-for": "10.0.0.1, 10.0.0.2"}) == "10.0.0.1"
    assert client_ip({"x-real-ip": " 10.0.0.3 "}) == "10.0.0.3"
    assert client_ip({}) == "unknown"
