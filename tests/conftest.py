"""
Shared test configuration and fixtures.
"""

from datetime import timedelta

import pytest

from application.services import CurrencyService, UsageMonitor
from infrastructure.cache.memory_cache import MemoryCache
from infrastructure.providers import StaticProviderClient
from infrastructure.resilience.rate_limiter import RateLimiter


class FakeClock:
    """Manually advanced replacement for time.monotonic"""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, delta: timedelta | float) -> None:
        if isinstance(delta, timedelta):
            delta = delta.total_seconds()
        self.now += delta


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def provider():
    return StaticProviderClient()


@pytest.fixture
def usage_monitor():
    return UsageMonitor()


@pytest.fixture
def make_service(provider, clock, usage_monitor):
    """Build a CurrencyService around the static provider and the fake clock"""

    def _make(daily_limit: int = 1000, provider_timeout: float = 5.0, service_provider=None):
        return CurrencyService(
            provider=service_provider or provider,
            country_cache=MemoryCache.for_countries(clock=clock),
            rate_cache=MemoryCache.for_rates(clock=clock),
            rate_limiter=RateLimiter(daily_limit=daily_limit, clock=clock),
            provider_timeout=provider_timeout,
            usage_monitor=usage_monitor,
        )

    return _make


@pytest.fixture
def service(make_service):
    return make_service()
