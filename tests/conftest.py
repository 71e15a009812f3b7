from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from currencyify.core.config import Settings
from currencyify.main import create_app
from currencyify.services.container import build_services
from currencyify.services.currency_codes import CurrencyCodeRegistry
from currencyify.services.rates.cache_service import CacheStore, InMemoryCacheBackend
from currencyify.services.rates.resolver import RateResolver
from tests.helpers.fakes import CountingProvider, FakeClock


@pytest.fixture
def settings() -> Settings:
    s = Settings(rate_provider="static", cache_backend="memory", rates_cache_ttl_seconds=60)
    s.init_post_load()
    return s


@pytest.fixture
def registry(settings: Settings) -> CurrencyCodeRegistry:
    assert settings.currency_codes_file is not None
    return CurrencyCodeRegistry.from_file(settings.currency_codes_file)


@pytest.fixture
def provider() -> CountingProvider:
    return CountingProvider()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend(clock: FakeClock) -> InMemoryCacheBackend:
    return InMemoryCacheBackend(clock=clock)


@pytest.fixture
def cache(backend: InMemoryCacheBackend) -> CacheStore:
    return CacheStore(backend, ttl_seconds=60)


@pytest.fixture
def resolver(provider: CountingProvider, cache: CacheStore) -> RateResolver:
    return RateResolver(provider, cache, inflight_wait_timeout=2.0)


@pytest.fixture
def client(settings, provider, backend, registry):
    services = build_services(
        settings, provider=provider, cache_backend=backend, registry=registry
    )
    app = create_app(settings_override=settings, services_override=services)
    with TestClient(app) as c:
        yield c
