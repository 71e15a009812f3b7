from __future__ import annotations

"""Service wiring.

Everything here is built once per application and shared by all requests.
"""
from dataclasses import dataclass
from typing import Optional

from currencyify.core.config import DEFAULT_CURRENCY_CODES_FILE, Settings
from .convert_service import ConvertService
from .currency_codes import CodeValidator, CurrencyCodeRegistry
from .exchange_rate_service import ExchangeRateService
from .rates.base import RateProvider
from .rates.cache_service import CacheBackend, CacheStore, make_cache_backend
from .rates.providers import make_rate_provider
from .rates.resolver import RateResolver


@dataclass
class RateServices:
    registry: CurrencyCodeRegistry
    cache: CacheStore
    provider: RateProvider
    resolver: RateResolver
    convert: ConvertService
    exchange_rate: ExchangeRateService


def build_services(
    settings: Settings,
    *,
    provider: Optional[RateProvider] = None,
    cache_backend: Optional[CacheBackend] = None,
    registry: Optional[CurrencyCodeRegistry] = None,
) -> RateServices:
    """Build the service graph; keyword overrides exist for tests and embedding."""
    if registry is None:
        registry = CurrencyCodeRegistry.from_file(
            settings.currency_codes_file or DEFAULT_CURRENCY_CODES_FILE
        )
    if provider is None:
        provider = make_rate_provider(settings.rate_provider, settings)
    if cache_backend is None:
        cache_backend = make_cache_backend(settings)
    cache = CacheStore(cache_backend, settings.rates_cache_ttl_seconds)
    resolver = RateResolver(
        provider, cache, inflight_wait_timeout=settings.inflight_wait_timeout_seconds
    )
    validator = CodeValidator(registry)
    return RateServices(
        registry=registry,
        cache=cache,
        provider=provider,
        resolver=resolver,
        convert=ConvertService(validator, resolver),
        exchange_rate=ExchangeRateService(validator, resolver),
    )
