from __future__ import annotations

"""Concrete rate providers and factory.

'fxratesapi' talks to the remote FX rates HTTP API; 'static' serves a fixed
USD-relative table for offline and local use.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Collection, Dict

from pydantic import BaseModel, ValidationError, field_validator

from currencyify.core.config import Settings
from currencyify.core.errors import ProviderError
from currencyify.models.constants import PROVIDER_AMOUNT, PROVIDER_FORMAT
from currencyify.models.rates import ProviderQuote, canonical_rate
from currencyify.services.http_client import HttpError, get_json
from .base import RateProvider

logger = logging.getLogger("currencyify.provider")

# Rates per 1 USD; used by StaticRateProvider only.
_STATIC_USD_RATES: Dict[str, Decimal] = {
    "USD": Decimal("1"),
    "INR": Decimal("82.771291"),
    "JPY": Decimal("150.608807"),
    "EUR": Decimal("0.923874"),
    "GBP": Decimal("0.789121"),
    "SGD": Decimal("1.344502"),
    "MYR": Decimal("4.771503"),
    "AUD": Decimal("1.527330"),
    "CAD": Decimal("1.353550"),
    "CHF": Decimal("0.880190"),
    "CNY": Decimal("7.194202"),
}


class ProviderPayload(BaseModel):
    """Typed view of the remote response; anything else in the body is ignored."""

    date: datetime
    rates: Dict[str, str]

    @field_validator("rates", mode="before")
    @classmethod
    def normalize_rates(cls, v):  # type: ignore[no-untyped-def]
        if not isinstance(v, dict):
            raise ValueError("`rates` must be an object")
        return {str(code).upper(): canonical_rate(rate) for code, rate in v.items()}

    @field_validator("date")
    @classmethod
    def aware_date(cls, v: datetime) -> datetime:
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class FxRatesApiProvider(RateProvider):
    name = "fxratesapi"

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 5.0,
        resolution: str = "1m",
        places: int = 6,
        fetch_json: Callable[..., object] | None = None,
    ):
        self._url = url
        self._timeout = timeout
        self._resolution = resolution
        self._places = places
        self._fetch_json = fetch_json

    def _params(self, base: str, codes: Collection[str]) -> Dict[str, str]:
        return {
            "base": base,
            "currencies": ",".join(codes),
            "resolution": self._resolution,
            "amount": PROVIDER_AMOUNT,
            "format": PROVIDER_FORMAT,
            "places": str(self._places),
        }

    def fetch(self, base: str, codes: Collection[str]) -> Dict[str, ProviderQuote]:  # type: ignore[override]
        if not codes:
            raise ValueError("at least one currency code is required")
        codes = list(codes)
        fetch_json = self._fetch_json or get_json
        try:
            body = fetch_json(
                self._url,
                params=self._params(base, codes),
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except HttpError as e:
            raise ProviderError(f"error while fetching exchange rates from vendor API: {e}") from e
        logger.info("fetched latest exchange rates for %s against %s", ",".join(codes), base)

        try:
            payload = ProviderPayload.model_validate(body)
        except ValidationError as e:
            raise ProviderError(
                f"error while processing exchange rates of vendor API data: {e.errors()[0]['msg']}"
            ) from e

        missing = [c for c in codes if c not in payload.rates]
        if missing:
            raise ProviderError(
                "received empty rates data from vendor API for "
                f"{', '.join(missing)}. Please check input params"
            )
        return {c: ProviderQuote(payload.rates[c], payload.date) for c in codes}


class StaticRateProvider(RateProvider):
    name = "static"

    def __init__(self, places: int = 6, clock: Callable[[], datetime] | None = None):
        self._quantum = Decimal(1).scaleb(-places)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def fetch(self, base: str, codes: Collection[str]) -> Dict[str, ProviderQuote]:  # type: ignore[override]
        if not codes:
            raise ValueError("at least one currency code is required")
        unknown = [c for c in [base, *codes] if c not in _STATIC_USD_RATES]
        if unknown:
            raise ProviderError(f"static rate table has no entry for {', '.join(unknown)}")
        as_of = self._clock()
        base_rate = _STATIC_USD_RATES[base]
        return {
            c: ProviderQuote(
                canonical_rate((_STATIC_USD_RATES[c] / base_rate).quantize(self._quantum)),
                as_of,
            )
            for c in codes
        }


_PROVIDER_REGISTRY: Dict[str, Callable[[Settings], RateProvider]] = {
    "fxratesapi": lambda s: FxRatesApiProvider(
        str(s.fx_rates_api_url),
        timeout=s.http_timeout_seconds,
        resolution=s.fx_rates_resolution,
        places=s.fx_rates_places,
    ),
    "static": lambda s: StaticRateProvider(places=s.fx_rates_places),
}


def make_rate_provider(kind: str, settings: Settings) -> RateProvider:
    factory = _PROVIDER_REGISTRY.get(kind)
    if not factory:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    return factory(settings)
