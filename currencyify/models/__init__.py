"""Pydantic domain models for the Currencyify API."""

from .constants import REFERENCE_BASE_CURRENCY  # re-export
from .convert import ConversionRequest, ConversionResult
from .exchange_rate import (
    ExchangeRateBatchRequest,
    ExchangeRateBatchResult,
    ExchangeRateOut,
)
from .rates import ProviderQuote, RateRecord, canonical_rate

__all__ = [
    "REFERENCE_BASE_CURRENCY",
    "ConversionRequest",
    "ConversionResult",
    "ExchangeRateBatchRequest",
    "ExchangeRateBatchResult",
    "ExchangeRateOut",
    "ProviderQuote",
    "RateRecord",
    "canonical_rate",
]
