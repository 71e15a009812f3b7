from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


def canonical_rate(value: Any) -> str:
    """Normalize a provider rate (JSON number or string) to a plain decimal string.

    Raises ValueError for booleans, non-numeric strings and non-finite values.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"rate must be a number or numeric string, got {value!r}")
    if isinstance(value, (int, float, Decimal)):
        raw = str(value)
    elif isinstance(value, str):
        raw = value.strip()
    else:
        raise ValueError(f"rate must be a number or numeric string, got {value!r}")
    try:
        dec = Decimal(raw)
    except InvalidOperation as e:
        raise ValueError(f"unparseable rate {value!r}") from e
    if not dec.is_finite():
        raise ValueError(f"non-finite rate {value!r}")
    text = format(dec, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


class ProviderQuote(NamedTuple):
    rate: str
    as_of: datetime


class RateRecord(BaseModel):
    """Rate of `code` against a base currency, as observed by the provider."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=3, max_length=3)
    rate: str
    observed_at: datetime

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.upper()

    @field_validator("rate", mode="before")
    @classmethod
    def normalize_rate(cls, v: Any) -> str:
        return canonical_rate(v)

    @field_validator("observed_at")
    @classmethod
    def aware_timestamp(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def from_quote(cls, code: str, quote: ProviderQuote) -> "RateRecord":
        return cls(code=code, rate=quote.rate, observed_at=quote.as_of)
