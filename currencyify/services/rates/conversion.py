from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from currencyify.core.errors import RateParseError

"""Cross-rate conversion.

Both rates are quoted against the same reference base (USD), so converting
goes source -> base -> target: amount / source_rate * target_rate.
No rounding happens here; callers round for display if they need to.
"""

RateLike = Union[str, Decimal]


def parse_rate(rate: RateLike, label: str = "rate") -> Decimal:
    try:
        value = rate if isinstance(rate, Decimal) else Decimal(str(rate).strip())
    except InvalidOperation as e:
        raise RateParseError(f"unable to parse {label} {rate!r}") from e
    if not value.is_finite():
        raise RateParseError(f"{label} {rate!r} is not a finite number")
    if value <= 0:
        raise RateParseError(f"{label} {rate!r} must be greater than zero")
    return value


def convert(amount: Decimal, source_rate: RateLike, target_rate: RateLike) -> Decimal:
    source = parse_rate(source_rate, "source rate")
    target = parse_rate(target_rate, "target rate")
    return amount / source * target
