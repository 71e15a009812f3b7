"""Reference ISO currency codes and request-field validation.

The registry is loaded once at startup and shared read-only by every
request. The file format is a JSON object keyed by lowercase ISO code
(values are ignored), e.g. ``{"usd": 1, "inr": 1}``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional

from currencyify.core.errors import (
    InputValidationError,
    MissingFieldError,
    UnknownCurrencyCodeError,
)

logger = logging.getLogger("currencyify.codes")

_UNKNOWN_HINT = (
    "Please check the `{param}` input param, it should be a valid "
    "international-standard 3-letter ISO currency code"
)


class CurrencyCodeRegistry:
    """Immutable, case-insensitive set of known currency codes."""

    def __init__(self, codes: Iterable[str]):
        self._codes: FrozenSet[str] = frozenset(c.strip().upper() for c in codes)

    @classmethod
    def from_file(cls, path: Path) -> "CurrencyCodeRegistry":
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"currency codes file {path} must contain a JSON object")
        registry = cls(data.keys())
        logger.info("loaded %d currency codes from %s", len(registry), path)
        return registry

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.upper() in self._codes

    def __len__(self) -> int:
        return len(self._codes)

    @property
    def codes(self) -> FrozenSet[str]:
        return self._codes


class CodeValidator:
    def __init__(self, registry: CurrencyCodeRegistry):
        self._registry = registry

    def validate(self, code: Optional[str], field: str) -> str:
        """Return the uppercased code or raise MissingFieldError / UnknownCurrencyCodeError."""
        if code is None or code == "":
            raise MissingFieldError(field)
        if code not in self._registry:
            message = f"`{field}` not found in our database. " + _UNKNOWN_HINT.format(
                param=field
            )
            raise UnknownCurrencyCodeError(field, code, message)
        return code.upper()

    def validate_many(
        self, codes: Optional[List[str]], field: str, item_field: str
    ) -> List[str]:
        """Validate every code, collecting all violations before raising once.

        Returns uppercased codes with duplicates removed, first occurrence wins.
        """
        if not codes:
            raise MissingFieldError(field)
        violations: List[str] = []
        result: List[str] = []
        for code in codes:
            if code is None or code not in self._registry:
                message = (
                    f"`{item_field}` ({code if code is not None else ''}) not found in our database. "
                    + _UNKNOWN_HINT.format(param=field)
                )
                violations.append(message)
                continue
            upper = code.upper()
            if upper not in result:
                result.append(upper)
        if violations:
            raise InputValidationError(violations)
        return result
