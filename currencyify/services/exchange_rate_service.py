from __future__ import annotations

import logging
from typing import List

from currencyify.core.errors import InputValidationError
from currencyify.models.exchange_rate import (
    ExchangeRateBatchRequest,
    ExchangeRateBatchResult,
    ExchangeRateOut,
)
from .currency_codes import CodeValidator
from .rates.cache_service import pair_cache_key
from .rates.resolver import RateResolver

logger = logging.getLogger("currencyify.exchange_rate")


class ExchangeRateService:
    """Batch lookup of rates for many targets against one caller-chosen base."""

    def __init__(self, validator: CodeValidator, resolver: RateResolver):
        self._validator = validator
        self._resolver = resolver

    def _validate(self, request: ExchangeRateBatchRequest) -> tuple[str, List[str]]:
        violations: List[str] = []
        base = ""
        targets: List[str] = []
        try:
            base = self._validator.validate(request.base_currency, "base_currency")
        except InputValidationError as e:
            violations.extend(e.violations)
        try:
            targets = self._validator.validate_many(
                request.target_currencies, "target_currencies", "target_currency"
            )
        except InputValidationError as e:
            violations.extend(e.violations)
        if violations:
            raise InputValidationError(violations)
        return base, targets

    def get_exchange_rates(
        self, request: ExchangeRateBatchRequest
    ) -> ExchangeRateBatchResult:
        base, targets = self._validate(request)
        records = self._resolver.resolve(base, targets, cache_key=pair_cache_key)
        return ExchangeRateBatchResult(
            base_currency=base,
            exchange_rates={
                code: ExchangeRateOut.from_record(record)
                for code, record in records.items()
            },
        )
