from __future__ import annotations

"""Currency conversion orchestration.

validate -> resolve source and target rates against USD -> convert.
Each rate is resolved as its own one-element batch keyed by the bare code.
"""
import logging
from decimal import Decimal
from typing import List

from currencyify.core.errors import InputValidationError
from currencyify.models.constants import REFERENCE_BASE_CURRENCY
from currencyify.models.convert import ConversionRequest, ConversionResult
from .currency_codes import CodeValidator
from .rates.cache_service import usd_cache_key
from .rates.conversion import convert
from .rates.resolver import RateResolver

logger = logging.getLogger("currencyify.convert")


class ConvertService:
    def __init__(self, validator: CodeValidator, resolver: RateResolver):
        self._validator = validator
        self._resolver = resolver

    def _validate(self, request: ConversionRequest) -> tuple[str, str, Decimal]:
        violations: List[str] = []
        source = target = ""
        try:
            source = self._validator.validate(request.source_currency, "source_currency")
        except InputValidationError as e:
            violations.extend(e.violations)
        try:
            target = self._validator.validate(request.target_currency, "target_currency")
        except InputValidationError as e:
            violations.extend(e.violations)
        amount = request.amount or Decimal(0)
        if amount == 0:
            violations.append("`amount` parameter is required")
        elif amount < 0:
            violations.append("`amount` must be a positive number")
        if violations:
            raise InputValidationError(violations)
        return source, target, amount

    def _usd_rate(self, code: str) -> str:
        records = self._resolver.resolve(
            REFERENCE_BASE_CURRENCY, [code], cache_key=usd_cache_key
        )
        return records[code].rate

    def convert(self, request: ConversionRequest) -> ConversionResult:
        source, target, amount = self._validate(request)
        source_rate = self._usd_rate(source)
        target_rate = self._usd_rate(target)
        converted = convert(amount, source_rate, target_rate)
        logger.debug("converted %s %s -> %s %s", amount, source, converted, target)
        return ConversionResult(
            source_currency=source,
            target_currency=target,
            amount=amount,
            converted_amount=converted,
        )
