from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from currencyify.models.exchange_rate import (
    ExchangeRateBatchRequest,
    ExchangeRateBatchResult,
)
from currencyify.services.exchange_rate_service import ExchangeRateService
from .deps import get_exchange_rate_service

router = APIRouter(prefix="/exchange-rate", tags=["exchange-rate"])


@router.post(
    "/currency-exchange-rate/",
    response_model=ExchangeRateBatchResult,
    summary="Latest exchange rates of target currencies against a base currency",
)
def currency_exchange_rate(
    payload: ExchangeRateBatchRequest,
    response: Response,
    svc: ExchangeRateService = Depends(get_exchange_rate_service),
):
    result = svc.get_exchange_rates(payload)
    response.headers["Cache-Control"] = "no-cache"
    return result
