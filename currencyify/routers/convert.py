from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from currencyify.models.convert import ConversionRequest, ConversionResult
from currencyify.services.convert_service import ConvertService
from .deps import get_convert_service

"""Currency conversion router.

Endpoints:
    - POST /convert/currency-convert/ -> convert an amount between two ISO codes

Validation failures -> 400 listing every violation; provider failures -> 502;
unusable rates -> 500 (see core.errors).
"""

router = APIRouter(prefix="/convert", tags=["convert"])


@router.post(
    "/currency-convert/",
    response_model=ConversionResult,
    summary="Convert an amount from source to target currency",
)
def currency_convert(
    payload: ConversionRequest,
    response: Response,
    svc: ConvertService = Depends(get_convert_service),
):
    # Sync endpoint; FastAPI runs it in the threadpool.
    result = svc.convert(payload)
    response.headers["Cache-Control"] = "no-cache"
    return result
