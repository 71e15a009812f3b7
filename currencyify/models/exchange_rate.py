from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .rates import RateRecord


class ExchangeRateBatchRequest(BaseModel):
    base_currency: Optional[str] = Field(None, description="ISO code rates are quoted against")
    target_currencies: Optional[List[str]] = Field(
        None, description="ISO codes to quote; duplicates are collapsed"
    )


class ExchangeRateOut(BaseModel):
    currency_exchange_rate: str
    last_update_time: datetime

    @classmethod
    def from_record(cls, record: RateRecord) -> "ExchangeRateOut":
        return cls(
            currency_exchange_rate=record.rate, last_update_time=record.observed_at
        )


class ExchangeRateBatchResult(BaseModel):
    base_currency: str
    exchange_rates: Dict[str, ExchangeRateOut]
