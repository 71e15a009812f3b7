from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_serializer


class ConversionRequest(BaseModel):
    # Fields default to empty so missing values reach CodeValidator and are
    # reported together with every other violation.
    source_currency: Optional[str] = Field(None, description="ISO code to convert from")
    target_currency: Optional[str] = Field(None, description="ISO code to convert to")
    amount: Optional[Decimal] = Field(None, description="Positive amount in source currency")


class ConversionResult(BaseModel):
    source_currency: str
    target_currency: str
    amount: Decimal
    converted_amount: Decimal

    @field_serializer("amount", "converted_amount")
    def as_number(self, v: Decimal) -> float:
        return float(v)
