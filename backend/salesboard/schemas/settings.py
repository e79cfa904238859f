from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class ThresholdOut(BaseModel):
    size: str
    seniority: str
    min_revenue: Decimal
    max_revenue: Decimal
    max_accounts: int
    updated_at: Optional[datetime] = None


class ThresholdIn(BaseModel):
    size: Literal["enterprise", "midmarket"]
    seniority: Literal["senior", "junior"]
    min_revenue: Decimal = Field(ge=0)
    max_revenue: Decimal = Field(ge=0)
    max_accounts: int = Field(ge=0)

    @model_validator(mode="after")
    def _ordered(self):
        if self.min_revenue > self.max_revenue:
            raise ValueError("min_revenue must not exceed max_revenue")
        return self


class ThresholdsUpdate(BaseModel):
    thresholds: List[ThresholdIn] = Field(min_length=1)
