from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class RevenueOut(BaseModel):
    esg: Decimal = Decimal("0")
    gdt: Decimal = Decimal("0")
    gvc: Decimal = Decimal("0")
    msg_us: Decimal = Decimal("0")
    total: Decimal = Decimal("0")


class AccountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    tier: Optional[str] = None
    type: Optional[str] = None
    current_division: Optional[str] = None
    revenue: RevenueOut = RevenueOut()


class AccountFilterOptions(BaseModel):
    divisions: List[str]
    sizes: List[str]
    tiers: List[str]
    industries: List[str]
    countries: List[str]
    states: List[str]
