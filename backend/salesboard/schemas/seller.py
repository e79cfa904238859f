from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from salesboard.domain.statuses import CanonicalStatus
from salesboard.schemas.account import AccountOut


class SellerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    division: Optional[str] = None
    size: Optional[str] = None
    industry_specialty: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    tenure_months: Optional[int] = None
    is_senior: bool = False
    manager_id: Optional[str] = None
    book_finalized: bool = False


class BookEntry(BaseModel):
    relationship_id: str
    status: Optional[CanonicalStatus] = None
    account: AccountOut
    pct_esg: Optional[Decimal] = None
    pct_gdt: Optional[Decimal] = None
    pct_gvc: Optional[Decimal] = None
    pct_msg_us: Optional[Decimal] = None
    value: Decimal


class BookColumn(BaseModel):
    items: List[BookEntry]
    total: int
    value: Decimal


class SellerBookOut(BaseModel):
    seller: SellerOut
    page: int
    page_size: int
    columns: Dict[str, BookColumn]


class CandidateOut(BaseModel):
    account: AccountOut
    status: Optional[CanonicalStatus] = None
    restricted: bool = False
    fit_score: int


class FinalizeIn(BaseModel):
    finalized: bool
