from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel


class HealthOut(BaseModel):
    revenue: Decimal
    account_count: int
    is_revenue_healthy: bool
    is_account_healthy: bool
    size_mismatch: str
    has_industry_mismatch: bool
    min_revenue: Optional[Decimal] = None
    max_revenue: Optional[Decimal] = None
    max_accounts: Optional[int] = None


class SellerKpisOut(BaseModel):
    seller_id: str
    book_value: Decimal
    must_keep_value: Decimal
    status_counts: Dict[str, int]
    original_accounts: int
    original_value: Decimal
    book_finalized: bool
    health: HealthOut


class PortfolioKpisOut(BaseModel):
    """Aggregate over a set of sellers (a manager's team or the company)."""

    scope: str
    manager_id: Optional[str] = None
    seller_count: int
    finalized_count: int
    book_value: Decimal
    must_keep_value: Decimal
    status_counts: Dict[str, int]
    sellers_by_division: Dict[str, int]
    sellers_by_size: Dict[str, int]
    revenue_by_size: Dict[str, Decimal]
    unhealthy_sellers: int
