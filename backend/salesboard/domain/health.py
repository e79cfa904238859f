"""Seller book health against the size/seniority thresholds."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from salesboard.domain.fit import NO_SPECIALTY, UNKNOWN_SIZE

SENIOR = "senior"
JUNIOR = "junior"
SENIOR_TENURE_MONTHS = 12


class SizeMismatch(str, Enum):
    ENTERPRISE_WITH_MIDMARKET = "enterprise_with_midmarket"
    MIDMARKET_WITH_ENTERPRISE = "midmarket_with_enterprise"
    NO_MISMATCH = "no_mismatch"


@dataclass(frozen=True)
class Threshold:
    min_revenue: Decimal
    max_revenue: Decimal
    max_accounts: int


DEFAULT_THRESHOLDS: dict[tuple[str, str], Threshold] = {
    ("enterprise", SENIOR): Threshold(Decimal("5000000"), Decimal("20000000"), 7),
    ("enterprise", JUNIOR): Threshold(Decimal("3000000"), Decimal("10000000"), 4),
    ("midmarket", SENIOR): Threshold(Decimal("2000000"), Decimal("8000000"), 5),
    ("midmarket", JUNIOR): Threshold(Decimal("1000000"), Decimal("5000000"), 3),
}


def seniority_of(tenure_months: Optional[int]) -> str:
    return SENIOR if (tenure_months or 0) > SENIOR_TENURE_MONTHS else JUNIOR


def resolve_thresholds(overrides: Iterable[Any] = ()) -> dict[tuple[str, str], Threshold]:
    """Defaults, with any stored ``health_thresholds`` rows layered on top."""

    table = dict(DEFAULT_THRESHOLDS)
    for row in overrides:
        table[(row.size, row.seniority)] = Threshold(
            Decimal(str(row.min_revenue)), Decimal(str(row.max_revenue)), int(row.max_accounts)
        )
    return table


@dataclass(frozen=True)
class SellerHealth:
    revenue: Decimal
    account_count: int
    is_revenue_healthy: bool
    is_account_healthy: bool
    size_mismatch: SizeMismatch
    has_industry_mismatch: bool
    threshold: Optional[Threshold]


def size_mismatch(seller_size: Optional[str], account_sizes: Iterable[Optional[str]]) -> SizeMismatch:
    sizes = set(account_sizes)
    if seller_size == "enterprise" and "midmarket" in sizes:
        return SizeMismatch.ENTERPRISE_WITH_MIDMARKET
    if seller_size == "midmarket" and "enterprise" in sizes:
        return SizeMismatch.MIDMARKET_WITH_ENTERPRISE
    return SizeMismatch.NO_MISMATCH


def has_industry_mismatch(specialty: Optional[str], industries: Iterable[Optional[str]]) -> bool:
    if not specialty or specialty == NO_SPECIALTY:
        return False
    return any(industry is not None and industry != specialty for industry in industries)


def assess(
    seller: Any,
    must_keep_accounts: Iterable[Any],
    revenue: Decimal,
    thresholds: Optional[Mapping[tuple[str, str], Threshold]] = None,
) -> SellerHealth:
    """Evaluate one seller.

    ``must_keep_accounts`` are the accounts behind the seller's
    must_keep-equivalent relationships and ``revenue`` is their book value.
    """

    accounts = list(must_keep_accounts)
    table = thresholds if thresholds is not None else DEFAULT_THRESHOLDS
    size = getattr(seller, "size", None)
    threshold = None
    if size and size != UNKNOWN_SIZE:
        threshold = table.get((size, seniority_of(getattr(seller, "tenure_months", None))))

    if threshold is None:
        revenue_ok, accounts_ok = False, True
    else:
        revenue_ok = threshold.min_revenue <= revenue <= threshold.max_revenue
        accounts_ok = len(accounts) <= threshold.max_accounts

    return SellerHealth(
        revenue=revenue,
        account_count=len(accounts),
        is_revenue_healthy=revenue_ok,
        is_account_healthy=accounts_ok,
        size_mismatch=size_mismatch(size, (getattr(a, "size", None) for a in accounts)),
        has_industry_mismatch=has_industry_mismatch(
            getattr(seller, "industry_specialty", None),
            (getattr(a, "industry", None) for a in accounts),
        ),
        threshold=threshold,
    )
