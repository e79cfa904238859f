"""Per-division revenue arithmetic.

Two valuation modes coexist and callers must pick one explicitly:

* ``weighted`` - book value. A relationship that carries division
  percentages contributes ``revenue * pct / 100`` per division; a missing
  percentage next to a set one counts as zero. A relationship with no
  percentages at all contributes the account's full revenue.
* ``full`` - the raw sum of the four division figures, used for the original
  accounts column.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

DIVISIONS = ("esg", "gdt", "gvc", "msg_us")

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class RevenueMode(str, Enum):
    WEIGHTED = "weighted"
    FULL = "full"


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Percentages:
    esg: Optional[Decimal] = None
    gdt: Optional[Decimal] = None
    gvc: Optional[Decimal] = None
    msg_us: Optional[Decimal] = None

    @classmethod
    def of(cls, obj: Any) -> "Percentages":
        """Read ``pct_*`` attributes (or dict keys) off a relationship-like object."""

        if isinstance(obj, cls):
            return obj
        get = obj.get if isinstance(obj, dict) else lambda name: getattr(obj, name, None)
        return cls(*(_decimal(get(f"pct_{division}")) for division in DIVISIONS))

    def values(self) -> tuple[Optional[Decimal], ...]:
        return (self.esg, self.gdt, self.gvc, self.msg_us)

    @property
    def is_empty(self) -> bool:
        return all(value is None for value in self.values())


@dataclass(frozen=True)
class RevenueBreakdown:
    esg: Decimal = ZERO
    gdt: Decimal = ZERO
    gvc: Decimal = ZERO
    msg_us: Decimal = ZERO

    @classmethod
    def of(cls, row: Any) -> "RevenueBreakdown":
        """Build from an ``AccountRevenue`` row, a dict or ``None``."""

        if row is None:
            return cls()
        if isinstance(row, cls):
            return row
        get = row.get if isinstance(row, dict) else lambda name: getattr(row, name, None)
        return cls(*(_decimal(get(f"revenue_{division}")) or ZERO for division in DIVISIONS))

    def values(self) -> tuple[Decimal, ...]:
        return (self.esg, self.gdt, self.gvc, self.msg_us)

    @property
    def total(self) -> Decimal:
        return sum(self.values(), ZERO)

    def weighted(self, pcts: Percentages) -> Decimal:
        if pcts.is_empty:
            return self.total
        return sum(
            (amount * (pct or ZERO) / HUNDRED for amount, pct in zip(self.values(), pcts.values())),
            ZERO,
        )

    def value(self, pcts: Percentages, mode: RevenueMode) -> Decimal:
        return self.weighted(pcts) if mode is RevenueMode.WEIGHTED else self.total

    def __add__(self, other: "RevenueBreakdown") -> "RevenueBreakdown":
        return RevenueBreakdown(*(a + b for a, b in zip(self.values(), other.values())))


def relationship_value(
    relationship: Any,
    revenue_by_account: Mapping[str, Any],
    mode: RevenueMode = RevenueMode.WEIGHTED,
) -> Decimal:
    account_id = (
        relationship.get("account_id")
        if isinstance(relationship, dict)
        else getattr(relationship, "account_id", None)
    )
    breakdown = RevenueBreakdown.of(revenue_by_account.get(account_id))
    return breakdown.value(Percentages.of(relationship), RevenueMode(mode))


def aggregate(
    relationships: Iterable[Any],
    revenue_by_account: Mapping[str, Any],
    mode: RevenueMode = RevenueMode.WEIGHTED,
) -> Decimal:
    """Sum the value of ``relationships`` under ``mode``.

    Accounts without a revenue row contribute zero.
    """

    return sum(
        (relationship_value(rel, revenue_by_account, mode) for rel in relationships),
        ZERO,
    )


def validate_percentages(pcts: Percentages) -> list[str]:
    """Advisory checks on a percentage set; never rejects."""

    if pcts.is_empty:
        return []
    warnings: list[str] = []
    for division, value in zip(DIVISIONS, pcts.values()):
        if value is not None and not ZERO <= value <= HUNDRED:
            warnings.append(f"pct_{division} is outside 0..100 ({value})")
    total = sum((value or ZERO for value in pcts.values()), ZERO)
    if total != HUNDRED:
        warnings.append(f"percentages sum to {total}, not 100")
    return warnings
