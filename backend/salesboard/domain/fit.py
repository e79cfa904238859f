"""Account-to-seller fit scoring.

The score is a weighted sum of four boolean-ish criteria. Each criterion only
ever awards points for a pairing it can actually compare: a null on either
side is a non-match, never a free pass.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Optional

DIVISION_WEIGHT = 40
GEOGRAPHY_WEIGHT = 25
INDUSTRY_WEIGHT = 20
SIZE_WEIGHT = 15

MIXED_DIVISION = "MIXED"
UNKNOWN_SIZE = "no_data"
NO_SPECIALTY = "-"

# (max distance in miles, points) checked in order
DISTANCE_BANDS = ((50.0, 25), (100.0, 15), (200.0, 10))
COUNTRY_ONLY_POINTS = 10
EARTH_RADIUS_MILES = 3959.0


def _attr(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _text(obj: Any, name: str) -> Optional[str]:
    value = _attr(obj, name)
    if value is None:
        return None
    if hasattr(value, "value"):  # enums
        value = value.value
    text = str(value).strip()
    return text or None


def _same(left: Optional[str], right: Optional[str]) -> bool:
    return left is not None and right is not None and left.casefold() == right.casefold()


def _coord(obj: Any, name: str) -> Optional[float]:
    value = _attr(obj, name)
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def distance_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in miles (haversine)."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * math.asin(min(1.0, math.sqrt(a)))


def division_points(seller: Any, account: Any) -> int:
    seller_division = _text(seller, "division")
    account_division = _text(account, "current_division")
    if seller_division is None or account_division is None:
        return 0
    if _same(seller_division, account_division) or account_division.upper() == MIXED_DIVISION:
        return DIVISION_WEIGHT
    return 0


def geography_points(seller: Any, account: Any) -> int:
    if _same(_text(seller, "state"), _text(account, "state")):
        return GEOGRAPHY_WEIGHT

    coords = (
        _coord(seller, "lat"),
        _coord(seller, "lng"),
        _coord(account, "lat"),
        _coord(account, "lng"),
    )
    if all(c is not None for c in coords):
        miles = distance_miles(*coords)  # type: ignore[arg-type]
        for limit, points in DISTANCE_BANDS:
            if miles <= limit:
                return points

    if _same(_text(seller, "country"), _text(account, "country")):
        return COUNTRY_ONLY_POINTS
    return 0


def industry_points(seller: Any, account: Any) -> int:
    specialty = _text(seller, "industry_specialty")
    if specialty is None or specialty == NO_SPECIALTY:
        return 0
    return INDUSTRY_WEIGHT if _same(specialty, _text(account, "industry")) else 0


def size_points(seller: Any, account: Any) -> int:
    seller_size = _text(seller, "size")
    if seller_size is None or seller_size == UNKNOWN_SIZE:
        return 0
    return SIZE_WEIGHT if _same(seller_size, _text(account, "size")) else 0


def score(seller: Any, account: Any) -> int:
    """Return the 0-100 fit between ``seller`` and ``account``.

    Both arguments may be ORM rows, Pydantic models, dicts or any object with
    the relevant attributes; missing attributes read as null.
    """

    total = (
        division_points(seller, account)
        + geography_points(seller, account)
        + industry_points(seller, account)
        + size_points(seller, account)
    )
    return max(0, min(100, total))


def score_many(seller: Any, accounts: Iterable[Any]) -> dict[str, int]:
    """Score one page of candidates, keyed by account id."""

    return {str(_attr(account, "id")): score(seller, account) for account in accounts}
