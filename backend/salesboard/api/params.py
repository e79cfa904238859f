"""Query-string to view-state adapters for the listing endpoints."""

from typing import Literal, Optional

from fastapi import Query

from salesboard.core.config import settings
from salesboard.schemas.common import AccountFilters, PageParams


def page_params(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> PageParams:
    return PageParams(page=page, page_size=page_size)


def account_filters(
    division: Optional[str] = None,
    size: Optional[str] = None,
    tier: Optional[str] = None,
    industry: Optional[str] = None,
    country: Optional[str] = None,
    state: Optional[str] = None,
    q: Optional[str] = Query(None, max_length=255),
    sort: Literal["name", "revenue", "fit"] = "name",
    order: Literal["asc", "desc"] = "asc",
) -> AccountFilters:
    return AccountFilters(
        division=division,
        size=size,
        tier=tier,
        industry=industry,
        country=country,
        state=state,
        q=q,
        sort=sort,
        order=order,
    )
