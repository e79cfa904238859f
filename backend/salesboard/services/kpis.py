"""Seller, manager and company KPIs.

Results are cached under the ``kpi:*`` key space and dropped wholesale by
``invalidate_kpis`` whenever must_keep revenue, finalization or thresholds
change.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.cache import get_cache, kpi_cache_key, set_cache
from salesboard.core.permissions import Capabilities, manager_for_user
from salesboard.domain import health
from salesboard.domain.revenue import ZERO, RevenueMode, aggregate
from salesboard.domain.statuses import CanonicalStatus, PROTECTED_STATUSES, normalize_status
from salesboard.models import Account, OriginalRelationship, Profile, RelationshipMap, Seller
from salesboard.schemas.dashboard import HealthOut, PortfolioKpisOut, SellerKpisOut
from salesboard.services.accounts import revenue_map
from salesboard.services.settings import load_thresholds

UNKNOWN = "no_data"


@dataclass
class _Book:
    relationships: list[RelationshipMap] = field(default_factory=list)
    originals: list[OriginalRelationship] = field(default_factory=list)


async def _books(session: AsyncSession, seller_ids: list[str]) -> dict[str, _Book]:
    books = {seller_id: _Book() for seller_id in seller_ids}
    if not seller_ids:
        return books
    for rel in (
        await session.execute(
            select(RelationshipMap).where(RelationshipMap.seller_id.in_(seller_ids))
        )
    ).scalars():
        books[rel.seller_id].relationships.append(rel)
    for orig in (
        await session.execute(
            select(OriginalRelationship).where(OriginalRelationship.seller_id.in_(seller_ids))
        )
    ).scalars():
        books[orig.seller_id].originals.append(orig)
    return books


async def _accounts(session: AsyncSession, account_ids: Iterable[str]) -> dict[str, Account]:
    ids = list(set(account_ids))
    if not ids:
        return {}
    rows = (await session.execute(select(Account).where(Account.id.in_(ids)))).scalars()
    return {row.id: row for row in rows}


async def compute_seller_kpis(session: AsyncSession, sellers: list[Seller]) -> list[SellerKpisOut]:
    books = await _books(session, [s.id for s in sellers])
    account_ids = [
        r.account_id for book in books.values() for r in [*book.relationships, *book.originals]
    ]
    revenues = await revenue_map(session, account_ids)
    accounts = await _accounts(session, account_ids)
    thresholds = await load_thresholds(session)

    results = []
    for seller in sellers:
        book = books[seller.id]
        by_status: dict[CanonicalStatus, list[RelationshipMap]] = {s: [] for s in CanonicalStatus}
        for rel in book.relationships:
            by_status[normalize_status(rel.status)].append(rel)

        protected = [rel for s in PROTECTED_STATUSES for rel in by_status[s]]
        must_keep = by_status[CanonicalStatus.MUST_KEEP]
        must_keep_value = aggregate(must_keep, revenues, RevenueMode.WEIGHTED)
        assessed = health.assess(
            seller,
            (accounts[r.account_id] for r in must_keep if r.account_id in accounts),
            must_keep_value,
            thresholds,
        )
        results.append(
            SellerKpisOut(
                seller_id=seller.id,
                book_value=aggregate(protected, revenues, RevenueMode.WEIGHTED),
                must_keep_value=must_keep_value,
                status_counts={s.value: len(rels) for s, rels in by_status.items()},
                original_accounts=len(book.originals),
                original_value=aggregate(book.originals, revenues, RevenueMode.FULL),
                book_finalized=seller.book_finalized,
                health=HealthOut(
                    revenue=assessed.revenue,
                    account_count=assessed.account_count,
                    is_revenue_healthy=assessed.is_revenue_healthy,
                    is_account_healthy=assessed.is_account_healthy,
                    size_mismatch=assessed.size_mismatch.value,
                    has_industry_mismatch=assessed.has_industry_mismatch,
                    min_revenue=assessed.threshold.min_revenue if assessed.threshold else None,
                    max_revenue=assessed.threshold.max_revenue if assessed.threshold else None,
                    max_accounts=assessed.threshold.max_accounts if assessed.threshold else None,
                ),
            )
        )
    return results


def summarize(
    scope: str,
    sellers: list[Seller],
    kpis: list[SellerKpisOut],
    manager_id: Optional[str] = None,
) -> PortfolioKpisOut:
    status_counts: Counter = Counter({s.value: 0 for s in CanonicalStatus})
    revenue_by_size: dict[str, Decimal] = {}
    for seller, figures in zip(sellers, kpis):
        status_counts.update(figures.status_counts)
        size = seller.size or UNKNOWN
        revenue_by_size[size] = revenue_by_size.get(size, ZERO) + figures.book_value
    return PortfolioKpisOut(
        scope=scope,
        manager_id=manager_id,
        seller_count=len(sellers),
        finalized_count=sum(1 for s in sellers if s.book_finalized),
        book_value=sum((k.book_value for k in kpis), ZERO),
        must_keep_value=sum((k.must_keep_value for k in kpis), ZERO),
        status_counts=dict(status_counts),
        sellers_by_division=dict(Counter(s.division or UNKNOWN for s in sellers)),
        sellers_by_size=dict(Counter(s.size or UNKNOWN for s in sellers)),
        revenue_by_size=revenue_by_size,
        unhealthy_sellers=sum(
            1
            for k in kpis
            if not (k.health.is_revenue_healthy and k.health.is_account_healthy)
        ),
    )


async def seller_kpis(session: AsyncSession, seller: Seller) -> SellerKpisOut:
    key = kpi_cache_key("seller", seller_id=seller.id)
    cached = await get_cache(key)
    if cached is not None:
        return SellerKpisOut.model_validate(cached)
    (result,) = await compute_seller_kpis(session, [seller])
    await set_cache(key, result.model_dump(mode="json"))
    return result


async def manager_kpis(session: AsyncSession, manager_id: Optional[str]) -> PortfolioKpisOut:
    key = kpi_cache_key("manager", manager_id=manager_id)
    cached = await get_cache(key)
    if cached is not None:
        return PortfolioKpisOut.model_validate(cached)
    sellers = []
    if manager_id is not None:
        sellers = list(
            (
                await session.execute(
                    select(Seller).where(Seller.manager_id == manager_id).order_by(Seller.id)
                )
            ).scalars()
        )
    result = summarize("manager", sellers, await compute_seller_kpis(session, sellers), manager_id)
    await set_cache(key, result.model_dump(mode="json"))
    return result


async def company_kpis(session: AsyncSession) -> PortfolioKpisOut:
    key = kpi_cache_key("company")
    cached = await get_cache(key)
    if cached is not None:
        return PortfolioKpisOut.model_validate(cached)
    sellers = list((await session.execute(select(Seller).order_by(Seller.id))).scalars())
    result = summarize("company", sellers, await compute_seller_kpis(session, sellers))
    await set_cache(key, result.model_dump(mode="json"))
    return result


async def dashboard_kpis(
    session: AsyncSession, user: Profile, caps: Capabilities
) -> PortfolioKpisOut:
    if not caps.manager_scope:
        return await company_kpis(session)
    manager = await manager_for_user(session, user.id)
    return await manager_kpis(session, manager.id if manager else None)
