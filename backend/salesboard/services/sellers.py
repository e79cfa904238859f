"""Seller listings, books, candidate pools and the finalize toggle."""

from __future__ import annotations

from typing import Optional

from loguru import logger
from sqlalchemy import Select, and_, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from salesboard.core.audit import AuditAction, AuditEntity, log_audit
from salesboard.core.cache import invalidate_kpis
from salesboard.core.errors import NotFoundError
from salesboard.core.permissions import (
    Capabilities,
    ensure_can_manage_seller,
    manager_for_user,
)
from salesboard.domain import fit
from salesboard.domain.revenue import ZERO, Percentages, RevenueBreakdown, RevenueMode
from salesboard.domain.statuses import (
    CanonicalStatus,
    PROTECTED_STATUSES,
    PROTECTED_STORED_VALUES,
    normalize_optional,
    normalize_status,
)
from salesboard.models import (
    Account,
    AccountRevenue,
    OriginalRelationship,
    Profile,
    RelationshipMap,
    Seller,
)
from salesboard.schemas.common import AccountFilters, PageParams
from salesboard.schemas.seller import (
    BookColumn,
    BookEntry,
    CandidateOut,
    SellerBookOut,
    SellerOut,
)
from salesboard.services.accounts import (
    apply_account_filters,
    apply_account_sort,
    count,
    revenue_map,
    to_account_out,
)

ORIGINAL_COLUMN = "original"
BOOK_COLUMNS = (
    CanonicalStatus.MUST_KEEP,
    CanonicalStatus.FOR_DISCUSSION,
    CanonicalStatus.TO_BE_PEELED,
)


async def get_seller(session: AsyncSession, seller_id: str) -> Seller:
    seller = await session.get(Seller, seller_id)
    if seller is None:
        raise NotFoundError(f"Seller {seller_id} not found")
    return seller


async def get_scoped_seller(
    session: AsyncSession, user: Profile, caps: Capabilities, seller_id: str
) -> Seller:
    seller = await get_seller(session, seller_id)
    await ensure_can_manage_seller(session, user, caps, seller)
    return seller


async def scoped_seller_query(
    session: AsyncSession, user: Profile, caps: Capabilities
) -> Select:
    stmt = select(Seller)
    if caps.manager_scope:
        manager = await manager_for_user(session, user.id)
        # a manager profile without a managers row sees no sellers
        stmt = stmt.where(Seller.manager_id == manager.id if manager else false())
    return stmt


async def list_sellers(
    session: AsyncSession,
    user: Profile,
    caps: Capabilities,
    page: PageParams,
    *,
    division: Optional[str] = None,
    size: Optional[str] = None,
    q: Optional[str] = None,
) -> tuple[list[SellerOut], int]:
    stmt = await scoped_seller_query(session, user, caps)
    if division:
        stmt = stmt.where(Seller.division == division)
    if size:
        stmt = stmt.where(Seller.size == size)
    if q:
        stmt = stmt.where(Seller.name.ilike(f"%{q.strip()}%"))
    total = await count(session, stmt)
    rows = (
        await session.execute(
            stmt.order_by(func.lower(Seller.name), Seller.id).offset(page.offset).limit(page.limit)
        )
    ).scalars()
    return [SellerOut.model_validate(row) for row in rows], total


def _entry(relationship_id, status, account, revenue, pct_source, mode) -> BookEntry:
    pcts = Percentages.of(pct_source)
    return BookEntry(
        relationship_id=relationship_id,
        status=status,
        account=to_account_out(account, revenue),
        pct_esg=pcts.esg,
        pct_gdt=pcts.gdt,
        pct_gvc=pcts.gvc,
        pct_msg_us=pcts.msg_us,
        value=RevenueBreakdown.of(revenue).value(pcts, mode),
    )


def _column(entries: list[BookEntry], page: PageParams) -> BookColumn:
    entries.sort(key=lambda e: (e.account.name.lower(), e.account.id))
    return BookColumn(
        items=entries[page.offset : page.offset + page.limit],
        total=len(entries),
        value=sum((e.value for e in entries), ZERO),
    )


async def seller_book(session: AsyncSession, seller: Seller, page: PageParams) -> SellerBookOut:
    """The seller's kanban: originals plus the three protected columns."""

    live = (
        await session.execute(
            select(RelationshipMap, Account)
            .join(Account, Account.id == RelationshipMap.account_id)
            .where(RelationshipMap.seller_id == seller.id)
        )
    ).all()
    originals = (
        await session.execute(
            select(OriginalRelationship, Account)
            .join(Account, Account.id == OriginalRelationship.account_id)
            .where(OriginalRelationship.seller_id == seller.id)
        )
    ).all()
    revenues = await revenue_map(
        session, [a.id for _, a in live] + [a.id for _, a in originals]
    )
    live_status = {rel.account_id: normalize_status(rel.status) for rel, _ in live}

    grouped: dict[str, list[BookEntry]] = {status.value: [] for status in BOOK_COLUMNS}
    for rel, account in live:
        status = live_status[account.id]
        if status in PROTECTED_STATUSES:
            grouped[status.value].append(
                _entry(rel.id, status, account, revenues.get(account.id), rel, RevenueMode.WEIGHTED)
            )
    grouped[ORIGINAL_COLUMN] = [
        _entry(
            orig.id,
            live_status.get(account.id),
            account,
            revenues.get(account.id),
            orig,
            RevenueMode.FULL,
        )
        for orig, account in originals
    ]

    return SellerBookOut(
        seller=SellerOut.model_validate(seller),
        page=page.page,
        page_size=page.page_size,
        columns={name: _column(entries, page) for name, entries in grouped.items()},
    )


def protected_elsewhere_query(seller_id: str) -> Select:
    """Accounts some other seller holds in a protected column."""

    return select(RelationshipMap.account_id).where(
        RelationshipMap.seller_id != seller_id,
        RelationshipMap.status.in_(PROTECTED_STORED_VALUES),
    )


def candidate_query(
    seller: Seller,
    filters: AccountFilters,
    *,
    include_restricted: bool = False,
    available_only: bool = False,
) -> Select:
    own = aliased(RelationshipMap)
    restricted = protected_elsewhere_query(seller.id)
    stmt = (
        select(
            Account,
            AccountRevenue,
            own.status,
            Account.id.in_(restricted).label("restricted"),
        )
        .outerjoin(AccountRevenue, AccountRevenue.account_id == Account.id)
        .outerjoin(own, and_(own.account_id == Account.id, own.seller_id == seller.id))
    )
    if available_only:
        stmt = stmt.where(
            Account.id.not_in(restricted),
            or_(own.status.is_(None), own.status == CanonicalStatus.AVAILABLE.value),
        )
    elif not include_restricted:
        stmt = stmt.where(Account.id.not_in(restricted))
    return apply_account_filters(stmt, filters)


async def candidates(
    session: AsyncSession,
    seller: Seller,
    filters: AccountFilters,
    page: PageParams,
    *,
    include_restricted: bool = False,
    available_only: bool = False,
) -> tuple[list[CandidateOut], int]:
    """Accounts with this seller's canonical status and fit score.

    Name and revenue sorts page in SQL and score only the page; the fit sort
    scores the filtered set for this one seller before slicing.
    """

    stmt = candidate_query(
        seller, filters, include_restricted=include_restricted, available_only=available_only
    )
    total = await count(session, stmt)

    if filters.sort == "fit":
        rows = (await session.execute(stmt.order_by(func.lower(Account.name), Account.id))).all()
        scores = fit.score_many(seller, (row[0] for row in rows))
        rows.sort(key=lambda row: scores[str(row[0].id)], reverse=filters.order == "desc")
        rows = rows[page.offset : page.offset + page.limit]
    else:
        rows = (
            await session.execute(
                apply_account_sort(stmt, filters).offset(page.offset).limit(page.limit)
            )
        ).all()
        scores = fit.score_many(seller, (row[0] for row in rows))

    return [
        CandidateOut(
            account=to_account_out(account, revenue),
            status=normalize_optional(status),
            restricted=bool(restricted),
            fit_score=scores[str(account.id)],
        )
        for account, revenue, status, restricted in rows
    ], total


async def set_finalized(
    session: AsyncSession,
    user: Profile,
    caps: Capabilities,
    seller_id: str,
    finalized: bool,
    *,
    remote_addr: Optional[str] = None,
) -> Seller:
    seller = await get_scoped_seller(session, user, caps, seller_id)
    before = seller.book_finalized
    seller.book_finalized = finalized
    await session.commit()

    logger.bind(seller_id=seller.id, finalized=finalized).info("seller_book_finalized")
    await log_audit(
        session,
        user.id,
        AuditAction.BOOK_FINALIZED if finalized else AuditAction.BOOK_UNFINALIZED,
        AuditEntity.SELLER,
        seller.id,
        before={"book_finalized": before},
        after={"book_finalized": finalized},
        remote_addr=remote_addr,
    )
    await invalidate_kpis()
    return seller
