"""Account listing and lookups.

Query builders take the explicit ``AccountFilters`` view state and return a
``Select``; the async functions only execute them.
"""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.errors import NotFoundError
from salesboard.domain.revenue import RevenueBreakdown
from salesboard.models import Account, AccountRevenue
from salesboard.schemas.account import AccountFilterOptions, AccountOut, RevenueOut
from salesboard.schemas.common import AccountFilters, PageParams


def revenue_total_expr():
    return (
        func.coalesce(AccountRevenue.revenue_esg, 0)
        + func.coalesce(AccountRevenue.revenue_gdt, 0)
        + func.coalesce(AccountRevenue.revenue_gvc, 0)
        + func.coalesce(AccountRevenue.revenue_msg_us, 0)
    )


def apply_account_filters(stmt: Select, filters: AccountFilters) -> Select:
    conditions = []
    if filters.division:
        conditions.append(Account.current_division == filters.division)
    if filters.size:
        conditions.append(Account.size == filters.size)
    if filters.tier:
        conditions.append(Account.tier == filters.tier)
    if filters.industry:
        conditions.append(Account.industry == filters.industry)
    if filters.country:
        conditions.append(Account.country == filters.country)
    if filters.state:
        conditions.append(Account.state == filters.state)
    if filters.q:
        like = f"%{filters.q.strip()}%"
        conditions.append(
            or_(
                Account.name.ilike(like),
                Account.city.ilike(like),
                Account.industry.ilike(like),
            )
        )
    return stmt.where(and_(*conditions)) if conditions else stmt


def apply_account_sort(stmt: Select, filters: AccountFilters) -> Select:
    if filters.sort == "revenue":
        key = revenue_total_expr()
    else:
        key = func.lower(Account.name)
    key = key.desc() if filters.order == "desc" else key.asc()
    return stmt.order_by(key, Account.id)


def account_listing_query(filters: AccountFilters) -> Select:
    stmt = select(Account, AccountRevenue).outerjoin(
        AccountRevenue, AccountRevenue.account_id == Account.id
    )
    return apply_account_filters(stmt, filters)


def to_account_out(account: Account, revenue: Optional[AccountRevenue]) -> AccountOut:
    breakdown = RevenueBreakdown.of(revenue)
    out = AccountOut.model_validate(account)
    out.revenue = RevenueOut(
        esg=breakdown.esg,
        gdt=breakdown.gdt,
        gvc=breakdown.gvc,
        msg_us=breakdown.msg_us,
        total=breakdown.total,
    )
    return out


async def count(session: AsyncSession, stmt: Select) -> int:
    return (
        await session.execute(select(func.count()).select_from(stmt.order_by(None).subquery()))
    ).scalar_one()


async def list_accounts(
    session: AsyncSession, filters: AccountFilters, page: PageParams
) -> tuple[list[AccountOut], int]:
    stmt = account_listing_query(filters)
    total = await count(session, stmt)
    rows = (
        await session.execute(
            apply_account_sort(stmt, filters).offset(page.offset).limit(page.limit)
        )
    ).all()
    return [to_account_out(account, revenue) for account, revenue in rows], total


async def filter_options(session: AsyncSession) -> AccountFilterOptions:
    async def distinct(column) -> list[str]:
        values = (
            await session.execute(select(column).where(column.is_not(None)).distinct())
        ).scalars()
        return sorted(v for v in values if v)

    return AccountFilterOptions(
        divisions=await distinct(Account.current_division),
        sizes=await distinct(Account.size),
        tiers=await distinct(Account.tier),
        industries=await distinct(Account.industry),
        countries=await distinct(Account.country),
        states=await distinct(Account.state),
    )


async def get_account(session: AsyncSession, account_id: str) -> Account:
    account = await session.get(Account, account_id)
    if account is None:
        raise NotFoundError(f"Account {account_id} not found")
    return account


async def get_account_out(session: AsyncSession, account_id: str) -> AccountOut:
    account = await get_account(session, account_id)
    revenue = (
        await session.execute(
            select(AccountRevenue).where(AccountRevenue.account_id == account_id)
        )
    ).scalar_one_or_none()
    return to_account_out(account, revenue)


async def revenue_map(
    session: AsyncSession, account_ids: Iterable[str]
) -> dict[str, AccountRevenue]:
    ids = list(set(account_ids))
    if not ids:
        return {}
    rows = (
        await session.execute(select(AccountRevenue).where(AccountRevenue.account_id.in_(ids)))
    ).scalars()
    return {row.account_id: row for row in rows}
