"""Read side of the audit log."""

from __future__ import annotations

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.models import AuditLog
from salesboard.schemas.audit import AuditQuery, AuditStatsOut
from salesboard.services.accounts import count


def audit_query(query: AuditQuery) -> Select:
    stmt = select(AuditLog)
    if query.entity:
        stmt = stmt.where(AuditLog.entity == query.entity)
    if query.entity_id:
        stmt = stmt.where(AuditLog.entity_id == query.entity_id)
    if query.user_id:
        stmt = stmt.where(AuditLog.user_id == query.user_id)
    if query.action:
        stmt = stmt.where(AuditLog.action == query.action)
    return stmt


async def list_audit_logs(
    session: AsyncSession, query: AuditQuery
) -> tuple[list[AuditLog], int]:
    stmt = audit_query(query)
    total = await count(session, stmt)
    order = AuditLog.created_at.asc() if query.order == "asc" else AuditLog.created_at.desc()
    rows = (
        await session.execute(
            stmt.order_by(order, AuditLog.id).offset(query.offset).limit(query.limit)
        )
    ).scalars()
    return list(rows), total


async def audit_stats(session: AsyncSession) -> AuditStatsOut:
    async def grouped(column) -> dict[str, int]:
        rows = await session.execute(
            select(column, func.count()).where(column.is_not(None)).group_by(column)
        )
        return {key: total for key, total in rows}

    total = (await session.execute(select(func.count()).select_from(AuditLog))).scalar_one()
    return AuditStatsOut(
        total_logs=total,
        logs_by_action=await grouped(AuditLog.action),
        logs_by_entity=await grouped(AuditLog.entity),
        logs_by_user=await grouped(AuditLog.user_id),
    )
