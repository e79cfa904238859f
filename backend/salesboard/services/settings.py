"""Seller health thresholds (defaults plus stored overrides)."""

from __future__ import annotations

from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.audit import AuditAction, AuditEntity, log_audit
from salesboard.core.cache import invalidate_kpis
from salesboard.core.permissions import require_master
from salesboard.domain.health import Threshold, resolve_thresholds
from salesboard.models import HealthThreshold, Profile
from salesboard.schemas.settings import ThresholdIn, ThresholdOut


async def load_thresholds(session: AsyncSession) -> dict[tuple[str, str], Threshold]:
    rows = (await session.execute(select(HealthThreshold))).scalars().all()
    return resolve_thresholds(rows)


async def list_thresholds(session: AsyncSession) -> list[ThresholdOut]:
    rows = {
        (row.size, row.seniority): row
        for row in (await session.execute(select(HealthThreshold))).scalars()
    }
    table = resolve_thresholds(rows.values())
    return [
        ThresholdOut(
            size=size,
            seniority=seniority,
            min_revenue=threshold.min_revenue,
            max_revenue=threshold.max_revenue,
            max_accounts=threshold.max_accounts,
            updated_at=rows[(size, seniority)].updated_at if (size, seniority) in rows else None,
        )
        for (size, seniority), threshold in sorted(table.items())
    ]


def _snapshot(table: dict[tuple[str, str], Threshold]) -> dict[str, dict]:
    return {
        f"{size}:{seniority}": {
            "min_revenue": str(t.min_revenue),
            "max_revenue": str(t.max_revenue),
            "max_accounts": t.max_accounts,
        }
        for (size, seniority), t in table.items()
    }


async def update_thresholds(
    session: AsyncSession,
    actor: Profile,
    updates: list[ThresholdIn],
    *,
    remote_addr: Optional[str] = None,
) -> list[ThresholdOut]:
    require_master(actor)
    before = _snapshot(await load_thresholds(session))

    for item in updates:
        row = (
            await session.execute(
                select(HealthThreshold).where(
                    HealthThreshold.size == item.size,
                    HealthThreshold.seniority == item.seniority,
                )
            )
        ).scalar_one_or_none()
        if row is None:
            row = HealthThreshold(size=item.size, seniority=item.seniority)
            session.add(row)
        row.min_revenue = item.min_revenue
        row.max_revenue = item.max_revenue
        row.max_accounts = item.max_accounts
    await session.commit()

    logger.bind(count=len(updates)).info("health_thresholds_updated")
    await log_audit(
        session,
        actor.id,
        AuditAction.SETTINGS_UPDATE,
        AuditEntity.SETTINGS,
        "health_thresholds",
        before={"thresholds": before},
        after={"thresholds": [item.model_dump(mode="json") for item in updates]},
        remote_addr=remote_addr,
    )
    await invalidate_kpis()
    return await list_thresholds(session)
