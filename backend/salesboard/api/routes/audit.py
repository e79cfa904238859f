from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.db import get_session
from salesboard.core.deps import get_current_user
from salesboard.core.permissions import require_master
from salesboard.models import Profile
from salesboard.schemas.audit import AuditLogOut, AuditQuery, AuditStatsOut
from salesboard.services import audit_trail

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("")
async def list_audit_logs(
    entity: Optional[str] = None,
    entity_id: Optional[str] = None,
    user_id: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    order: Literal["asc", "desc"] = "desc",
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
):
    require_master(user)
    query = AuditQuery(
        entity=entity,
        entity_id=entity_id,
        user_id=user_id,
        action=action,
        limit=limit,
        offset=offset,
        order=order,
    )
    items, total = await audit_trail.list_audit_logs(session, query)
    return {
        "items": [AuditLogOut.model_validate(item) for item in items],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.get("/stats", response_model=AuditStatsOut)
async def audit_stats(
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
):
    require_master(user)
    return await audit_trail.audit_stats(session)
