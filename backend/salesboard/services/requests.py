"""Approval requests: listing and the MASTER decision."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.audit import AuditAction, AuditEntity, log_audit
from salesboard.core.errors import NoOpTransitionError, NotFoundError, RequestAlreadyDecidedError
from salesboard.core.permissions import (
    MASTER_CAPABILITIES,
    Capabilities,
    require_master,
)
from salesboard.domain.revenue import Percentages
from salesboard.domain.statuses import normalize_status
from salesboard.models import ApprovalRequest, Profile
from salesboard.models.request import REQUEST_APPROVED, REQUEST_PENDING, REQUEST_REJECTED
from salesboard.schemas.common import PageParams
from salesboard.services.accounts import count, get_account
from salesboard.services.relationships import (
    after_direct_change,
    apply_direct,
    load_context,
    plan_for,
)
from salesboard.services.sellers import get_seller


async def list_requests(
    session: AsyncSession,
    user: Profile,
    caps: Capabilities,
    page: PageParams,
    *,
    status: Optional[str] = None,
) -> tuple[list[ApprovalRequest], int]:
    stmt = select(ApprovalRequest)
    if caps.manager_scope:
        stmt = stmt.where(ApprovalRequest.requester_user_id == user.id)
    if status:
        stmt = stmt.where(ApprovalRequest.status == status)
    total = await count(session, stmt)
    rows = (
        await session.execute(
            stmt.order_by(ApprovalRequest.created_at.desc(), ApprovalRequest.id)
            .offset(page.offset)
            .limit(page.limit)
        )
    ).scalars()
    return list(rows), total


async def _pending(session: AsyncSession, request_id: str) -> ApprovalRequest:
    request = await session.get(ApprovalRequest, request_id)
    if request is None:
        raise NotFoundError(f"Request {request_id} not found")
    if request.status != REQUEST_PENDING:
        raise RequestAlreadyDecidedError(f"Request {request_id} is already {request.status}")
    return request


def _decide(request: ApprovalRequest, decider: Profile, status: str) -> None:
    request.status = status
    request.decided_at = datetime.now()
    request.decided_by = decider.id


async def approve_request(
    session: AsyncSession,
    actor: Profile,
    request_id: str,
    *,
    remote_addr: Optional[str] = None,
) -> ApprovalRequest:
    """Apply the requested transition directly, then close the request.

    The transition is re-planned against the current state, so a request
    that has become illegal (for example the account is now protected for
    someone else) fails with the same error a direct change would.
    """

    require_master(actor)
    request = await _pending(session, request_id)
    seller = await get_seller(session, request.seller_id)
    account = await get_account(session, request.account_id)
    ctx = await load_context(session, seller, account)

    plan = None
    try:
        plan = plan_for(MASTER_CAPABILITIES, ctx, normalize_status(request.target_status))
    except NoOpTransitionError:
        logger.bind(approval_request_id=request.id).info("approval_request_already_satisfied")

    if plan is not None:
        await apply_direct(session, actor, ctx, plan, Percentages.of(request))
    _decide(request, actor, REQUEST_APPROVED)
    await session.commit()

    await log_audit(
        session,
        actor.id,
        AuditAction.APPROVE,
        AuditEntity.REQUEST,
        request.id,
        before={"status": REQUEST_PENDING},
        after={"status": REQUEST_APPROVED},
        remote_addr=remote_addr,
    )
    if plan is not None:
        await after_direct_change(session, actor, ctx, plan, remote_addr=remote_addr)
    return request


async def reject_request(
    session: AsyncSession,
    actor: Profile,
    request_id: str,
    *,
    remote_addr: Optional[str] = None,
) -> ApprovalRequest:
    require_master(actor)
    request = await _pending(session, request_id)
    _decide(request, actor, REQUEST_REJECTED)
    await session.commit()

    logger.bind(approval_request_id=request.id).info("approval_request_rejected")
    await log_audit(
        session,
        actor.id,
        AuditAction.REJECT,
        AuditEntity.REQUEST,
        request.id,
        before={"status": REQUEST_PENDING},
        after={"status": REQUEST_REJECTED},
        remote_addr=remote_addr,
    )
    return request
