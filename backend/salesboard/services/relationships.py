"""Relationship status changes.

Every change goes through the same steps: scope check, load the current
state, plan, write, commit, then the best-effort side effects (audit entry
and KPI cache invalidation).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.audit import AuditAction, AuditEntity, log_audit
from salesboard.core.cache import invalidate_kpis
from salesboard.core.db_errors import raise_on_duplicate_relationship
from salesboard.core.errors import ImmutableAccountError, NotFoundError, RequestAlreadyPendingError
from salesboard.core.permissions import Capabilities, capabilities_for, ensure_can_manage_seller
from salesboard.domain.revenue import Percentages, validate_percentages
from salesboard.domain.statuses import (
    CanonicalStatus,
    PROTECTED_STORED_VALUES,
    normalize_status,
)
from salesboard.domain.transitions import (
    DirectAction,
    PlanKind,
    TransitionPlan,
    plan_transition,
)
from salesboard.models import (
    Account,
    ApprovalRequest,
    OriginalRelationship,
    Profile,
    RelationshipMap,
    Seller,
)
from salesboard.models.request import REQUEST_PENDING
from salesboard.services.accounts import get_account
from salesboard.services.sellers import get_seller


@dataclass
class TransitionContext:
    seller: Seller
    account: Account
    relationship: Optional[RelationshipMap]
    original: Optional[OriginalRelationship]
    protected_by_other: bool

    @property
    def current(self) -> Optional[CanonicalStatus]:
        return None if self.relationship is None else normalize_status(self.relationship.status)


@dataclass
class StatusChangeResult:
    plan: TransitionPlan
    relationship: Optional[RelationshipMap] = None
    request: Optional[ApprovalRequest] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def outcome(self) -> str:
        return "pending" if self.plan.kind is PlanKind.REQUEST else "applied"


async def load_context(session: AsyncSession, seller: Seller, account: Account) -> TransitionContext:
    relationship = (
        await session.execute(
            select(RelationshipMap).where(
                RelationshipMap.seller_id == seller.id,
                RelationshipMap.account_id == account.id,
            )
        )
    ).scalar_one_or_none()
    original = (
        await session.execute(
            select(OriginalRelationship).where(
                OriginalRelationship.seller_id == seller.id,
                OriginalRelationship.account_id == account.id,
            )
        )
    ).scalar_one_or_none()
    holder = (
        await session.execute(
            select(RelationshipMap.id)
            .where(
                RelationshipMap.account_id == account.id,
                RelationshipMap.seller_id != seller.id,
                RelationshipMap.status.in_(PROTECTED_STORED_VALUES),
            )
            .limit(1)
        )
    ).scalar_one_or_none()
    return TransitionContext(
        seller=seller,
        account=account,
        relationship=relationship,
        original=original,
        protected_by_other=holder is not None,
    )


def plan_for(caps: Capabilities, ctx: TransitionContext, target: CanonicalStatus) -> TransitionPlan:
    return plan_transition(
        caps,
        ctx.current,
        target,
        original_only=ctx.original is not None,
        protected_by_other=ctx.protected_by_other,
        account_name=ctx.account.name,
    )


async def ensure_no_pending_request(
    session: AsyncSession, seller: Seller, account: Account, plan: TransitionPlan
) -> None:
    pending = (
        await session.execute(
            select(ApprovalRequest.id)
            .where(
                ApprovalRequest.seller_id == seller.id,
                ApprovalRequest.account_id == account.id,
                ApprovalRequest.target_status == plan.target.value,
                ApprovalRequest.status == REQUEST_PENDING,
            )
            .limit(1)
        )
    ).scalar_one_or_none()
    if pending is not None:
        raise RequestAlreadyPendingError(
            f"A request to move {account.name} to {plan.target.value.replace('_', ' ')} "
            f"for {seller.name} is already pending"
        )


def audit_action_for(plan: TransitionPlan) -> str:
    if plan.target is CanonicalStatus.MUST_KEEP:
        return AuditAction.PIN
    if plan.current is CanonicalStatus.MUST_KEEP:
        return AuditAction.UNPIN
    return {
        DirectAction.ASSIGN: AuditAction.ASSIGN,
        DirectAction.UNASSIGN: AuditAction.UNASSIGN,
    }.get(plan.action, AuditAction.UPDATE)


def _set_pcts(relationship: RelationshipMap, pcts: Percentages) -> None:
    relationship.pct_esg = pcts.esg
    relationship.pct_gdt = pcts.gdt
    relationship.pct_gvc = pcts.gvc
    relationship.pct_msg_us = pcts.msg_us


async def apply_direct(
    session: AsyncSession,
    actor: Profile,
    ctx: TransitionContext,
    plan: TransitionPlan,
    pcts: Optional[Percentages] = None,
) -> RelationshipMap:
    """Upsert the single (seller, account) row; the caller commits."""

    relationship = ctx.relationship
    if relationship is None:
        relationship = RelationshipMap(
            seller_id=ctx.seller.id,
            account_id=ctx.account.id,
            status=plan.target.value,
            last_actor_user_id=actor.id,
        )
        _set_pcts(relationship, pcts or Percentages())
        session.add(relationship)
        try:
            await session.flush()
        except IntegrityError as exc:
            await session.rollback()
            raise_on_duplicate_relationship(exc)
        ctx.relationship = relationship
        return relationship

    relationship.status = plan.target.value
    relationship.last_actor_user_id = actor.id
    relationship.updated_at = datetime.now()
    if pcts is not None and not pcts.is_empty:
        _set_pcts(relationship, pcts)
    return relationship


async def change_status(
    session: AsyncSession,
    actor: Profile,
    seller_id: str,
    account_id: str,
    target: Union[str, CanonicalStatus],
    *,
    pcts: Optional[Percentages] = None,
    reason: Optional[str] = None,
    caps: Optional[Capabilities] = None,
    remote_addr: Optional[str] = None,
) -> StatusChangeResult:
    """Move ``account_id`` to ``target`` in ``seller_id``'s book.

    Returns the applied relationship, or the pending request when the
    actor's changes go through approval.
    """

    caps = caps or capabilities_for(actor.role)
    target_status = normalize_status(target)
    seller = await get_seller(session, seller_id)
    await ensure_can_manage_seller(session, actor, caps, seller)
    account = await get_account(session, account_id)

    ctx = await load_context(session, seller, account)
    plan = plan_for(caps, ctx, target_status)
    warnings = validate_percentages(pcts) if pcts is not None else []

    if plan.kind is PlanKind.REQUEST:
        await ensure_no_pending_request(session, seller, account, plan)
        requested = pcts or Percentages()
        request = ApprovalRequest(
            type=plan.request_type.value,
            requester_user_id=actor.id,
            seller_id=seller.id,
            account_id=account.id,
            target_status=plan.target.value,
            reason=reason,
            pct_esg=requested.esg,
            pct_gdt=requested.gdt,
            pct_gvc=requested.gvc,
            pct_msg_us=requested.msg_us,
        )
        session.add(request)
        await session.commit()
        logger.bind(
            approval_request_id=request.id,
            seller_id=seller.id,
            account_id=account.id,
            type=request.type,
        ).info("approval_request_created")
        await log_audit(
            session,
            actor.id,
            AuditAction.CREATE,
            AuditEntity.REQUEST,
            request.id,
            after={
                "type": request.type,
                "seller_id": seller.id,
                "account_id": account.id,
                "target_status": plan.target.value,
            },
            remote_addr=remote_addr,
        )
        return StatusChangeResult(plan=plan, request=request, warnings=warnings)

    relationship = await apply_direct(session, actor, ctx, plan, pcts)
    await session.commit()
    await after_direct_change(session, actor, ctx, plan, remote_addr=remote_addr)
    return StatusChangeResult(plan=plan, relationship=relationship, warnings=warnings)


async def after_direct_change(
    session: AsyncSession,
    actor: Profile,
    ctx: TransitionContext,
    plan: TransitionPlan,
    *,
    remote_addr: Optional[str] = None,
) -> None:
    logger.bind(
        seller_id=ctx.seller.id,
        account_id=ctx.account.id,
        before=plan.current.value if plan.current else None,
        after=plan.target.value,
        revenue_changed=plan.affects_revenue,
    ).info("relationship_status_changed")
    await log_audit(
        session,
        actor.id,
        audit_action_for(plan),
        AuditEntity.RELATIONSHIP,
        ctx.relationship.id if ctx.relationship else None,
        before={"status": plan.current.value if plan.current else None},
        after={"status": plan.target.value},
        remote_addr=remote_addr,
    )
    # cached KPIs carry column counts as well as revenue
    await invalidate_kpis()


async def delete_relationship(
    session: AsyncSession,
    actor: Profile,
    seller_id: str,
    account_id: str,
    *,
    caps: Optional[Capabilities] = None,
    remote_addr: Optional[str] = None,
) -> None:
    """Remove the live row; original accounts and foreign sellers are refused."""

    caps = caps or capabilities_for(actor.role)
    seller = await get_seller(session, seller_id)
    await ensure_can_manage_seller(session, actor, caps, seller)
    account = await get_account(session, account_id)
    ctx = await load_context(session, seller, account)

    if ctx.original is not None:
        raise ImmutableAccountError(
            f"{account.name} is an original account and cannot be unassigned"
        )
    if ctx.relationship is None:
        raise NotFoundError(f"{account.name} is not assigned to {seller.name}")

    relationship_id = ctx.relationship.id
    before = ctx.current
    await session.execute(delete(RelationshipMap).where(RelationshipMap.id == relationship_id))
    await session.commit()

    logger.bind(seller_id=seller.id, account_id=account.id).info("relationship_deleted")
    await log_audit(
        session,
        actor.id,
        AuditAction.DELETE,
        AuditEntity.RELATIONSHIP,
        relationship_id,
        before={"status": before.value if before else None},
        after=None,
        remote_addr=remote_addr,
    )
    await invalidate_kpis()
