"""Planning of relationship status changes.

``plan_transition`` is pure: given who is acting and what the relationship
looks like, it either raises the domain error that blocks the change or
describes what should be written.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from salesboard.core.errors import (
    AccountUnavailableError,
    ImmutableAccountError,
    NoOpTransitionError,
)
from salesboard.core.permissions import Capabilities
from salesboard.domain.statuses import CanonicalStatus, normalize_status


class PlanKind(str, Enum):
    DIRECT = "direct"
    REQUEST = "request"


class DirectAction(str, Enum):
    ASSIGN = "assign"
    UNASSIGN = "unassign"
    UPDATE = "update"


class RequestType(str, Enum):
    PIN = "pin"
    ASSIGN = "assign"
    UNASSIGN = "unassign"


@dataclass(frozen=True)
class TransitionPlan:
    kind: PlanKind
    current: Optional[CanonicalStatus]
    target: CanonicalStatus
    action: Optional[DirectAction] = None
    request_type: Optional[RequestType] = None

    @property
    def affects_revenue(self) -> bool:
        return affects_revenue(self.current, self.target)


def affects_revenue(
    current: Optional[CanonicalStatus], target: Optional[CanonicalStatus]
) -> bool:
    return CanonicalStatus.MUST_KEEP in (current, target)


def request_type_for(target: CanonicalStatus) -> RequestType:
    if target is CanonicalStatus.AVAILABLE:
        return RequestType.UNASSIGN
    if target is CanonicalStatus.MUST_KEEP:
        return RequestType.PIN
    return RequestType.ASSIGN


def direct_action_for(
    current: Optional[CanonicalStatus], target: CanonicalStatus
) -> DirectAction:
    if target is CanonicalStatus.AVAILABLE:
        return DirectAction.UNASSIGN
    if current is None or current is CanonicalStatus.AVAILABLE:
        return DirectAction.ASSIGN
    return DirectAction.UPDATE


def plan_transition(
    capabilities: Capabilities,
    current: Optional[Union[str, CanonicalStatus]],
    target: Union[str, CanonicalStatus],
    *,
    original_only: bool = False,
    protected_by_other: bool = False,
    account_name: str = "This account",
) -> TransitionPlan:
    """Decide how ``current -> target`` happens for an actor with ``capabilities``.

    ``current`` is ``None`` when no relationship row exists yet.
    ``original_only`` marks an account backed by the seller's original
    snapshot, which may move between columns but never become available.
    ``protected_by_other`` marks an account another seller holds in a
    protected column; it only blocks a new claim, never a move between
    columns the acting seller already holds.
    """

    current_status = None if current is None else normalize_status(current)
    target_status = normalize_status(target)

    if target_status is CanonicalStatus.AVAILABLE and original_only:
        raise ImmutableAccountError(
            f"{account_name} is an original account and cannot be unassigned"
        )
    claiming = current_status is None or current_status is CanonicalStatus.AVAILABLE
    if target_status is not CanonicalStatus.AVAILABLE and claiming and protected_by_other:
        raise AccountUnavailableError(
            f"{account_name} is already protected for another seller"
        )
    if current_status is target_status or (
        current_status is None and target_status is CanonicalStatus.AVAILABLE
    ):
        raise NoOpTransitionError(
            f"{account_name} is already {target_status.value.replace('_', ' ')}"
        )

    if capabilities.requires_approval:
        return TransitionPlan(
            kind=PlanKind.REQUEST,
            current=current_status,
            target=target_status,
            request_type=request_type_for(target_status),
        )
    return TransitionPlan(
        kind=PlanKind.DIRECT,
        current=current_status,
        target=target_status,
        action=direct_action_for(current_status, target_status),
    )
