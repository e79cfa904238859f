import pytest

from salesboard.core.config import settings
from salesboard.core.errors import (
    AccountUnavailableError,
    AuthorizationError,
    ImmutableAccountError,
    NoOpTransitionError,
)
from salesboard.core.permissions import MASTER_CAPABILITIES, capabilities_for
from salesboard.domain.statuses import CanonicalStatus
from salesboard.domain.transitions import (
    DirectAction,
    PlanKind,
    RequestType,
    affects_revenue,
    plan_transition,
)

APPROVAL = capabilities_for("MANAGER", settings.model_copy(update={"MANAGER_CHANGES_REQUIRE_APPROVAL": True}))
DIRECT_MANAGER = capabilities_for("MANAGER", settings.model_copy(update={"MANAGER_CHANGES_REQUIRE_APPROVAL": False}))


def test_master_capabilities():
    caps = capabilities_for("MASTER")
    assert caps.direct_mutate and not caps.requires_approval and not caps.manager_scope


def test_manager_capabilities_follow_setting():
    assert DIRECT_MANAGER.manager_scope and DIRECT_MANAGER.direct_mutate
    assert not DIRECT_MANAGER.requires_approval
    assert APPROVAL.manager_scope and APPROVAL.requires_approval
    assert not APPROVAL.direct_mutate


def test_unknown_role_has_no_capabilities():
    with pytest.raises(AuthorizationError):
        capabilities_for("GUEST")


@pytest.mark.parametrize("caps", [MASTER_CAPABILITIES, DIRECT_MANAGER, APPROVAL])
@pytest.mark.parametrize("current", ["must_keep", "for_discussion", "to_be_peeled", "pinned"])
def test_original_account_cannot_be_unassigned(caps, current):
    with pytest.raises(ImmutableAccountError) as ctx:
        plan_transition(caps, current, "available", original_only=True, account_name="Acme")
    assert ctx.value.status_code == 409
    assert "original account" in ctx.value.detail


def test_original_account_can_move_between_columns():
    plan = plan_transition(MASTER_CAPABILITIES, "must_keep", "to_be_peeled", original_only=True)
    assert plan.kind is PlanKind.DIRECT
    assert plan.action is DirectAction.UPDATE


def test_account_protected_elsewhere_is_unavailable():
    with pytest.raises(AccountUnavailableError):
        plan_transition(MASTER_CAPABILITIES, None, "must_keep", protected_by_other=True)


def test_reclaiming_an_available_row_held_elsewhere_is_blocked():
    with pytest.raises(AccountUnavailableError):
        plan_transition(MASTER_CAPABILITIES, "available", "for_discussion", protected_by_other=True)


def test_holder_moves_between_protected_columns_even_if_held_elsewhere():
    plan = plan_transition(MASTER_CAPABILITIES, "assigned", "to_be_peeled", protected_by_other=True)
    assert plan.current is CanonicalStatus.FOR_DISCUSSION
    assert plan.action is DirectAction.UPDATE


def test_dropping_to_available_is_allowed_even_if_held_elsewhere():
    plan = plan_transition(MASTER_CAPABILITIES, "for_discussion", "available", protected_by_other=True)
    assert plan.action is DirectAction.UNASSIGN


@pytest.mark.parametrize("current, target", [("pinned", "must_keep"), (None, "available"), ("available", "available")])
def test_no_op_transitions_are_rejected(current, target):
    with pytest.raises(NoOpTransitionError) as ctx:
        plan_transition(MASTER_CAPABILITIES, current, target)
    assert ctx.value.status_code == 400


@pytest.mark.parametrize(
    "current, target, action",
    [
        (None, "must_keep", DirectAction.ASSIGN),
        ("available", "for_discussion", DirectAction.ASSIGN),
        ("for_discussion", "available", DirectAction.UNASSIGN),
        ("assigned", "to_be_peeled", DirectAction.UPDATE),
    ],
)
def test_direct_actions(current, target, action):
    plan = plan_transition(DIRECT_MANAGER, current, target)
    assert plan.kind is PlanKind.DIRECT
    assert plan.action is action
    assert plan.request_type is None


@pytest.mark.parametrize(
    "current, target, request_type",
    [
        (None, "must_keep", RequestType.PIN),
        ("available", "for_discussion", RequestType.ASSIGN),
        ("must_keep", "to_be_peeled", RequestType.ASSIGN),
        ("must_keep", "available", RequestType.UNASSIGN),
    ],
)
def test_approval_actors_get_requests(current, target, request_type):
    plan = plan_transition(APPROVAL, current, target)
    assert plan.kind is PlanKind.REQUEST
    assert plan.request_type is request_type
    assert plan.target is CanonicalStatus(target)


def test_affects_revenue_only_around_must_keep():
    assert affects_revenue(CanonicalStatus.MUST_KEEP, CanonicalStatus.FOR_DISCUSSION)
    assert affects_revenue(None, CanonicalStatus.MUST_KEEP)
    assert not affects_revenue(CanonicalStatus.FOR_DISCUSSION, CanonicalStatus.TO_BE_PEELED)
    plan = plan_transition(MASTER_CAPABILITIES, "pinned", "for_discussion")
    assert plan.affects_revenue
