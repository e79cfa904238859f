"""Role capabilities, resolved once per operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.config import Settings, settings as default_settings
from salesboard.core.errors import AuthorizationError
from salesboard.models import Manager, Profile, Seller
from salesboard.models.profile import ROLE_MANAGER, ROLE_MASTER


@dataclass(frozen=True)
class Capabilities:
    direct_mutate: bool
    requires_approval: bool
    manager_scope: bool


MASTER_CAPABILITIES = Capabilities(direct_mutate=True, requires_approval=False, manager_scope=False)


def capabilities_for(role: str, settings: Optional[Settings] = None) -> Capabilities:
    settings = settings or default_settings
    if role == ROLE_MASTER:
        return MASTER_CAPABILITIES
    if role == ROLE_MANAGER:
        approval = settings.MANAGER_CHANGES_REQUIRE_APPROVAL
        return Capabilities(direct_mutate=not approval, requires_approval=approval, manager_scope=True)
    raise AuthorizationError(f"Role {role!r} has no dashboard capabilities")


def require_master(user: Profile) -> None:
    if user.role != ROLE_MASTER:
        raise AuthorizationError("Only administrators can perform this action")


async def manager_for_user(session: AsyncSession, user_id: str) -> Optional[Manager]:
    return (
        await session.execute(select(Manager).where(Manager.user_id == user_id))
    ).scalar_one_or_none()


async def ensure_can_manage_seller(
    session: AsyncSession, user: Profile, caps: Capabilities, seller: Seller
) -> None:
    """Raise ``AuthorizationError`` when a scoped actor does not manage ``seller``."""

    if not caps.manager_scope:
        return
    manager = await manager_for_user(session, user.id)
    if manager is None or seller.manager_id != manager.id:
        raise AuthorizationError(f"You do not manage seller {seller.name}")
