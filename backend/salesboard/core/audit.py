"""Audit logging utilities.

Entries are written in their own session and transaction so that a failed
audit insert can neither roll back nor block the business change it
describes. Failures are logged and dropped.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import Request
from loguru import logger
from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from salesboard.models.audit_log import AuditLog


class AuditAction:
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    PIN = "pin"
    UNPIN = "unpin"
    ASSIGN = "assign"
    UNASSIGN = "unassign"
    APPROVE = "approve"
    REJECT = "reject"
    LOGIN = "login"
    LOGOUT = "logout"
    SETTINGS_UPDATE = "settings_update"
    BOOK_FINALIZED = "book_finalized"
    BOOK_UNFINALIZED = "book_unfinalized"


class AuditEntity:
    SELLER = "seller"
    ACCOUNT = "account"
    RELATIONSHIP = "relationship"
    REQUEST = "request"
    SETTINGS = "settings"
    USER = "user"
    MANAGER = "manager"


def client_addr(request: Optional[Request]) -> Optional[str]:
    if request is None or request.client is None:
        return None
    return request.client.host


async def log_audit(
    session: AsyncSession,
    user_id: Optional[str],
    action: str,
    entity: str,
    entity_id: Optional[str],
    *,
    before: Optional[dict[str, Any]] = None,
    after: Optional[dict[str, Any]] = None,
    remote_addr: Optional[str] = None,
) -> bool:
    """Record one audit entry; returns ``False`` when the write failed."""

    payload = {
        "user_id": user_id,
        "action": action,
        "entity": entity,
        "entity_id": entity_id,
        "before": before,
        "after": after,
        "remote_addr": remote_addr,
    }
    audit_sessions = async_sessionmaker(bind=session.bind, expire_on_commit=False)
    try:
        async with audit_sessions() as audit_session:
            async with audit_session.begin():
                await audit_session.execute(insert(AuditLog).values(**payload))
    except (SQLAlchemyError, OSError) as exc:
        logger.bind(
            action=action, entity=entity, entity_id=entity_id, error=str(exc)
        ).warning("audit_log_failed")
        return False
    return True
