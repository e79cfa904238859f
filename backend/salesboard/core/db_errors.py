"""Shared helpers for database error handling."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from salesboard.core.errors import DuplicateRelationshipError

UNIQUE_VIOLATION_CODES = {1062}  # MySQL ER_DUP_ENTRY
UNIQUE_VIOLATION_MARKERS = ("duplicate entry", "unique constraint failed", "unique violation")


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    code = None
    if orig and getattr(orig, "args", None):
        try:
            code = int(orig.args[0])
        except (TypeError, ValueError):
            code = None
    message = str(getattr(exc, "orig", exc)).lower()
    return code in UNIQUE_VIOLATION_CODES or any(m in message for m in UNIQUE_VIOLATION_MARKERS)


def raise_on_duplicate_relationship(exc: IntegrityError) -> None:
    """Translate a (seller, account) uniqueness clash into a domain error."""

    if _is_unique_violation(exc):
        raise DuplicateRelationshipError(
            "A relationship between this seller and account already exists."
        ) from exc
    raise exc
