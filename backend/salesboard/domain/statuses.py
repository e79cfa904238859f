"""Relationship status vocabulary.

Stored data mixes the legacy vocabulary (pinned, assigned, peeled, ...) with
the current kanban columns. Everything past the read boundary works on the
four canonical values only; ``normalize_status`` is the single place where
the two vocabularies meet.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Union

from salesboard.core.errors import ValidationError


class RelationshipStatus(str, Enum):
    """Every value that may appear in ``relationship_maps.status``."""

    AVAILABLE = "available"
    MUST_KEEP = "must_keep"
    FOR_DISCUSSION = "for_discussion"
    TO_BE_PEELED = "to_be_peeled"
    PINNED = "pinned"
    ASSIGNED = "assigned"
    UP_FOR_DEBATE = "up_for_debate"
    APPROVAL_FOR_PINNING = "approval_for_pinning"
    APPROVAL_FOR_ASSIGNING = "approval_for_assigning"
    PEELED = "peeled"


class CanonicalStatus(str, Enum):
    """The kanban columns internal logic reasons about."""

    AVAILABLE = "available"
    MUST_KEEP = "must_keep"
    FOR_DISCUSSION = "for_discussion"
    TO_BE_PEELED = "to_be_peeled"


STATUS_ALIASES: dict[RelationshipStatus, CanonicalStatus] = {
    RelationshipStatus.AVAILABLE: CanonicalStatus.AVAILABLE,
    RelationshipStatus.MUST_KEEP: CanonicalStatus.MUST_KEEP,
    RelationshipStatus.PINNED: CanonicalStatus.MUST_KEEP,
    RelationshipStatus.APPROVAL_FOR_PINNING: CanonicalStatus.MUST_KEEP,
    RelationshipStatus.FOR_DISCUSSION: CanonicalStatus.FOR_DISCUSSION,
    RelationshipStatus.ASSIGNED: CanonicalStatus.FOR_DISCUSSION,
    RelationshipStatus.UP_FOR_DEBATE: CanonicalStatus.FOR_DISCUSSION,
    RelationshipStatus.APPROVAL_FOR_ASSIGNING: CanonicalStatus.FOR_DISCUSSION,
    RelationshipStatus.TO_BE_PEELED: CanonicalStatus.TO_BE_PEELED,
    RelationshipStatus.PEELED: CanonicalStatus.TO_BE_PEELED,
}

PROTECTED_STATUSES = frozenset(
    {CanonicalStatus.MUST_KEEP, CanonicalStatus.FOR_DISCUSSION, CanonicalStatus.TO_BE_PEELED}
)


def stored_values_for(canonical: CanonicalStatus) -> list[str]:
    """All stored spellings that normalise to ``canonical`` (for SQL ``IN``)."""

    return sorted(raw.value for raw, canon in STATUS_ALIASES.items() if canon is canonical)


def stored_values_for_many(canonicals: Iterable[CanonicalStatus]) -> list[str]:
    values: set[str] = set()
    for canonical in canonicals:
        values.update(stored_values_for(canonical))
    return sorted(values)


PROTECTED_STORED_VALUES = stored_values_for_many(PROTECTED_STATUSES)
MUST_KEEP_STORED_VALUES = stored_values_for(CanonicalStatus.MUST_KEEP)


def normalize_status(value: Union[str, RelationshipStatus, CanonicalStatus]) -> CanonicalStatus:
    """Map any stored or canonical status onto its canonical column."""

    if isinstance(value, CanonicalStatus):
        return value
    try:
        raw = RelationshipStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown relationship status: {value!r}") from None
    return STATUS_ALIASES[raw]


def normalize_optional(value: Optional[str]) -> Optional[CanonicalStatus]:
    return None if value is None else normalize_status(value)


def is_protected(value: Optional[Union[str, CanonicalStatus]]) -> bool:
    return value is not None and normalize_status(value) in PROTECTED_STATUSES


def is_must_keep(value: Optional[Union[str, CanonicalStatus]]) -> bool:
    return value is not None and normalize_status(value) is CanonicalStatus.MUST_KEEP


def display_label(value: Union[str, CanonicalStatus]) -> str:
    return normalize_status(value).value.replace("_", " ").title()
