"""Audit logging and KPI caching never decide whether a change succeeds."""

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError

from salesboard.core import cache
from salesboard.core.audit import log_audit
from salesboard.core.db_errors import raise_on_duplicate_relationship
from salesboard.core.errors import DuplicateRelationshipError
from salesboard.models import RelationshipMap
from salesboard.services import kpis, relationships


class DummyOrig(Exception):
    pass


def _integrity_error(code, message):
    return IntegrityError("INSERT INTO relationship_map ...", {}, DummyOrig(code, message))


def test_mysql_duplicate_entry_maps_to_domain_error():
    with pytest.raises(DuplicateRelationshipError):
        raise_on_duplicate_relationship(_integrity_error(1062, "Duplicate entry 'x-y'"))


def test_other_integrity_errors_are_reraised():
    exc = _integrity_error(1452, "Cannot add or update a child row: a foreign key constraint fails")
    with pytest.raises(IntegrityError):
        raise_on_duplicate_relationship(exc)


@pytest.mark.anyio
async def test_failed_audit_write_does_not_block_the_change(session, seeded, engine):
    async with engine.begin() as conn:
        await conn.execute(text("DROP TABLE audit_logs"))

    assert await log_audit(session, seeded.admin.id, "pin", "relationship", "x") is False

    result = await relationships.change_status(
        session, seeded.admin, seeded.seller_a.id, seeded.free.id, "must_keep"
    )
    assert result.outcome == "applied"
    stored = (
        await session.execute(
            select(RelationshipMap.status).where(RelationshipMap.account_id == seeded.free.id)
        )
    ).scalar_one()
    assert stored == "must_keep"


@pytest.mark.anyio
async def test_memory_cache_round_trip_and_invalidation(anyio_backend):
    key = cache.kpi_cache_key("seller", seller_id="s-1")
    await cache.set_cache(key, {"book_value": "10.00"})
    await cache.set_cache("other:1", {"keep": True})

    assert await cache.get_cache(key) == {"book_value": "10.00"}
    assert await cache.invalidate_kpis() == 1
    assert await cache.get_cache(key) is None
    assert await cache.get_cache("other:1") == {"keep": True}


@pytest.mark.anyio
async def test_expired_entries_are_dropped(anyio_backend):
    cache._memory_cache["kpi:company"] = ({"seller_count": 1}, 1.0)

    assert await cache.get_cache("kpi:company") is None


@pytest.mark.anyio
async def test_status_changes_invalidate_cached_kpis(session, seeded):
    first = await kpis.seller_kpis(session, seeded.seller_a)
    assert first.status_counts["for_discussion"] == 0

    await relationships.change_status(
        session, seeded.admin, seeded.seller_a.id, seeded.free.id, "for_discussion"
    )

    second = await kpis.seller_kpis(session, seeded.seller_a)
    assert second.status_counts["for_discussion"] == 1
    assert second.must_keep_value == first.must_keep_value
