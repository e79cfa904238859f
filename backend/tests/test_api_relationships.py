import pytest

from salesboard.core.config import settings


def _change(seeded, account, status, **extra):
    return {"seller_id": seeded.seller_a.id, "account_id": account.id, "status": status, **extra}


@pytest.mark.anyio
async def test_status_change_accepts_legacy_names(client, seeded, headers_for):
    resp = await client.post(
        "/api/relationships/status",
        json=_change(seeded, seeded.free, "pinned", pct_esg=60, pct_gvc=40),
        headers=headers_for(seeded.admin),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["outcome"] == "applied"
    assert body["relationship"]["status"] == "must_keep"
    assert body["request"] is None
    assert body["warnings"] == []


@pytest.mark.anyio
async def test_status_change_rejections(client, seeded, headers_for):
    admin = headers_for(seeded.admin)

    unknown = await client.post(
        "/api/relationships/status", json=_change(seeded, seeded.free, "bogus"), headers=admin
    )
    original = await client.post(
        "/api/relationships/status",
        json=_change(seeded, seeded.original, "available"),
        headers=admin,
    )
    taken = await client.post(
        "/api/relationships/status",
        json=_change(seeded, seeded.held_by_b, "for_discussion"),
        headers=admin,
    )
    same = await client.post(
        "/api/relationships/status",
        json=_change(seeded, seeded.legacy, "must_keep"),
        headers=admin,
    )
    out_of_range = await client.post(
        "/api/relationships/status",
        json=_change(seeded, seeded.free, "must_keep", pct_esg=150),
        headers=admin,
    )

    assert unknown.status_code == 400
    assert unknown.json()["code"] == "validation_error"
    assert original.status_code == 409
    assert original.json()["code"] == "immutable_account"
    assert taken.status_code == 409
    assert taken.json()["code"] == "account_unavailable"
    assert same.status_code == 400
    assert same.json()["code"] == "no_op_transition"
    assert out_of_range.status_code == 422


@pytest.mark.anyio
async def test_manager_cannot_delete_foreign_relationship(client, seeded, headers_for):
    resp = await client.delete(
        f"/api/relationships/{seeded.seller_b.id}/{seeded.held_by_b.id}",
        headers=headers_for(seeded.mgr_a_user),
    )
    assert resp.status_code == 403
    assert resp.json()["detail"] == "You do not manage seller Bob Seller"


@pytest.mark.anyio
async def test_delete_relationship(client, seeded, headers_for):
    headers = headers_for(seeded.mgr_a_user)

    deleted = await client.delete(
        f"/api/relationships/{seeded.seller_a.id}/{seeded.legacy.id}", headers=headers
    )
    again = await client.delete(
        f"/api/relationships/{seeded.seller_a.id}/{seeded.legacy.id}", headers=headers
    )
    original = await client.delete(
        f"/api/relationships/{seeded.seller_a.id}/{seeded.original.id}", headers=headers
    )

    assert deleted.status_code == 204
    assert again.status_code == 404
    assert original.status_code == 409


@pytest.mark.anyio
async def test_request_round_trip_over_http(client, seeded, headers_for, monkeypatch):
    monkeypatch.setattr(settings, "MANAGER_CHANGES_REQUIRE_APPROVAL", True)
    manager = headers_for(seeded.mgr_a_user)
    admin = headers_for(seeded.admin)

    created = await client.post(
        "/api/relationships/status",
        json=_change(seeded, seeded.free, "for_discussion", reason="Adjacent territory"),
        headers=manager,
    )
    assert created.json()["outcome"] == "pending"
    request_id = created.json()["request"]["id"]

    listed = await client.get("/api/requests", params={"status": "pending"}, headers=manager)
    assert [r["id"] for r in listed.json()["items"]] == [request_id]

    forbidden = await client.post(f"/api/requests/{request_id}/approve", headers=manager)
    assert forbidden.status_code == 403

    approved = await client.post(f"/api/requests/{request_id}/approve", headers=admin)
    assert approved.json()["status"] == "approved"

    repeat = await client.post(f"/api/requests/{request_id}/reject", headers=admin)
    assert repeat.status_code == 409
    assert repeat.json()["code"] == "request_already_decided"

    book = await client.get(f"/api/sellers/{seeded.seller_a.id}/book", headers=manager)
    discussed = book.json()["columns"]["for_discussion"]["items"]
    assert [e["account"]["name"] for e in discussed] == ["Free Co"]


@pytest.mark.anyio
async def test_audit_trail_records_changes(client, seeded, headers_for):
    admin = headers_for(seeded.admin)
    await client.post(
        "/api/relationships/status",
        json=_change(seeded, seeded.legacy, "to_be_peeled"),
        headers=admin,
    )
    await client.post(
        "/api/relationships/status",
        json=_change(seeded, seeded.free, "for_discussion"),
        headers=admin,
    )

    logs = await client.get(
        "/api/audit", params={"entity": "relationship", "order": "asc"}, headers=admin
    )
    body = logs.json()
    assert body["total"] == 2
    assert [e["action"] for e in body["items"]] == ["unpin", "assign"]
    assert body["items"][0]["before"] == {"status": "must_keep"}

    stats = (await client.get("/api/audit/stats", headers=admin)).json()
    assert stats["total_logs"] == 2
    assert stats["logs_by_entity"] == {"relationship": 2}

    denied = await client.get("/api/audit", headers=headers_for(seeded.mgr_a_user))
    assert denied.status_code == 403
