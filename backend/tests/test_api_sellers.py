from decimal import Decimal

import pytest


@pytest.mark.anyio
async def test_managers_see_only_their_team(client, seeded, headers_for):
    mine = await client.get("/api/sellers", headers=headers_for(seeded.mgr_a_user))
    everyone = await client.get("/api/sellers", headers=headers_for(seeded.admin))
    foreign = await client.get(
        f"/api/sellers/{seeded.seller_b.id}", headers=headers_for(seeded.mgr_a_user)
    )

    assert [s["name"] for s in mine.json()["items"]] == ["Alice Seller"]
    assert mine.json()["items"][0]["is_senior"] is True
    assert everyone.json()["total"] == 2
    assert foreign.status_code == 403


@pytest.mark.anyio
async def test_seller_book_columns(client, seeded, headers_for):
    resp = await client.get(
        f"/api/sellers/{seeded.seller_a.id}/book", headers=headers_for(seeded.mgr_a_user)
    )

    assert resp.status_code == 200
    columns = resp.json()["columns"]
    assert set(columns) == {"original", "must_keep", "for_discussion", "to_be_peeled"}

    must_keep = columns["must_keep"]
    assert must_keep["total"] == 2
    assert [e["account"]["name"] for e in must_keep["items"]] == ["Acme Original", "Legacy Pinned"]
    # legacy: half of its ESG revenue, none of its GDT revenue
    assert Decimal(must_keep["items"][1]["value"]) == Decimal("500000")
    assert Decimal(must_keep["value"]) == Decimal("5500000")

    original = columns["original"]
    assert original["total"] == 1
    assert original["items"][0]["status"] == "must_keep"
    assert Decimal(original["value"]) == Decimal("5000000")

    assert columns["for_discussion"]["total"] == 0


@pytest.mark.anyio
async def test_candidates_skip_accounts_protected_elsewhere(client, seeded, headers_for):
    headers = headers_for(seeded.mgr_a_user)
    url = f"/api/sellers/{seeded.seller_a.id}/candidates"

    default = await client.get(url, params={"sort": "fit", "order": "desc"}, headers=headers)
    body = default.json()
    assert body["total"] == 3
    assert [(c["account"]["name"], c["fit_score"]) for c in body["items"]] == [
        ("Acme Original", 100),
        ("Free Co", 100),
        ("Legacy Pinned", 50),
    ]
    assert [c["status"] for c in body["items"]] == ["must_keep", None, "must_keep"]

    everything = await client.get(url, params={"include_restricted": True}, headers=headers)
    restricted = {c["account"]["name"]: c["restricted"] for c in everything.json()["items"]}
    assert restricted == {
        "Acme Original": False,
        "Bravo Retail": True,
        "Free Co": False,
        "Legacy Pinned": False,
    }

    available = await client.get(url, params={"available_only": True}, headers=headers)
    assert [c["account"]["name"] for c in available.json()["items"]] == ["Free Co"]


@pytest.mark.anyio
async def test_seller_kpis(client, seeded, headers_for):
    resp = await client.get(
        f"/api/sellers/{seeded.seller_a.id}/kpis", headers=headers_for(seeded.admin)
    )

    body = resp.json()
    assert Decimal(body["must_keep_value"]) == Decimal("5500000")
    assert Decimal(body["original_value"]) == Decimal("5000000")
    assert body["status_counts"]["must_keep"] == 2
    assert body["original_accounts"] == 1
    assert body["health"]["account_count"] == 2
    assert body["health"]["is_revenue_healthy"] is True
    assert body["health"]["size_mismatch"] == "enterprise_with_midmarket"


@pytest.mark.anyio
async def test_finalizing_a_book_refreshes_dashboard_kpis(client, seeded, headers_for):
    admin = headers_for(seeded.admin)

    before = (await client.get("/api/dashboard/kpis", headers=admin)).json()
    assert before["scope"] == "company"
    assert before["seller_count"] == 2
    assert before["finalized_count"] == 0
    assert before["status_counts"]["must_keep"] == 3

    resp = await client.put(
        f"/api/sellers/{seeded.seller_a.id}/finalized",
        json={"finalized": True},
        headers=headers_for(seeded.mgr_a_user),
    )
    assert resp.json()["book_finalized"] is True

    after = (await client.get("/api/dashboard/kpis", headers=admin)).json()
    assert after["finalized_count"] == 1


@pytest.mark.anyio
async def test_manager_dashboard_is_team_scoped(client, seeded, headers_for):
    body = (await client.get("/api/dashboard/kpis", headers=headers_for(seeded.mgr_b_user))).json()

    assert body["scope"] == "manager"
    assert body["manager_id"] == seeded.mgr_b.id
    assert body["seller_count"] == 1
    assert Decimal(body["must_keep_value"]) == Decimal("2000000")
