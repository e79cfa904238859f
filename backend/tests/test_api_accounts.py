from decimal import Decimal

import pytest
from sqlalchemy import text


@pytest.mark.anyio
async def test_account_listing_filters_and_sorts(client, seeded, headers_for):
    headers = headers_for(seeded.mgr_a_user)

    by_revenue = await client.get(
        "/api/accounts", params={"sort": "revenue", "order": "desc"}, headers=headers
    )
    assert by_revenue.status_code == 200
    body = by_revenue.json()
    assert body["total"] == 4
    assert [a["name"] for a in body["items"]] == [
        "Acme Original",
        "Bravo Retail",
        "Legacy Pinned",
        "Free Co",
    ]
    assert Decimal(body["items"][0]["revenue"]["total"]) == Decimal("5000000")

    filtered = await client.get(
        "/api/accounts", params={"state": "NY", "q": "free"}, headers=headers
    )
    assert [a["name"] for a in filtered.json()["items"]] == ["Free Co"]


@pytest.mark.anyio
async def test_account_listing_pages(client, seeded, headers_for):
    resp = await client.get(
        "/api/accounts",
        params={"page": 2, "page_size": 3},
        headers=headers_for(seeded.admin),
    )
    body = resp.json()
    assert body["total"] == 4
    assert body["page"] == 2
    assert [a["name"] for a in body["items"]] == ["Legacy Pinned"]


@pytest.mark.anyio
async def test_filter_options_and_lookup(client, seeded, headers_for):
    headers = headers_for(seeded.admin)

    options = (await client.get("/api/accounts/filters", headers=headers)).json()
    assert options["divisions"] == ["ESG", "GVC"]
    assert options["states"] == ["CA", "NJ", "NY"]

    found = await client.get(f"/api/accounts/{seeded.free.id}", headers=headers)
    assert found.json()["name"] == "Free Co"

    missing = await client.get("/api/accounts/nope", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"


@pytest.mark.anyio
async def test_store_failure_is_reported_as_retryable(client, seeded, headers_for, engine):
    headers = headers_for(seeded.admin)
    async with engine.begin() as conn:
        await conn.execute(text("DROP TABLE account_revenues"))

    resp = await client.get("/api/accounts", headers=headers)

    assert resp.status_code == 503
    assert resp.json()["code"] == "transient_failure"
