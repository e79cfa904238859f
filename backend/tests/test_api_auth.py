import pytest
from sqlalchemy import select

from salesboard.core.security import create_access_token
from salesboard.models import AuditLog


@pytest.mark.anyio
async def test_login_returns_access_token_and_profile(client, seeded, session_factory, password):
    resp = await client.post(
        "/api/auth/login", json={"email": " Admin@Example.com ", "password": password}
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "MASTER"
    assert body["user"]["last_login_at"] is not None

    me = await client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}
    )
    assert me.status_code == 200
    assert me.json()["email"] == "admin@example.com"

    async with session_factory() as s:
        actions = (await s.execute(select(AuditLog.action))).scalars().all()
    assert actions == ["login"]


@pytest.mark.anyio
async def test_login_rejects_bad_password(client, seeded):
    resp = await client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": "wrong"}
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"


@pytest.mark.anyio
async def test_protected_routes_require_a_valid_access_token(client, seeded):
    missing = await client.get("/api/auth/me")
    garbage = await client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
    wrong_type = await client.get(
        "/api/auth/me",
        headers={
            "Authorization": "Bearer "
            + create_access_token({"sub": seeded.admin.id, "type": "refresh"})
        },
    )

    assert missing.status_code == 401
    assert garbage.json()["detail"] == "Invalid token"
    assert wrong_type.json()["detail"] == "Invalid token type"


@pytest.mark.anyio
async def test_health_probes(client, seeded):
    assert (await client.get("/api/healthz")).json() == {"status": "ok"}
    assert (await client.get("/api/readyz")).json() == {"ready": True}
