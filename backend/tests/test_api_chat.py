import pytest


@pytest.mark.anyio
async def test_chat_thread_lifecycle(client, seeded, headers_for):
    manager = headers_for(seeded.mgr_a_user)
    admin = headers_for(seeded.admin)
    url = f"/api/sellers/{seeded.seller_a.id}/chat"

    posted = await client.post(url, json={"content": "  Can we peel Legacy?  "}, headers=manager)
    assert posted.status_code == 201
    message = posted.json()
    assert message["content"] == "Can we peel Legacy?"
    assert message["role"] == "manager"
    assert message["user_name"] == "Mara Manager"

    reply = await client.post(url, json={"content": "Yes, next quarter."}, headers=admin)
    assert reply.json()["role"] == "admin"

    thread = (await client.get(url, headers=manager)).json()
    assert [m["content"] for m in thread] == ["Can we peel Legacy?", "Yes, next quarter."]

    stats = (await client.get(f"{url}/stats", headers=admin)).json()
    assert stats["total_messages"] == 2
    assert stats["unique_users"] == 2

    edited = await client.patch(
        f"/api/chat/{message['id']}", json={"content": "Can we peel Legacy Pinned?"}, headers=manager
    )
    assert edited.json()["content"] == "Can we peel Legacy Pinned?"

    not_author = await client.delete(f"/api/chat/{reply.json()['id']}", headers=manager)
    assert not_author.status_code == 403

    removed = await client.delete(f"/api/chat/{message['id']}", headers=admin)
    assert removed.status_code == 204
    assert len((await client.get(url, headers=manager)).json()) == 1


@pytest.mark.anyio
async def test_chat_is_scoped_to_managed_sellers(client, seeded, headers_for):
    resp = await client.post(
        f"/api/sellers/{seeded.seller_b.id}/chat",
        json={"content": "hello"},
        headers=headers_for(seeded.mgr_a_user),
    )
    assert resp.status_code == 403


@pytest.mark.anyio
async def test_blank_messages_are_rejected(client, seeded, headers_for):
    resp = await client.post(
        f"/api/sellers/{seeded.seller_a.id}/chat",
        json={"content": "   "},
        headers=headers_for(seeded.admin),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Message content cannot be empty"
