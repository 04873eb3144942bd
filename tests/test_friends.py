from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.factories import auth


async def _send(client: AsyncClient, sender: str, user_id: int):
    return await client.post(
        "/me/friend-requests", json={"user_id": user_id}, headers=auth(sender)
    )


@pytest.mark.asyncio
async def test_request_accept_and_unfriend(app_client: AsyncClient, users):
    r = await _send(app_client, "alice@example.com", users["bob"].id)
    assert r.status_code == 201
    assert r.json() == {"user_id": users["bob"].id, "status": "pending"}

    bob = auth("bob@example.com")
    pending = await app_client.get("/me/friend-requests", headers=bob)
    assert [u["id"] for u in pending.json()] == [users["alice"].id]

    r = await app_client.post(f"/me/friend-requests/{users['alice'].id}/accept", headers=bob)
    assert r.status_code == 204

    for email, other in (("alice@example.com", "bob"), ("bob@example.com", "alice")):
        friends = await app_client.get("/me/friends", headers=auth(email))
        assert [u["id"] for u in friends.json()] == [users[other].id]
    assert (await app_client.get("/me/friend-requests", headers=bob)).json() == []

    # Unfriending is idempotent and works from either side
    for _ in range(2):
        r = await app_client.delete(f"/me/friends/{users['alice'].id}", headers=bob)
        assert r.status_code == 204
    assert (await app_client.get("/me/friends", headers=auth("alice@example.com"))).json() == []


@pytest.mark.asyncio
async def test_reject_removes_request(app_client: AsyncClient, users):
    await _send(app_client, "alice@example.com", users["bob"].id)
    bob = auth("bob@example.com")

    r = await app_client.post(f"/me/friend-requests/{users['alice'].id}/reject", headers=bob)
    assert r.status_code == 204
    assert (await app_client.get("/me/friend-requests", headers=bob)).json() == []
    assert (await app_client.get("/me/friends", headers=bob)).json() == []

    # Nothing left to accept; a fresh request is allowed again
    r = await app_client.post(f"/me/friend-requests/{users['alice'].id}/accept", headers=bob)
    assert r.status_code == 404
    assert (await _send(app_client, "alice@example.com", users["bob"].id)).status_code == 201


@pytest.mark.asyncio
async def test_reverse_request_is_accepted(app_client: AsyncClient, users):
    await _send(app_client, "alice@example.com", users["bob"].id)

    r = await _send(app_client, "bob@example.com", users["alice"].id)
    assert r.status_code == 201
    assert r.json()["status"] == "accepted"

    friends = await app_client.get("/me/friends", headers=auth("alice@example.com"))
    assert [u["id"] for u in friends.json()] == [users["bob"].id]


@pytest.mark.asyncio
async def test_invalid_requests(app_client: AsyncClient, users):
    alice_id = users["alice"].id
    r = await _send(app_client, "alice@example.com", alice_id)
    assert r.status_code == 400

    assert (await _send(app_client, "alice@example.com", 9999)).status_code == 404

    assert (await _send(app_client, "alice@example.com", users["bob"].id)).status_code == 201
    dup = await _send(app_client, "alice@example.com", users["bob"].id)
    assert dup.status_code == 409
    assert dup.json() == {"detail": "friend request already sent"}

    await app_client.post(
        f"/me/friend-requests/{alice_id}/accept", headers=auth("bob@example.com")
    )
    again = await _send(app_client, "bob@example.com", alice_id)
    assert again.status_code == 409
    assert again.json() == {"detail": "already friends"}


@pytest.mark.asyncio
async def test_requests_received_newest_first(app_client: AsyncClient, users):
    await _send(app_client, "bob@example.com", users["alice"].id)
    await _send(app_client, "carol@example.com", users["alice"].id)

    r = await app_client.get("/me/friend-requests", headers=auth("alice@example.com"))
    assert [u["id"] for u in r.json()] == [users["carol"].id, users["bob"].id]
    # Sent requests do not show up on the sender's side
    sent = await app_client.get("/me/friend-requests", headers=auth("bob@example.com"))
    assert sent.json() == []
