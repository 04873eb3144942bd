from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.factories import add_post, auth, origin_params


@pytest.mark.asyncio
async def test_comment_lifecycle(app_client: AsyncClient, session, users):
    post = await add_post(session, users["alice"], content="Yard sale Saturday")
    bob = auth("bob@example.com")

    first = await app_client.post(
        f"/posts/{post.id}/comments", json={"content": " What time? "}, headers=bob
    )
    assert first.status_code == 201, first.text
    assert first.json()["content"] == "What time?"
    assert first.json()["author"]["id"] == users["bob"].id

    second = await app_client.post(
        f"/posts/{post.id}/comments",
        json={"content": "8am!"},
        headers=auth("alice@example.com"),
    )
    assert second.status_code == 201

    listed = await app_client.get(f"/posts/{post.id}/comments", headers=bob)
    assert [c["id"] for c in listed.json()] == [second.json()["id"], first.json()["id"]]

    feed = await app_client.get("/posts/nearby", params=origin_params(), headers=bob)
    assert feed.json()["items"][0]["comment_count"] == 2

    # Only the author may delete
    forbidden = await app_client.delete(
        f"/comments/{first.json()['id']}", headers=auth("alice@example.com")
    )
    assert forbidden.status_code == 403
    deleted = await app_client.delete(f"/comments/{first.json()['id']}", headers=bob)
    assert deleted.status_code == 204
    missing = await app_client.delete(f"/comments/{first.json()['id']}", headers=bob)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_comments_on_missing_post(app_client: AsyncClient, users):
    bob = auth("bob@example.com")
    assert (await app_client.get("/posts/404/comments", headers=bob)).status_code == 404
    r = await app_client.post("/posts/404/comments", json={"content": "hi"}, headers=bob)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_deleting_post_removes_its_comments(app_client: AsyncClient, session, users):
    post = await add_post(session, users["alice"], content="soon gone")
    alice = auth("alice@example.com")
    await app_client.post(f"/posts/{post.id}/comments", json={"content": "x"}, headers=alice)

    assert (await app_client.delete(f"/posts/{post.id}", headers=alice)).status_code == 204
    assert (await app_client.get(f"/posts/{post.id}/comments", headers=alice)).status_code == 404


@pytest.mark.asyncio
async def test_whitespace_only_comment_is_rejected(app_client: AsyncClient, session, users):
    post = await add_post(session, users["alice"], content="Yard sale Saturday")
    bob = auth("bob@example.com")

    r = await app_client.post(f"/posts/{post.id}/comments", json={"content": "   "}, headers=bob)
    assert r.status_code == 422

    listed = await app_client.get(f"/posts/{post.id}/comments", headers=bob)
    assert listed.json() == []
