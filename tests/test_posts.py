from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.factories import FAR, NEAR, ORIGIN, add_post, auth, origin_params


@pytest.mark.asyncio
async def test_create_post_and_see_it_nearby(app_client: AsyncClient, users):
    headers = auth("alice@example.com")
    r = await app_client.post(
        "/posts",
        json={
            "content": "  Found a grey cat on Elm St  ",
            "category": "lost_found_pets",
            "image_url": "https://cdn.example.com/cat.jpg",
            "latitude": NEAR[0],
            "longitude": NEAR[1],
        },
        headers=headers,
    )
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["content"] == "Found a grey cat on Elm St"
    assert created["author"]["full_name"] == "Alice"
    assert created["created_at"] is not None

    r = await app_client.get("/posts/nearby", params=origin_params(), headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["radius_miles"] == 5.0
    [item] = body["items"]
    assert item["id"] == created["id"]
    assert item["distance_miles"] == pytest.approx(0.069, abs=0.001)
    assert item["like_count"] == 0 and item["comment_count"] == 0
    assert item["liked_by_me"] is False


@pytest.mark.asyncio
async def test_create_post_unknown_category_and_bad_coordinates(app_client: AsyncClient, users):
    headers = auth("alice@example.com")
    r = await app_client.post(
        "/posts",
        json={"content": "hi", "category": "knitting", "latitude": 0, "longitude": 0},
        headers=headers,
    )
    assert r.status_code == 404
    r = await app_client.post(
        "/posts",
        json={"content": "hi", "latitude": 0, "longitude": 200},
        headers=headers,
    )
    assert r.status_code == 422
    r = await app_client.post(
        "/posts", json={"content": "", "latitude": 0, "longitude": 0}, headers=headers
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_nearby_filters_radius_orders_newest_first_and_by_category(
    app_client: AsyncClient, session, users
):
    alice = users["alice"]
    old = await add_post(session, alice, content="old", age_minutes=30, category="garage_sales")
    new = await add_post(session, alice, content="new", age_minutes=1, at=NEAR)
    await add_post(session, alice, content="far away", at=FAR)

    r = await app_client.get(
        "/posts/nearby", params=origin_params(), headers=auth("bob@example.com")
    )
    assert [p["id"] for p in r.json()["items"]] == [new.id, old.id]

    r = await app_client.get(
        "/posts/nearby",
        params={**origin_params(), "category": "garage_sales"},
        headers=auth("bob@example.com"),
    )
    assert [p["id"] for p in r.json()["items"]] == [old.id]

    r = await app_client.get(
        "/posts/nearby",
        params={**origin_params(), "category": "nope"},
        headers=auth("bob@example.com"),
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_nearby_requires_valid_origin(app_client: AsyncClient, users):
    headers = auth("bob@example.com")
    assert (await app_client.get("/posts/nearby", headers=headers)).status_code == 422
    r = await app_client.get("/posts/nearby", params={"lat": 100, "lng": 0}, headers=headers)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_only_latest_hundred_posts_are_considered(app_client: AsyncClient, session, users):
    alice = users["alice"]
    oldest = await add_post(session, alice, content="oldest", age_minutes=500)
    for i in range(100):
        await add_post(session, alice, content=f"post {i}", age_minutes=i)

    r = await app_client.get(
        "/posts/nearby", params=origin_params(), headers=auth("bob@example.com")
    )
    ids = [p["id"] for p in r.json()["items"]]
    assert len(ids) == 100
    assert oldest.id not in ids


@pytest.mark.asyncio
async def test_clusters_group_close_posts(app_client: AsyncClient, session, users):
    alice = users["alice"]
    a = await add_post(session, alice, content="a", at=ORIGIN, age_minutes=3)
    b = await add_post(session, alice, content="b", at=(40.0005, -75.0), age_minutes=2)
    c = await add_post(session, alice, content="c", at=(40.02, -75.0), age_minutes=1)

    r = await app_client.get(
        "/posts/clusters", params=origin_params(), headers=auth("alice@example.com")
    )
    assert r.status_code == 200
    body = r.json()
    assert body["merge_radius_miles"] == 0.1
    groups = [[p["id"] for p in cl["posts"]] for cl in body["clusters"]]
    # newest first: c seeds alone, then b pulls in a
    assert groups == [[c.id], [b.id, a.id]]
    pair = body["clusters"][1]
    assert pair["count"] == 2
    assert pair["latitude"] == pytest.approx((40.0 + 40.0005) / 2)


@pytest.mark.asyncio
async def test_like_toggle_and_counts(app_client: AsyncClient, session, users):
    post = await add_post(session, users["alice"], content="like me")
    bob = auth("bob@example.com")

    r = await app_client.post(f"/posts/{post.id}/like", headers=bob)
    assert r.json() == {"post_id": post.id, "liked": True, "like_count": 1}

    r = await app_client.get("/posts/nearby", params=origin_params(), headers=bob)
    item = r.json()["items"][0]
    assert item["like_count"] == 1 and item["liked_by_me"] is True

    alice = auth("alice@example.com")
    r = await app_client.get("/posts/nearby", params=origin_params(), headers=alice)
    assert r.json()["items"][0]["liked_by_me"] is False

    r = await app_client.post(f"/posts/{post.id}/like", headers=bob)
    assert r.json() == {"post_id": post.id, "liked": False, "like_count": 0}

    assert (await app_client.post("/posts/9999/like", headers=bob)).status_code == 404


@pytest.mark.asyncio
async def test_delete_post_author_only(app_client: AsyncClient, session, users):
    post = await add_post(session, users["alice"], content="mine")

    r = await app_client.delete(f"/posts/{post.id}", headers=auth("bob@example.com"))
    assert r.status_code == 403

    r = await app_client.delete(f"/posts/{post.id}", headers=auth("alice@example.com"))
    assert r.status_code == 204

    r = await app_client.delete(f"/posts/{post.id}", headers=auth("alice@example.com"))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_whitespace_only_post_is_rejected(app_client: AsyncClient, users):
    headers = auth("alice@example.com")
    r = await app_client.post(
        "/posts",
        json={"content": "  \n ", "latitude": ORIGIN[0], "longitude": ORIGIN[1]},
        headers=headers,
    )
    assert r.status_code == 422

    feed = await app_client.get("/posts/nearby", params=origin_params(), headers=headers)
    assert feed.json()["items"] == []
