from __future__ import annotations

import pytest
from httpx import AsyncClient

from proximity.api import deps
from proximity.services.summary import build_summary_prompt
from tests.factories import FAR, FakeLLM, add_post, auth, origin_params


@pytest.fixture
def llm(app) -> FakeLLM:
    fake = FakeLLM(text="Bargains everywhere this weekend.")
    app.dependency_overrides[deps.get_llm_client] = lambda: fake
    return fake


def test_prompt_uses_label_and_first_five_posts() -> None:
    prompt = build_summary_prompt("Garage Sales", [f"post {i}" for i in range(8)])
    assert '"Garage Sales" category' in prompt
    assert "post 4" in prompt
    assert "post 5" not in prompt


@pytest.mark.asyncio
async def test_no_interests_means_no_categories(app_client: AsyncClient, users, llm):
    r = await app_client.get("/summary", params=origin_params(), headers=auth("bob@example.com"))
    assert r.status_code == 200
    assert r.json() == {"categories": []}
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_summary_per_interest_in_interest_order(
    app_client: AsyncClient, session, users, llm
):
    bob = users["bob"]
    for i in range(7):
        await add_post(session, bob, content=f"sale {i}", category="garage_sales", age_minutes=i)
    await add_post(session, bob, content="far sale", category="garage_sales", at=FAR)
    await add_post(session, bob, content="just chatting", category="casual_chats")

    r = await app_client.get("/summary", params=origin_params(), headers=auth("alice@example.com"))
    assert r.status_code == 200
    sales, pets = r.json()["categories"]

    assert sales["category"] == "garage_sales"
    assert sales["label"] == "Garage Sales"
    assert sales["post_count"] == 7
    assert sales["summary"] == "Bargains everywhere this weekend."
    assert [p["content"] for p in sales["posts"]][:2] == ["sale 0", "sale 1"]

    # Nothing nearby for this interest: no LLM call, null summary
    assert pets == {
        "category": "lost_found_pets",
        "label": "Lost & Found Pets",
        "post_count": 0,
        "summary": None,
        "posts": [],
    }

    [prompt] = llm.prompts
    assert "sale 4" in prompt and "sale 5" not in prompt
    assert "far sale" not in prompt


@pytest.mark.asyncio
async def test_failing_category_does_not_break_digest(
    app_client: AsyncClient, session, users, llm
):
    bob = users["bob"]
    await add_post(session, bob, content="yard sale", category="garage_sales")
    await add_post(session, bob, content="lost tabby", category="lost_found_pets")
    llm.fail_on = lambda prompt: "Garage Sales" in prompt

    r = await app_client.get("/summary", params=origin_params(), headers=auth("alice@example.com"))
    assert r.status_code == 200
    sales, pets = r.json()["categories"]
    assert sales["summary"] is None and sales["post_count"] == 1
    assert pets["summary"] == "Bargains everywhere this weekend."


@pytest.mark.asyncio
async def test_without_llm_summaries_are_null(app_client: AsyncClient, session, users):
    await add_post(session, users["bob"], content="yard sale", category="garage_sales")

    r = await app_client.get("/summary", params=origin_params(), headers=auth("alice@example.com"))
    assert r.status_code == 200
    sales = r.json()["categories"][0]
    assert sales["post_count"] == 1
    assert sales["summary"] is None
