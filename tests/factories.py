"""Seed helpers and fakes shared by the test modules."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from proximity.models import Message, Post, User
from proximity.utils.datetime import utcnow

# Origin used across API tests and a point ~0.069 mi north of it
ORIGIN = (40.0, -75.0)
NEAR = (40.001, -75.0)
FAR = (41.0, -75.0)  # ~69 mi north


def auth(email: str) -> dict[str, str]:
    return {"X-User-Email": email}


def origin_params(lat: float = ORIGIN[0], lng: float = ORIGIN[1]) -> dict[str, float]:
    return {"lat": lat, "lng": lng}


class FakeLLM:
    """Stands in for the OpenAI wrapper; records prompts, returns canned replies."""

    def __init__(self, text: str = "A lively week nearby.", data: dict | None = None):
        self.text = text
        self.data = data or {}
        self.prompts: list[str] = []
        self.fail_on: Callable[[str], bool] = lambda _prompt: False

    async def complete_text(self, prompt: str, **_: object) -> str:
        self.prompts.append(prompt)
        if self.fail_on(prompt):
            raise RuntimeError("upstream error")
        return self.text

    async def complete_json(self, prompt: str, **_: object) -> dict:
        self.prompts.append(prompt)
        if self.fail_on(prompt):
            raise RuntimeError("upstream error")
        return dict(self.data)


async def add_user(
    session: AsyncSession,
    *,
    email: str,
    full_name: str,
    location: tuple[float, float] | None = None,
    username: str | None = None,
    interests: list[str] | None = None,
) -> User:
    u = User(
        email=email,
        full_name=full_name,
        username=username,
        username_lower=username.lower() if username else None,
        interests=interests or [],
        latitude=location[0] if location else None,
        longitude=location[1] if location else None,
        location_updated_at=utcnow() if location else None,
    )
    session.add(u)
    await session.commit()
    return u


async def add_post(
    session: AsyncSession,
    author: User,
    *,
    content: str,
    at: tuple[float, float] = ORIGIN,
    category: str = "casual_chats",
    age_minutes: int = 0,
) -> Post:
    p = Post(
        author_id=author.id,
        content=content,
        category=category,
        latitude=at[0],
        longitude=at[1],
        created_at=utcnow() - timedelta(minutes=age_minutes),
    )
    session.add(p)
    await session.commit()
    return p


async def add_message(
    session: AsyncSession,
    sender: User,
    *,
    channel: str,
    content: str,
    at: tuple[float, float] = ORIGIN,
    created_at: datetime | None = None,
) -> Message:
    m = Message(
        channel=channel,
        sender_id=sender.id,
        content=content,
        latitude=at[0],
        longitude=at[1],
        created_at=created_at or utcnow(),
    )
    session.add(m)
    await session.commit()
    return m
