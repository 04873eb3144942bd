from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient

from proximity.client import ChatRoom
from proximity.services.slowmode import SlowmodeState
from proximity.utils.geo import Coordinate
from tests.factories import ORIGIN, add_message, add_user

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


async def _crowd(session, count: int) -> None:
    for i in range(count):
        await add_user(
            session,
            email=f"room{i}@example.com",
            full_name=f"Room {i}",
            location=(ORIGIN[0], ORIGIN[1] + 0.0001 * (i + 1)),
        )


def _room(client: AsyncClient, **kwargs) -> ChatRoom:
    kwargs.setdefault("poll_interval", 60.0)
    kwargs.setdefault("tick_interval", 60.0)
    return ChatRoom(
        client,
        "casual_chats",
        Coordinate(*ORIGIN),
        user_email="alice@example.com",
        **kwargs,
    )


@pytest.mark.asyncio
async def test_join_loads_room_and_send_appends(app_client: AsyncClient, session, users):
    await add_message(session, users["bob"], channel="casual_chats", content="morning all")

    async with _room(app_client) as room:
        assert room.joined
        assert [m["content"] for m in room.messages] == ["morning all"]
        assert [u["name"] for u in room.users] == ["Bob"]
        assert room.slowmode.is_active is False

        sent = await room.send("  hello  ")
        assert sent is not None and sent["content"] == "hello"
        assert [m["content"] for m in room.messages] == ["morning all", "hello"]
        assert await room.send("   ") is None

    assert not room.joined


@pytest.mark.asyncio
async def test_local_gate_blocks_without_request(app_client: AsyncClient, session, users):
    await _crowd(session, 10)
    clock = FakeClock()
    room = _room(app_client, clock=clock)
    await room.join()
    try:
        assert room.occupancy == 11
        assert room.slowmode.is_active is True

        assert await room.send("first") is not None
        clock.advance(1)
        assert await room.send("too soon") is None
        assert room.slowmode.cooldown_seconds_remaining == 3

        await room.refresh()
        assert [m["content"] for m in room.messages] == ["first"]
    finally:
        await room.leave()


@pytest.mark.asyncio
async def test_server_slowmode_is_folded_into_local_state(
    app_client: AsyncClient, session, users
):
    await _crowd(session, 10)
    clock = FakeClock()
    room = _room(app_client, clock=clock)
    await room.join()
    try:
        assert await room.send("first") is not None
        # Locally the cooldown has passed; the server still counts in real time
        clock.advance(10)
        assert await room.send("second") is None
        assert room.slowmode.is_active is True
        assert room.slowmode.cooldown_seconds_remaining == 4
    finally:
        await room.leave()


@pytest.mark.asyncio
async def test_ticker_counts_cooldown_down(app_client: AsyncClient, session, users):
    await _crowd(session, 10)
    room = _room(app_client, tick_interval=0.01, clock=FakeClock())
    async with room:
        assert await room.send("first") is not None
        assert room.slowmode.last_send_at == T0
        for _ in range(200):
            if room.slowmode.cooldown_seconds_remaining == 0:
                break
            await asyncio.sleep(0.01)
        assert room.slowmode.cooldown_seconds_remaining == 0


@pytest.mark.asyncio
async def test_tick_floors_at_zero(app_client: AsyncClient, users):
    room = _room(app_client)
    room.slowmode = SlowmodeState(cooldown_seconds_remaining=2, last_send_at=T0)
    room._tick()
    assert room.slowmode.cooldown_seconds_remaining == 1
    room._tick()
    room._tick()
    assert room.slowmode.cooldown_seconds_remaining == 0
