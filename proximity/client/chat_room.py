"""Async client for one topic channel at one coordinate."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx
import structlog

from proximity.services.polling import PeriodicTask
from proximity.services.slowmode import (
    SLOWMODE_SECONDS,
    SLOWMODE_THRESHOLD,
    SlowmodeState,
    evaluate_slowmode,
    tick,
)
from proximity.utils.datetime import utcnow
from proximity.utils.geo import Coordinate

logger = structlog.get_logger(__name__)

POLL_SECONDS = 3.0
TICK_SECONDS = 1.0


class ChatRoom:
    """Joined view of a channel: polled messages, nearby users and a local send gate.

    ``join()`` loads once and starts two periodic tasks, one refreshing the
    room every ``poll_interval`` seconds and one counting the slowmode
    cooldown down every ``tick_interval`` seconds. ``leave()`` stops both.

    ``send()`` checks the gate locally first and returns None without a
    request while the cooldown runs. A 429 from the server is folded into
    the local state and also yields None.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        channel: str,
        coordinate: Coordinate,
        *,
        user_email: str,
        poll_interval: float = POLL_SECONDS,
        tick_interval: float = TICK_SECONDS,
        threshold: int = SLOWMODE_THRESHOLD,
        cooldown_seconds: int = SLOWMODE_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._client = client
        self.channel = channel
        self.coordinate = coordinate
        self.threshold = threshold
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._headers = {"X-User-Email": user_email}

        self.messages: list[dict[str, Any]] = []
        self.users: list[dict[str, Any]] = []
        self.slowmode = SlowmodeState()

        self._poller = PeriodicTask(self.refresh, poll_interval, name=f"chat-poll:{channel}")
        self._ticker = PeriodicTask(self._tick, tick_interval, name=f"chat-tick:{channel}")

    @property
    def occupancy(self) -> int:
        return len(self.users)

    @property
    def joined(self) -> bool:
        return self._poller.running

    @property
    def _params(self) -> dict[str, float]:
        return {"lat": self.coordinate.latitude, "lng": self.coordinate.longitude}

    async def refresh(self) -> None:
        messages = await self._client.get(
            f"/channels/{self.channel}/messages", params=self._params, headers=self._headers
        )
        messages.raise_for_status()
        users = await self._client.get(
            f"/channels/{self.channel}/users", params=self._params, headers=self._headers
        )
        users.raise_for_status()

        self.messages = messages.json()["items"]
        body = users.json()
        self.users = body["users"]
        if self.slowmode.is_active != body["slowmode_active"]:
            logger.info(
                "chat_slowmode_changed", channel=self.channel, active=body["slowmode_active"]
            )
        self.slowmode = SlowmodeState(
            cooldown_seconds_remaining=self.slowmode.cooldown_seconds_remaining,
            last_send_at=self.slowmode.last_send_at,
            is_active=body["slowmode_active"],
        )

    def _tick(self) -> None:
        self.slowmode = tick(self.slowmode)

    async def send(self, content: str) -> dict[str, Any] | None:
        text = content.strip()
        if not text:
            return None

        state, allowed = evaluate_slowmode(
            self.occupancy,
            self.slowmode,
            self._clock(),
            threshold=self.threshold,
            cooldown_seconds=self.cooldown_seconds,
        )
        self.slowmode = state
        if not allowed:
            return None

        response = await self._client.post(
            f"/channels/{self.channel}/messages",
            json={
                "content": text,
                "latitude": self.coordinate.latitude,
                "longitude": self.coordinate.longitude,
            },
            headers=self._headers,
        )
        if response.status_code == 429:
            detail = response.json().get("error", {}).get("detail", {})
            remaining = int(detail.get("cooldown_seconds", self.cooldown_seconds))
            self.slowmode = SlowmodeState(
                cooldown_seconds_remaining=remaining,
                last_send_at=self.slowmode.last_send_at,
                is_active=True,
            )
            return None
        response.raise_for_status()

        message = response.json()
        self.messages.append(message)
        return message

    async def join(self) -> None:
        await self.refresh()
        self._poller.start()
        self._ticker.start()
        logger.info("chat_joined", channel=self.channel, users=self.occupancy)

    async def leave(self) -> None:
        await self._poller.stop()
        await self._ticker.stop()
        logger.info("chat_left", channel=self.channel)

    async def __aenter__(self) -> ChatRoom:
        await self.join()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.leave()
