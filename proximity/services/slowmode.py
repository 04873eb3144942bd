"""Channel slowmode: a send cooldown that applies while a channel is crowded."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

import structlog

SLOWMODE_THRESHOLD = 10
SLOWMODE_SECONDS = 4

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SlowmodeState:
    cooldown_seconds_remaining: int = 0
    last_send_at: datetime | None = None
    is_active: bool = False


def is_slowmode_active(occupancy: int, threshold: int = SLOWMODE_THRESHOLD) -> bool:
    """Slowmode applies while more than ``threshold`` users are nearby."""
    return occupancy > threshold


def evaluate_slowmode(
    occupancy: int,
    state: SlowmodeState,
    now: datetime,
    *,
    threshold: int = SLOWMODE_THRESHOLD,
    cooldown_seconds: int = SLOWMODE_SECONDS,
) -> tuple[SlowmodeState, bool]:
    """Decide whether a send at ``now`` is allowed and return the next state.

    Occupancy is re-read on every call; dropping to ``threshold`` or fewer
    users lifts slowmode immediately. While active, a send less than
    ``cooldown_seconds`` after the previous one is denied and the state
    reports the whole seconds left.
    """

    active = is_slowmode_active(occupancy, threshold)
    if not active:
        idle = SlowmodeState(cooldown_seconds_remaining=0, last_send_at=now, is_active=False)
        return idle, True

    if state.last_send_at is not None:
        elapsed = (now - state.last_send_at).total_seconds()
        if elapsed < cooldown_seconds:
            remaining = max(1, math.ceil(cooldown_seconds - elapsed))
            return replace(state, cooldown_seconds_remaining=remaining, is_active=True), False

    return (
        SlowmodeState(
            cooldown_seconds_remaining=cooldown_seconds, last_send_at=now, is_active=True
        ),
        True,
    )


def tick(state: SlowmodeState) -> SlowmodeState:
    """One second of countdown; never goes below zero."""
    if state.cooldown_seconds_remaining <= 0:
        return state
    return replace(state, cooldown_seconds_remaining=state.cooldown_seconds_remaining - 1)


class SlowmodeRegistry:
    """In-process slowmode states keyed by (user_id, channel).

    ``check`` only evaluates; callers ``record`` the returned state once the
    send has actually gone through. Entries whose cooldown has elapsed gate
    exactly like a fresh state and are dropped on every write, so the map
    only ever holds senders from the last ``cooldown_seconds``.
    """

    def __init__(
        self, *, threshold: int = SLOWMODE_THRESHOLD, cooldown_seconds: int = SLOWMODE_SECONDS
    ) -> None:
        self.threshold = threshold
        self.cooldown_seconds = cooldown_seconds
        self._states: dict[tuple[int, str], SlowmodeState] = {}

    def __len__(self) -> int:
        return len(self._states)

    def get(self, user_id: int, channel: str) -> SlowmodeState:
        return self._states.get((user_id, channel), SlowmodeState())

    def check(
        self, user_id: int, channel: str, occupancy: int, now: datetime
    ) -> tuple[SlowmodeState, bool]:
        state, allowed = evaluate_slowmode(
            occupancy,
            self.get(user_id, channel),
            now,
            threshold=self.threshold,
            cooldown_seconds=self.cooldown_seconds,
        )
        if not allowed:
            logger.info(
                "slowmode_denied",
                user_id=user_id,
                channel=channel,
                occupancy=occupancy,
                cooldown_seconds=state.cooldown_seconds_remaining,
            )
        return state, allowed

    def record(self, user_id: int, channel: str, state: SlowmodeState, now: datetime) -> None:
        self._prune(now)
        self._states[(user_id, channel)] = state

    def attempt(
        self, user_id: int, channel: str, occupancy: int, now: datetime
    ) -> tuple[SlowmodeState, bool]:
        state, allowed = self.check(user_id, channel, occupancy, now)
        self.record(user_id, channel, state, now)
        return state, allowed

    def clear(self) -> None:
        self._states.clear()

    def _prune(self, now: datetime) -> None:
        cutoff = now - timedelta(seconds=self.cooldown_seconds)
        stale = [
            key
            for key, state in self._states.items()
            if state.last_send_at is None or state.last_send_at <= cutoff
        ]
        for key in stale:
            del self._states[key]


__all__ = [
    "SLOWMODE_SECONDS",
    "SLOWMODE_THRESHOLD",
    "SlowmodeRegistry",
    "SlowmodeState",
    "evaluate_slowmode",
    "is_slowmode_active",
    "tick",
]
