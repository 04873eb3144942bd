"""Repeating asyncio task with an explicit start/stop lifecycle."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

Callback = Callable[[], Awaitable[Any] | Any]


class PeriodicTask:
    """Run ``callback`` every ``interval`` seconds until stopped.

    The first run happens immediately when ``run_immediately`` is set.
    A failing run is logged and the schedule continues. Use as an async
    context manager to tie the task to the lifetime of its owner.
    """

    def __init__(
        self,
        callback: Callback,
        interval: float,
        *,
        name: str | None = None,
        run_immediately: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._callback = callback
        self.interval = float(interval)
        self.name = name or getattr(callback, "__name__", "periodic")
        self.run_immediately = run_immediately
        self.runs = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop(), name=self.name)
        logger.debug("periodic_task_started", task=self.name, interval=self.interval)

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("periodic_task_stopped", task=self.name, runs=self.runs)

    async def run_once(self) -> None:
        try:
            result = self._callback()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("periodic_task_failed", task=self.name)
        finally:
            self.runs += 1

    async def _loop(self) -> None:
        if self.run_immediately:
            await self.run_once()
        while True:
            await asyncio.sleep(self.interval)
            await self.run_once()

    async def __aenter__(self) -> PeriodicTask:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()


__all__ = ["PeriodicTask"]
