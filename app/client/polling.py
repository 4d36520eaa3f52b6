"""
Gahoi Sathi — Timer-driven refresh

A ``Poller`` runs an async callback every ``interval`` seconds on its own
task until stopped.  A failing refresh is logged and the timer keeps
ticking; there is no retry beyond the next tick.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import structlog

logger = structlog.get_logger("sathi.client.polling")

CONVERSATION_POLL_SECONDS = 5.0
INBOX_POLL_SECONDS = 30.0


class Poller:
    def __init__(
        self,
        callback: Callable[[], Awaitable[object]],
        interval: float,
        immediate: bool = True,
        name: str = "poller",
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.callback = callback
        self.interval = interval
        self.immediate = immediate
        self.name = name
        self.ticks = 0
        self.failures = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=self.name)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def __aenter__(self) -> "Poller":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def tick(self) -> None:
        """Run the callback once, logging instead of raising on failure."""
        self.ticks += 1
        try:
            await self.callback()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.failures += 1
            logger.warning("poll_failed", poller=self.name, error=str(exc))

    async def _run(self) -> None:
        if not self.immediate:
            await asyncio.sleep(self.interval)
        while True:
            await self.tick()
            await asyncio.sleep(self.interval)
