from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from uri_handoff.observability.logging import EventLogger


class PeriodicTask:
    # Runs a synchronous callback every `interval_seconds` once started.
    # `sleep_fn` is injectable so tests drive ticks without wall-clock waits.
    def __init__(
        self,
        callback: Callable[[], object],
        *,
        interval_seconds: float,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
        logger: EventLogger | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._callback = callback
        self._interval = float(interval_seconds)
        self._sleep = sleep_fn or asyncio.sleep
        self._log = logger or EventLogger(component="timer")
        self._task: asyncio.Task[None] | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        if self.running:
            raise RuntimeError("PeriodicTask already started")
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            await self._sleep(self._interval)
            self.ticks += 1
            try:
                self._callback()
            except Exception as exc:
                # A failing tick must not kill the timer.
                self._log.error("tick_failed", error=f"{type(exc).__name__}: {exc}")
