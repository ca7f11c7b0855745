from __future__ import annotations

import time
from collections.abc import Callable

from uri_handoff.domain.messages import Message, PendingEntry
from uri_handoff.observability.logging import EventLogger

RETENTION_WINDOW_SECONDS = 5 * 60
SWEEP_INTERVAL_SECONDS = 30


class RetentionStore:
    # Keyed buffer of messages waiting for a subscriber to register.
    # Sweeps build a fresh map and swap it in rather than mutating lists in place.
    def __init__(
        self,
        *,
        window_seconds: float = RETENTION_WINDOW_SECONDS,
        now_fn: Callable[[], float] | None = None,
        logger: EventLogger | None = None,
    ) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self._window = float(window_seconds)
        self._now = now_fn or time.monotonic
        self._log = logger or EventLogger(component="retention")
        self._buffer: dict[str, list[PendingEntry]] = {}
        self._counters: dict[str, int] = {"enqueued": 0, "drained": 0, "expired": 0}

    @property
    def window_seconds(self) -> float:
        return self._window

    def now(self) -> float:
        return float(self._now())

    def enqueue(self, key: str, message: Message) -> PendingEntry:
        entry = PendingEntry(timestamp=self.now(), message=message)
        self._buffer.setdefault(key, []).append(entry)
        self._counters["enqueued"] += 1
        self._log.debug("buffered", subscriber=key, pending=len(self._buffer[key]))
        return entry

    def drain(self, key: str) -> list[PendingEntry]:
        # Removes and returns all entries for the key in arrival order.
        entries = self._buffer.pop(key, [])
        self._counters["drained"] += len(entries)
        return entries

    def pending(self, key: str) -> list[Message]:
        return [entry.message for entry in self._buffer.get(key, [])]

    def keys(self) -> list[str]:
        return list(self._buffer.keys())

    def sweep(self, now: float | None = None) -> int:
        current = self.now() if now is None else float(now)
        survivors: dict[str, list[PendingEntry]] = {}
        evicted = 0
        for key, entries in self._buffer.items():
            kept = [entry for entry in entries if current - entry.timestamp < self._window]
            evicted += len(entries) - len(kept)
            if kept:
                survivors[key] = kept
        self._buffer = survivors
        if evicted:
            self._counters["expired"] += evicted
            self._log.debug("swept", evicted=evicted, remaining_keys=len(survivors))
        return evicted

    def clear(self) -> None:
        self._buffer = {}

    def diagnostics_counters(self) -> dict[str, int]:
        return {
            **self._counters,
            "pending": sum(len(entries) for entries in self._buffer.values()),
        }

    def __len__(self) -> int:
        return len(self._buffer)
