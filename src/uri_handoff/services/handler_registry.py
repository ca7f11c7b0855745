from __future__ import annotations

import itertools
from collections import deque
from dataclasses import dataclass

from uri_handoff.domain.errors import InvalidSubscriberIdError
from uri_handoff.domain.messages import Message
from uri_handoff.domain.subscriber_id import is_subscriber_id, subscriber_key
from uri_handoff.observability.logging import EventLogger
from uri_handoff.ports.handler import MessageHandler
from uri_handoff.services.keyed_locks import KeyedLocks
from uri_handoff.services.retention_store import RetentionStore


@dataclass(frozen=True, slots=True)
class HandlerBinding:
    # Generation is unique per registration; a re-registration always gets a higher one.
    key: str
    handler: MessageHandler
    generation: int


class HandlerRegistry:
    # Subscriber key -> live handler; registration replays buffered messages.
    # The key lock only guards bind + drain; handlers are always awaited after it is released.
    def __init__(
        self,
        *,
        retention: RetentionStore,
        locks: KeyedLocks,
        logger: EventLogger | None = None,
    ) -> None:
        self._retention = retention
        self._locks = locks
        self._log = logger or EventLogger(component="registry")
        self._bindings: dict[str, HandlerBinding] = {}
        self._generations = itertools.count(1)
        self._replaying: dict[str, deque[Message]] = {}

    def get(self, key: str) -> HandlerBinding | None:
        return self._bindings.get(key)

    def generation(self, key: str) -> int | None:
        binding = self._bindings.get(key)
        return binding.generation if binding is not None else None

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and subscriber_key(address) in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def is_replaying(self, key: str) -> bool:
        return key in self._replaying

    def defer(self, key: str, message: Message) -> None:
        # Queue behind an in-progress replay so arrival order holds; caller must check is_replaying().
        self._replaying[key].append(message)

    async def register(self, address: str, handler: MessageHandler) -> HandlerBinding:
        if not is_subscriber_id(address):
            raise InvalidSubscriberIdError(address)
        key = subscriber_key(address)
        async with self._locks.hold(key):
            binding = HandlerBinding(key=key, handler=handler, generation=next(self._generations))
            replaced = key in self._bindings
            self._bindings[key] = binding
            entries = self._retention.drain(key)
            self._log.info("registered", subscriber=key, replaced=replaced, replay=len(entries))
            queue = self._replaying.get(key)
            if queue is not None:
                # A replay for this key is already running; it delivers these to the new binding.
                queue.extend(entry.message for entry in entries)
                return binding
            if not entries:
                return binding
            queue = deque(entry.message for entry in entries)
            self._replaying[key] = queue
        await self._replay(key, queue)
        return binding

    async def _replay(self, key: str, queue: deque[Message]) -> None:
        try:
            while queue:
                binding = self._bindings.get(key)
                if binding is None:
                    # Unregistered mid-replay: the rest waits for the next registration.
                    while queue:
                        self._retention.enqueue(key, queue.popleft())
                    self._log.info("replay_interrupted", subscriber=key)
                    return
                message = queue.popleft()
                # Original callers already got handled=True; replayed outcomes are not reported back.
                try:
                    await binding.handler.handle(message)
                except Exception as exc:
                    self._log.error("replay_failed", subscriber=key, error=f"{type(exc).__name__}: {exc}")
        finally:
            del self._replaying[key]

    def unregister(self, address: str) -> bool:
        key = subscriber_key(address)
        removed = self._bindings.pop(key, None)
        if removed is not None:
            self._log.info("unregistered", subscriber=key)
        return removed is not None

    def clear(self) -> None:
        self._bindings.clear()
