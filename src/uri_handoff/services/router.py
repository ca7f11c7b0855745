from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass

from uri_handoff.domain.messages import Message, SubscriberRecord, render_for_prompt
from uri_handoff.domain.subscriber_id import is_subscriber_id, subscriber_key
from uri_handoff.observability.logging import EventLogger
from uri_handoff.ports.confirmation import ConfirmationService
from uri_handoff.ports.lifecycle import LifecycleResolver
from uri_handoff.ports.notification import NotificationService
from uri_handoff.ports.triggers import ActivationTrigger
from uri_handoff.services.activation import ActivationCoordinator, ResolutionOutcome
from uri_handoff.services.handler_registry import HandlerRegistry
from uri_handoff.services.keyed_locks import KeyedLocks
from uri_handoff.services.retention_store import RetentionStore


@dataclass(frozen=True, slots=True)
class PromptLimits:
    # URIs longer than max_length are shown as head + "..." + tail in consent prompts.
    max_length: int = 40
    head: int = 30
    tail: int = 5


class MessageRouter:
    # Entry point for inbound URIs: dispatch, buffer + activate, or hand off to activation.
    def __init__(
        self,
        *,
        registry: HandlerRegistry,
        retention: RetentionStore,
        locks: KeyedLocks,
        resolver: LifecycleResolver,
        confirmation: ConfirmationService,
        activation: ActivationTrigger,
        coordinator: ActivationCoordinator,
        notifications: NotificationService,
        prompt_limits: PromptLimits | None = None,
        logger: EventLogger | None = None,
        max_outcomes: int = 256,
    ) -> None:
        self._registry = registry
        self._retention = retention
        self._locks = locks
        self._resolver = resolver
        self._confirmation = confirmation
        self._activation = activation
        self._coordinator = coordinator
        self._notifications = notifications
        self._prompt = prompt_limits or PromptLimits()
        self._log = logger or EventLogger(component="router")
        self._tasks: set[asyncio.Task[None]] = set()
        self._max_outcomes = max(16, int(max_outcomes))
        self.outcomes: list[ResolutionOutcome] = []

    async def route(self, message: Message, *, pre_confirmed: bool = False) -> bool:
        address = message.authority
        if not is_subscriber_id(address):
            return False

        key = subscriber_key(address)
        generation_at_entry = self._registry.generation(key)
        subscriber = await self._resolver.resolve_active(address)

        if subscriber is None:
            # Accept now; resolution (confirm, install, restart) continues in the background.
            self._log.info("unresolved", subscriber=key)
            self.spawn(self._resolve_unhandled(message, address))
            return True

        if not pre_confirmed and not await self._confirm(message, address, subscriber):
            self._log.info("declined", subscriber=key)
            return True

        async with self._locks.hold(key):
            binding = self._registry.get(key)
            if binding is not None and self._registry.is_replaying(key):
                # Buffered messages are still being replayed; queue behind them.
                self._registry.defer(key, message)
                self._log.info("deferred", subscriber=key)
                return True
            if binding is None:
                self._retention.enqueue(key, message)

        if binding is not None:
            # This message was never buffered, so the binding (even one registered
            # while this call was suspended) has not seen it yet.
            self._log.debug("dispatched", subscriber=key, late=binding.generation != generation_at_entry)
            return await binding.handler.handle(message)

        self._log.info("buffered", subscriber=key)
        try:
            await self._activation.request_activation(address)
        except Exception as exc:
            self._log.error("activation_failed", subscriber=key, error=f"{type(exc).__name__}: {exc}")
        return True

    def spawn(self, coro: Coroutine[object, object, None]) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def settle(self) -> None:
        # Wait for background resolutions, including ones they spawn.
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_background(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def _confirm(self, message: Message, address: str, subscriber: SubscriberRecord) -> bool:
        rendered = render_for_prompt(
            message,
            max_length=self._prompt.max_length,
            head=self._prompt.head,
            tail=self._prompt.tail,
        )
        return await self._confirmation.confirm(
            message="Allow a subscriber to open this URI?",
            detail=f"{subscriber.label} ({address}) wants to open a URI:\n\n{rendered}",
            primary_label="&&Open",
        )

    async def _resolve_unhandled(self, message: Message, address: str) -> None:
        try:
            outcome = await self._coordinator.resolve(message, address)
        except Exception as exc:
            error = f"{type(exc).__name__}: {exc}"
            self._log.error("resolution_failed", subscriber=subscriber_key(address), error=error)
            self._notifications.error(f"Could not open the URI for '{address}': {exc}")
            return
        self.outcomes.append(outcome)
        if len(self.outcomes) > self._max_outcomes:
            self.outcomes = self.outcomes[-self._max_outcomes :]
        self._log.info(
            "resolved",
            subscriber=subscriber_key(address),
            action=outcome.action.value,
            state=outcome.state.value,
        )
