from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from uri_handoff.domain.messages import Message
from uri_handoff.domain.subscriber_id import subscriber_key
from uri_handoff.observability.logging import EventLogger
from uri_handoff.ports.confirmation import ConfirmationService
from uri_handoff.ports.handler import MessageHandler
from uri_handoff.ports.lifecycle import LifecycleResolver
from uri_handoff.ports.notification import NotificationService
from uri_handoff.ports.persistence import ScopedStore, StorageScope
from uri_handoff.ports.triggers import ActivationTrigger, RestartTrigger
from uri_handoff.services.activation import ActivationCoordinator
from uri_handoff.services.handler_registry import HandlerBinding, HandlerRegistry
from uri_handoff.services.keyed_locks import KeyedLocks
from uri_handoff.services.lifecycle import PeriodicTask
from uri_handoff.services.restart_carry import CARRY_KEY, RestartCarry
from uri_handoff.services.retention_store import (
    RETENTION_WINDOW_SECONDS,
    SWEEP_INTERVAL_SECONDS,
    RetentionStore,
)
from uri_handoff.services.router import MessageRouter, PromptLimits


class HandoffService:
    # Surface exposed to the host: route/register/unregister plus start/stop lifecycle.
    # Constructing the service has no side effects; the sweep timer and carry replay begin in start().
    def __init__(
        self,
        *,
        resolver: LifecycleResolver,
        confirmation: ConfirmationService,
        notifications: NotificationService,
        activation: ActivationTrigger,
        restart: RestartTrigger,
        store: ScopedStore,
        window_seconds: float = RETENTION_WINDOW_SECONDS,
        sweep_interval_seconds: float = SWEEP_INTERVAL_SECONDS,
        carry_key: str = CARRY_KEY,
        carry_scope: StorageScope = StorageScope.WORKSPACE,
        prompt_limits: PromptLimits | None = None,
        now_fn: Callable[[], float] | None = None,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
        logger: EventLogger | None = None,
    ) -> None:
        log = logger or EventLogger(component="handoff")
        self._log = log
        self._locks = KeyedLocks()
        self.retention = RetentionStore(
            window_seconds=window_seconds,
            now_fn=now_fn or time.monotonic,
            logger=log.child("retention"),
        )
        self.registry = HandlerRegistry(
            retention=self.retention,
            locks=self._locks,
            logger=log.child("registry"),
        )
        self.carry = RestartCarry(
            store=store,
            restart=restart,
            key=carry_key,
            scope=carry_scope,
            logger=log.child("carry"),
        )
        self.coordinator = ActivationCoordinator(
            resolver=resolver,
            confirmation=confirmation,
            notifications=notifications,
            carry=self.carry,
            logger=log.child("activation"),
        )
        self.router = MessageRouter(
            registry=self.registry,
            retention=self.retention,
            locks=self._locks,
            resolver=resolver,
            confirmation=confirmation,
            activation=activation,
            coordinator=self.coordinator,
            notifications=notifications,
            prompt_limits=prompt_limits,
            logger=log.child("router"),
        )
        self._sweeper = PeriodicTask(
            self.retention.sweep,
            interval_seconds=sweep_interval_seconds,
            sleep_fn=sleep_fn,
            logger=log.child("timer"),
        )

    @property
    def running(self) -> bool:
        return self._sweeper.running

    async def route(self, message: Message, *, pre_confirmed: bool = False) -> bool:
        return await self.router.route(message, pre_confirmed=pre_confirmed)

    async def register(self, address: str, handler: MessageHandler) -> HandlerBinding:
        return await self.registry.register(address, handler)

    def unregister(self, address: str) -> bool:
        return self.registry.unregister(address)

    async def start(self) -> asyncio.Task[None]:
        # Returns the sweep task; cancelling it (or calling stop()) ends the timer.
        task = self._sweeper.start()
        carried = self.carry.consume()
        if carried is not None:
            self.router.spawn(self._replay(carried))
        self._log.info("started", replaying=carried is not None)
        return task

    async def stop(self) -> None:
        await self._sweeper.stop()
        await self.router.cancel_background()
        self.registry.clear()
        self.retention.clear()
        self._log.info("stopped")

    async def settle(self) -> None:
        await self.router.settle()

    def sweep(self) -> int:
        return self.retention.sweep()

    def pending(self, address: str) -> list[Message]:
        return self.retention.pending(subscriber_key(address))

    def diagnostics(self) -> dict[str, int]:
        return {
            **self.retention.diagnostics_counters(),
            "bindings": len(self.registry),
            "in_flight": self.router.in_flight,
        }

    async def _replay(self, message: Message) -> None:
        # The user consented before the restart, so consent is not asked again.
        try:
            await self.router.route(message, pre_confirmed=True)
        except Exception as exc:
            self._log.error("replay_failed", subscriber=message.authority, error=f"{type(exc).__name__}: {exc}")
