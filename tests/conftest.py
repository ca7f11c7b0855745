from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import pytest

from uri_handoff.adapters.notification import ConsoleNotificationService
from uri_handoff.adapters.persistence import InMemoryScopedStore
from uri_handoff.domain.messages import Message, PackageRecord, SubscriberRecord
from uri_handoff.services.service import HandoffService


@dataclass
class FakeClock:
    now: float = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class RecordingHandler:
    result: bool = True
    received: list[Message] = field(default_factory=list)
    fail_on: set[str] = field(default_factory=set)

    async def handle(self, message: Message) -> bool:
        if message.uri in self.fail_on:
            raise RuntimeError(f"cannot handle {message.uri}")
        self.received.append(message)
        return self.result


@dataclass
class FakeResolver:
    # Lifecycle resolver fake: dictionaries stand in for the host's extension state.
    active: dict[str, SubscriberRecord] = field(default_factory=dict)
    installed: dict[str, SubscriberRecord] = field(default_factory=dict)
    disabled: set[str] = field(default_factory=set)
    installable: dict[str, PackageRecord] = field(default_factory=dict)
    install_error: Exception | None = None
    on_resolve: Callable[[str], Awaitable[None]] | None = None
    on_install: Callable[[PackageRecord], None] | None = None
    enabled_calls: list[tuple[str, bool]] = field(default_factory=list)
    installed_packages: list[str] = field(default_factory=list)

    async def resolve_active(self, address: str) -> SubscriberRecord | None:
        if self.on_resolve is not None:
            await self.on_resolve(address)
        return self.active.get(address.lower())

    async def get_installed(self, address: str) -> SubscriberRecord | None:
        return self.installed.get(address.lower())

    def is_enabled(self, record: SubscriberRecord) -> bool:
        return record.id.lower() not in self.disabled

    async def set_enabled(self, record: SubscriberRecord, enabled: bool) -> None:
        self.enabled_calls.append((record.id, enabled))

    async def get_compatible_installable(self, address: str) -> PackageRecord | None:
        return self.installable.get(address.lower())

    async def install(self, package: PackageRecord) -> None:
        if self.on_install is not None:
            self.on_install(package)
        if self.install_error is not None:
            raise self.install_error
        self.installed_packages.append(package.id)


@dataclass
class FakeConfirmation:
    answer: bool = True
    prompts: list[dict[str, str]] = field(default_factory=list)

    async def confirm(self, *, message: str, detail: str, primary_label: str) -> bool:
        self.prompts.append({"message": message, "detail": detail, "primary_label": primary_label})
        return self.answer


@dataclass
class FakeActivation:
    requested: list[str] = field(default_factory=list)
    on_request: Callable[[str], Awaitable[None]] | None = None

    async def request_activation(self, address: str) -> None:
        self.requested.append(address)
        if self.on_request is not None:
            await self.on_request(address)


@dataclass
class FakeRestart:
    calls: int = 0

    async def restart_host(self) -> None:
        self.calls += 1


@dataclass
class Harness:
    resolver: FakeResolver
    confirmation: FakeConfirmation
    activation: FakeActivation
    restart: FakeRestart
    notifications: ConsoleNotificationService
    store: InMemoryScopedStore
    clock: FakeClock
    service: HandoffService

    def activate(self, address: str, name: str | None = None) -> SubscriberRecord:
        record = SubscriberRecord(id=address, name=name or address.split(".")[-1])
        self.resolver.active[address.lower()] = record
        self.resolver.installed[address.lower()] = record
        return record


def build_harness(**service_kwargs: object) -> Harness:
    resolver = FakeResolver()
    confirmation = FakeConfirmation()
    activation = FakeActivation()
    restart = FakeRestart()
    notifications = ConsoleNotificationService()
    store = InMemoryScopedStore()
    clock = FakeClock()
    service = HandoffService(
        resolver=resolver,
        confirmation=confirmation,
        notifications=notifications,
        activation=activation,
        restart=restart,
        store=store,
        now_fn=clock,
        **service_kwargs,
    )
    return Harness(
        resolver=resolver,
        confirmation=confirmation,
        activation=activation,
        restart=restart,
        notifications=notifications,
        store=store,
        clock=clock,
        service=service,
    )


@pytest.fixture
def harness() -> Harness:
    return build_harness()


@pytest.fixture
def harness_factory() -> Callable[..., Harness]:
    return build_harness
