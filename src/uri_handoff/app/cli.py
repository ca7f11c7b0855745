from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from uri_handoff.adapters.catalog import CatalogLifecycleResolver
from uri_handoff.adapters.confirmation import ConsoleConfirmation, StaticConfirmation
from uri_handoff.adapters.notification import ConsoleNotificationService
from uri_handoff.adapters.persistence import InMemoryScopedStore, JsonFileScopedStore
from uri_handoff.config.loader import ConfigError, load_config
from uri_handoff.config.models import HandoffConfig
from uri_handoff.domain.messages import Message
from uri_handoff.observability.logging import EventLogger
from uri_handoff.observability.sinks import build_log_sink, close_log_sink
from uri_handoff.ports.confirmation import ConfirmationService
from uri_handoff.ports.persistence import ScopedStore
from uri_handoff.services.router import PromptLimits
from uri_handoff.services.service import HandoffService

# NOTE: the CLI is a thin shell around HandoffService wiring; it stands in for a host process.
# One run is one "host session": a restart request ends the run and the next run replays the carry.


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="uri-handoff", description="Route subscriber-addressed URIs")
    parser.add_argument("--config", required=True, help="Path to YAML config")
    parser.add_argument("--state", help="Path to JSON state file carrying a URI across restarts")
    answers = parser.add_mutually_exclusive_group()
    answers.add_argument("--yes", action="store_true", help="Confirm every prompt and run follow-up actions")
    answers.add_argument("--no", action="store_true", help="Decline every prompt")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Override logging.level from config",
    )
    parser.add_argument("uris", nargs="*", metavar="URI", help="URIs to route, in order")
    return parser


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


class EchoHandler:
    # Handler installed for activated subscribers; writes each delivery to the output stream.
    def __init__(self, address: str, out: TextIO) -> None:
        self._address = address
        self._out = out

    async def handle(self, message: Message) -> bool:
        print(f"{self._address} <- {message}", file=self._out)
        return True


class RegisteringActivationTrigger:
    # Activation completes immediately: the subscriber registers an EchoHandler.
    def __init__(self, out: TextIO) -> None:
        self._out = out
        self.service: HandoffService | None = None

    async def request_activation(self, address: str) -> None:
        if self.service is None:
            raise RuntimeError("RegisteringActivationTrigger is not bound to a service")
        await self.service.register(address, EchoHandler(address, self._out))


class RecordingRestartTrigger:
    def __init__(self) -> None:
        self.requested = 0

    async def restart_host(self) -> None:
        self.requested += 1


def build_service(
    config: HandoffConfig,
    *,
    store: ScopedStore,
    confirmation: ConfirmationService,
    notifications: ConsoleNotificationService,
    activation: RegisteringActivationTrigger,
    restart: RecordingRestartTrigger,
    logger: EventLogger,
) -> HandoffService:
    service = HandoffService(
        resolver=CatalogLifecycleResolver.from_config(config.catalog, store=store),
        confirmation=confirmation,
        notifications=notifications,
        activation=activation,
        restart=restart,
        store=store,
        window_seconds=config.retention.window_seconds,
        sweep_interval_seconds=config.retention.sweep_interval_seconds,
        carry_key=config.carry.key,
        carry_scope=config.carry.scope,
        prompt_limits=PromptLimits(
            max_length=config.prompt.max_length,
            head=config.prompt.head,
            tail=config.prompt.tail,
        ),
        logger=logger,
    )
    activation.service = service
    return service


async def _run_session(
    config: HandoffConfig,
    args: argparse.Namespace,
    logger: EventLogger,
    out: TextIO,
) -> int:
    store: ScopedStore = JsonFileScopedStore(Path(args.state)) if args.state else InMemoryScopedStore()
    confirmation: ConfirmationService
    if args.yes or args.no:
        confirmation = StaticConfirmation(answer=bool(args.yes))
    else:
        confirmation = ConsoleConfirmation()
    notifications = ConsoleNotificationService(logger=logger.child("notification"))
    activation = RegisteringActivationTrigger(out)
    restart = RecordingRestartTrigger()
    service = build_service(
        config,
        store=store,
        confirmation=confirmation,
        notifications=notifications,
        activation=activation,
        restart=restart,
        logger=logger,
    )

    await service.start()
    try:
        await service.settle()
        for text in args.uris:
            if restart.requested:
                break
            try:
                message = Message.parse(text)
            except ValueError:
                print(f"{text}\tinvalid", file=out)
                continue
            handled = await service.route(message)
            print(f"{message}\t{'handled' if handled else 'not-handled'}", file=out)
            await service.settle()
        if args.yes and not restart.requested:
            for action in notifications.pending_actions():
                await action.run()
                if restart.requested:
                    break
    finally:
        await service.stop()

    if restart.requested:
        print("restart requested; run again to open the carried URI", file=out)
    return 0


def run(argv: Sequence[str] | None = None, *, out: TextIO | None = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        print(f"config error: {exc}", file=sys.stderr)
        return 2
    level = args.log_level or config.logging.level
    sink = build_log_sink(config.logging.exporter_settings())
    logger = EventLogger(component="handoff", sink=sink, min_level=level)
    try:
        return asyncio.run(_run_session(config, args, logger, out or sys.stdout))
    finally:
        close_log_sink(sink)
