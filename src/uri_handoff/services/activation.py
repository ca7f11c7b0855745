from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from uri_handoff.domain.messages import Message, PackageRecord, SubscriberRecord
from uri_handoff.observability.logging import EventLogger
from uri_handoff.ports.confirmation import ConfirmationService
from uri_handoff.ports.lifecycle import LifecycleResolver
from uri_handoff.ports.notification import NotificationAction, NotificationService, Severity
from uri_handoff.services.restart_carry import RestartCarry


class ResolutionAction(str, Enum):
    RESTART = "restart"
    ENABLE_AND_RESTART = "enable_and_restart"
    INSTALL = "install"
    DROP = "drop"


class ResolutionState(str, Enum):
    UNRESOLVED = "unresolved"
    CONFIRM_ACTION = "confirm_action"
    ENABLING = "enabling"
    RESTARTING = "restarting"
    INSTALLING = "installing"
    AWAITING_RESTART_CONFIRM = "awaiting_restart_confirm"
    DECLINED = "declined"
    DROPPED = "dropped"
    FAILED = "failed"


@dataclass(slots=True)
class ResolutionOutcome:
    # Visited states in order; `state` is the last one reached.
    action: ResolutionAction
    states: list[ResolutionState] = field(default_factory=lambda: [ResolutionState.UNRESOLVED])
    error: str | None = None

    @property
    def state(self) -> ResolutionState:
        return self.states[-1]

    def advance(self, state: ResolutionState) -> None:
        self.states.append(state)


def plan_resolution(
    installed: SubscriberRecord | None,
    enabled: bool,
    installable: PackageRecord | None,
) -> ResolutionAction:
    if installed is not None:
        return ResolutionAction.RESTART if enabled else ResolutionAction.ENABLE_AND_RESTART
    if installable is not None:
        return ResolutionAction.INSTALL
    return ResolutionAction.DROP


def restart_prompt(uri: object) -> str:
    return f"Would you like to restart the host and open the URI '{uri}'?"


RESTART_ACTION_LABEL = "Restart and Open"


class ActivationCoordinator:
    # Drives restart/enable/install for subscribers the running host cannot resolve.
    # Every mutating step is gated by an explicit user confirmation.
    def __init__(
        self,
        *,
        resolver: LifecycleResolver,
        confirmation: ConfirmationService,
        notifications: NotificationService,
        carry: RestartCarry,
        logger: EventLogger | None = None,
    ) -> None:
        self._resolver = resolver
        self._confirmation = confirmation
        self._notifications = notifications
        self._carry = carry
        self._log = logger or EventLogger(component="activation")

    async def resolve(self, message: Message, address: str) -> ResolutionOutcome:
        installed = await self._resolver.get_installed(address)
        enabled = self._resolver.is_enabled(installed) if installed is not None else False
        installable = None
        if installed is None:
            installable = await self._resolver.get_compatible_installable(address)

        action = plan_resolution(installed, enabled, installable)
        outcome = ResolutionOutcome(action=action)
        self._log.info("planned", subscriber=address, action=action.value)

        if action is ResolutionAction.DROP:
            # No installable package: the message is dropped without telling the user.
            outcome.advance(ResolutionState.DROPPED)
            return outcome

        outcome.advance(ResolutionState.CONFIRM_ACTION)
        if action is ResolutionAction.RESTART:
            assert installed is not None
            await self._restart(message, address, installed, outcome)
        elif action is ResolutionAction.ENABLE_AND_RESTART:
            assert installed is not None
            await self._enable_and_restart(message, address, installed, outcome)
        else:
            assert installable is not None
            await self._install(message, address, installable, outcome)
        return outcome

    async def _restart(
        self,
        message: Message,
        address: str,
        record: SubscriberRecord,
        outcome: ResolutionOutcome,
    ) -> None:
        confirmed = await self._confirmation.confirm(
            message=(
                f"Subscriber '{record.label}' is not loaded. Would you like to restart the host "
                "to load the subscriber and open the URI?"
            ),
            detail=_detail(record.label, address, message),
            primary_label="&&Restart and Open",
        )
        if not confirmed:
            outcome.advance(ResolutionState.DECLINED)
            return
        outcome.advance(ResolutionState.RESTARTING)
        await self._carry.persist_and_restart(message)

    async def _enable_and_restart(
        self,
        message: Message,
        address: str,
        record: SubscriberRecord,
        outcome: ResolutionOutcome,
    ) -> None:
        confirmed = await self._confirmation.confirm(
            message=(
                f"Subscriber '{record.label}' is disabled. Would you like to enable the subscriber "
                "and restart the host to open the URI?"
            ),
            detail=_detail(record.label, address, message),
            primary_label="&&Enable and Open",
        )
        if not confirmed:
            outcome.advance(ResolutionState.DECLINED)
            return
        outcome.advance(ResolutionState.ENABLING)
        await self._resolver.set_enabled(record, True)
        self._log.info("enabled", subscriber=address)
        outcome.advance(ResolutionState.RESTARTING)
        await self._carry.persist_and_restart(message)

    async def _install(
        self,
        message: Message,
        address: str,
        package: PackageRecord,
        outcome: ResolutionOutcome,
    ) -> None:
        confirmed = await self._confirmation.confirm(
            message=(
                f"Subscriber '{package.label}' is not installed. Would you like to install the "
                "subscriber and restart the host to open this URI?"
            ),
            detail=_detail(package.label, address, message),
            primary_label="&&Install",
        )
        if not confirmed:
            outcome.advance(ResolutionState.DECLINED)
            return

        outcome.advance(ResolutionState.INSTALLING)
        handle = self._notifications.notify(
            severity=Severity.INFO,
            message=f"Installing subscriber '{package.label}'...",
        )
        handle.progress_infinite()

        try:
            await self._resolver.install(package)
        except Exception as exc:
            outcome.advance(ResolutionState.FAILED)
            outcome.error = str(exc) or type(exc).__name__
            self._log.error("install_failed", subscriber=address, error=outcome.error)
            if not handle.closed:
                handle.progress_done()
                handle.update_severity(Severity.ERROR)
                handle.update_message(outcome.error)
            else:
                self._notifications.error(outcome.error)
            return

        self._log.info("installed", subscriber=address)
        outcome.advance(ResolutionState.AWAITING_RESTART_CONFIRM)
        prompt = restart_prompt(message)
        action = NotificationAction(
            id="restart_host",
            label=RESTART_ACTION_LABEL,
            run=lambda: self._carry.persist_and_restart(message),
        )
        if not handle.closed:
            handle.progress_done()
            handle.update_message(prompt)
            handle.update_actions([action])
        else:
            self._notifications.prompt(
                severity=Severity.INFO,
                message=prompt,
                actions=[action],
                sticky=True,
            )


def _detail(label: str, address: str, message: Message) -> str:
    return f"{label} ({address}) wants to open a URI:\n\n{message}"
