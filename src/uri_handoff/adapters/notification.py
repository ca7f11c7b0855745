from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from uri_handoff.observability.logging import EventLogger
from uri_handoff.ports.notification import (
    NotificationAction,
    NotificationHandle,
    NotificationService,
    Severity,
)


@dataclass
class RecordedNotification(NotificationHandle):
    # Notification state kept in memory; every change is logged.
    severity: Severity
    message: str
    sticky: bool = False
    actions: list[NotificationAction] = field(default_factory=list)
    in_progress: bool = False
    _closed: bool = False
    _log: EventLogger = field(default_factory=lambda: EventLogger(component="notification"))

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def progress_infinite(self) -> None:
        self.in_progress = True

    def progress_done(self) -> None:
        self.in_progress = False

    def update_message(self, message: str) -> None:
        self.message = message
        self._log.info("updated", severity=self.severity.value, text=message)

    def update_severity(self, severity: Severity) -> None:
        self.severity = severity

    def update_actions(self, actions: Sequence[NotificationAction]) -> None:
        self.actions = list(actions)
        self._log.info("actions", labels=[action.label for action in self.actions])


class ConsoleNotificationService(NotificationService):
    # Log-backed notifications; open actions can be listed and run by the caller.
    def __init__(self, *, logger: EventLogger | None = None) -> None:
        self._log = logger or EventLogger(component="notification")
        self.notifications: list[RecordedNotification] = []

    def notify(self, *, severity: Severity, message: str) -> RecordedNotification:
        handle = RecordedNotification(severity=severity, message=message, _log=self._log)
        self.notifications.append(handle)
        self._log.info("shown", severity=severity.value, text=message)
        return handle

    def prompt(
        self,
        *,
        severity: Severity,
        message: str,
        actions: Sequence[NotificationAction],
        sticky: bool = False,
    ) -> None:
        handle = RecordedNotification(
            severity=severity,
            message=message,
            sticky=sticky,
            actions=list(actions),
            _log=self._log,
        )
        self.notifications.append(handle)
        self._log.info("prompted", severity=severity.value, text=message, sticky=sticky)

    def error(self, message: str) -> None:
        self.notifications.append(RecordedNotification(severity=Severity.ERROR, message=message, _log=self._log))
        self._log.error("shown", severity=Severity.ERROR.value, text=message)

    def pending_actions(self) -> list[NotificationAction]:
        return [
            action
            for notification in self.notifications
            if not notification.closed
            for action in notification.actions
        ]
