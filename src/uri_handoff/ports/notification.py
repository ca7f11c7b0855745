from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class NotificationAction:
    # User-triggered follow-up attached to a notification.
    id: str
    label: str
    run: Callable[[], Awaitable[None]]


@runtime_checkable
class NotificationHandle(Protocol):
    # Mutable notification surface returned by NotificationService.notify.
    @property
    def closed(self) -> bool:
        raise NotImplementedError("NotificationHandle.closed must be implemented")

    def progress_infinite(self) -> None:
        raise NotImplementedError("NotificationHandle.progress_infinite must be implemented")

    def progress_done(self) -> None:
        raise NotImplementedError("NotificationHandle.progress_done must be implemented")

    def update_message(self, message: str) -> None:
        raise NotImplementedError("NotificationHandle.update_message must be implemented")

    def update_severity(self, severity: Severity) -> None:
        raise NotImplementedError("NotificationHandle.update_severity must be implemented")

    def update_actions(self, actions: Sequence[NotificationAction]) -> None:
        raise NotImplementedError("NotificationHandle.update_actions must be implemented")


@runtime_checkable
class NotificationService(Protocol):
    def notify(self, *, severity: Severity, message: str) -> NotificationHandle:
        raise NotImplementedError("NotificationService.notify must be implemented")

    def prompt(
        self,
        *,
        severity: Severity,
        message: str,
        actions: Sequence[NotificationAction],
        sticky: bool = False,
    ) -> None:
        raise NotImplementedError("NotificationService.prompt must be implemented")

    def error(self, message: str) -> None:
        raise NotImplementedError("NotificationService.error must be implemented")
