from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

LEVELS: dict[str, int] = {"debug": 10, "info": 20, "warning": 30, "error": 40}


@dataclass(frozen=True, slots=True)
class LogMessage:
    # Structured log payload emitted by handoff components.
    level: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    fields: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.level or not self.message:
            raise ValueError("LogMessage requires non-empty level/message")
        if self.level not in LEVELS:
            raise ValueError(f"LogMessage.level must be one of: {sorted(LEVELS)}")


@runtime_checkable
class LogSink(Protocol):
    def emit(self, message: LogMessage) -> None:
        raise NotImplementedError("LogSink.emit must be implemented")


class NullLogSink:
    def emit(self, message: LogMessage) -> None:
        _ = message


@dataclass(slots=True)
class EventLogger:
    # Emits "<component>.<kind>" events; sink failures never reach the caller.
    component: str
    sink: LogSink = field(default_factory=NullLogSink)
    min_level: str = "info"

    def __post_init__(self) -> None:
        if self.min_level not in LEVELS:
            raise ValueError(f"EventLogger.min_level must be one of: {sorted(LEVELS)}")

    def child(self, component: str) -> EventLogger:
        return EventLogger(component=component, sink=self.sink, min_level=self.min_level)

    def debug(self, kind: str, **fields: object) -> None:
        self._emit("debug", kind, fields)

    def info(self, kind: str, **fields: object) -> None:
        self._emit("info", kind, fields)

    def warning(self, kind: str, **fields: object) -> None:
        self._emit("warning", kind, fields)

    def error(self, kind: str, **fields: object) -> None:
        self._emit("error", kind, fields)

    def _emit(self, level: str, kind: str, fields: dict[str, object]) -> None:
        if LEVELS[level] < LEVELS[self.min_level]:
            return
        try:
            self.sink.emit(
                LogMessage(
                    level=level,
                    message=f"{self.component}.{kind}",
                    timestamp=datetime.now(tz=UTC),
                    fields=dict(fields),
                )
            )
        except Exception:
            return
