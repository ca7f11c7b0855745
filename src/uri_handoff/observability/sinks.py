from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from uri_handoff.observability.logging import LogMessage, LogSink, NullLogSink


class StdoutLogSink:
    # Writes to the stream current at emit time so redirected stdout is honoured.
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def emit(self, message: LogMessage) -> None:
        print(encode_log_line(message), file=self._stream or sys.stdout)


class JsonlLogSink:
    # File-backed structured log sink; appends one record per line.
    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")

    def emit(self, message: LogMessage) -> None:
        self._file.write(encode_log_line(message) + "\n")
        self._file.flush()

    def close(self) -> None:
        self._file.close()


@dataclass(slots=True)
class FanoutLogSink:
    sinks: list[LogSink] = field(default_factory=list)

    def emit(self, message: LogMessage) -> None:
        for sink in self.sinks:
            sink.emit(message)

    def close(self) -> None:
        for sink in self.sinks:
            close_log_sink(sink)


def build_log_sink(exporters: list[dict[str, object]]) -> LogSink:
    # Exporter settings: [{"kind": "stdout"}, {"kind": "jsonl", "settings": {"path": ...}}].
    sinks: list[LogSink] = []
    for exporter in exporters:
        kind = exporter.get("kind")
        if kind == "stdout":
            sinks.append(StdoutLogSink())
            continue
        if kind != "jsonl":
            raise ValueError(f"Unsupported log exporter kind: {kind!r}")
        settings = exporter.get("settings", {})
        path = settings.get("path") if isinstance(settings, dict) else None
        if not isinstance(path, str) or not path:
            raise ValueError("jsonl exporter requires settings.path")
        sinks.append(JsonlLogSink(Path(path)))
    if not sinks:
        return NullLogSink()
    if len(sinks) == 1:
        return sinks[0]
    return FanoutLogSink(sinks=sinks)


def close_log_sink(sink: object) -> None:
    close = getattr(sink, "close", None)
    if callable(close):
        close()


def log_to_dict(message: LogMessage) -> dict[str, object]:
    # Event name first: lines are grepped by "<component>.<kind>".
    return {
        "event": message.message,
        "level": message.level,
        "ts": message.timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "fields": message.fields,
    }


def encode_log_line(message: LogMessage) -> str:
    # Non-JSON field values (enums, paths) fall back to str().
    return json.dumps(log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str)
