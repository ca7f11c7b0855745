# Observability package: structured log messages and their sinks.

from uri_handoff.observability.logging import EventLogger, LogMessage, LogSink, NullLogSink
from uri_handoff.observability.sinks import (
    FanoutLogSink,
    JsonlLogSink,
    StdoutLogSink,
    build_log_sink,
    close_log_sink,
    encode_log_line,
)

__all__ = [
    "EventLogger",
    "FanoutLogSink",
    "JsonlLogSink",
    "LogMessage",
    "LogSink",
    "NullLogSink",
    "StdoutLogSink",
    "build_log_sink",
    "close_log_sink",
    "encode_log_line",
]
