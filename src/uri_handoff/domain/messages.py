from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit


@dataclass(frozen=True, slots=True)
class Message:
    # Addressed URI; the authority names the target subscriber.
    uri: str

    def __post_init__(self) -> None:
        if not isinstance(self.uri, str) or not self.uri:
            raise ValueError("Message.uri must be a non-empty string")

    @classmethod
    def parse(cls, text: str) -> Message:
        return cls(uri=text.strip())

    @property
    def authority(self) -> str:
        return urlsplit(self.uri).netloc

    def to_json(self) -> dict[str, str]:
        # Components are informational; revival reads `uri` so the text round-trips exactly.
        parts = urlsplit(self.uri)
        return {
            "uri": self.uri,
            "scheme": parts.scheme,
            "authority": parts.netloc,
            "path": parts.path,
            "query": parts.query,
            "fragment": parts.fragment,
        }

    def __str__(self) -> str:
        return self.uri


@dataclass(frozen=True, slots=True)
class PendingEntry:
    # Buffered message plus its arrival time on the retention clock (seconds).
    timestamp: float
    message: Message


@dataclass(frozen=True, slots=True)
class SubscriberRecord:
    # Installed subscriber as reported by the lifecycle resolver.
    id: str
    name: str
    display_name: str | None = None

    @property
    def label(self) -> str:
        return self.display_name or self.name


@dataclass(frozen=True, slots=True)
class PackageRecord:
    # Installable package found in the catalog for a subscriber id.
    id: str
    name: str
    display_name: str | None = None
    version: str | None = None

    @property
    def label(self) -> str:
        return self.display_name or self.name


def render_for_prompt(message: Message, *, max_length: int = 40, head: int = 30, tail: int = 5) -> str:
    # Long URIs are shortened to head + "..." + tail to bound prompt size.
    text = str(message)
    if len(text) > max_length:
        return f"{text[:head]}...{text[len(text) - tail:]}"
    return text
