from __future__ import annotations

from typing import Protocol, runtime_checkable

from uri_handoff.domain.messages import Message


@runtime_checkable
class MessageHandler(Protocol):
    # Live callback registered by an active subscriber.
    async def handle(self, message: Message) -> bool:
        """Deliver the message; return True when the subscriber handled it."""
        raise NotImplementedError("MessageHandler is a port; use a concrete handler.")
