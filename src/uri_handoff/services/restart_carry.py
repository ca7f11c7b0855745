from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, ValidationError

from uri_handoff.domain.errors import CarryDecodeError
from uri_handoff.domain.messages import Message
from uri_handoff.observability.logging import EventLogger
from uri_handoff.ports.persistence import ScopedStore, StorageScope
from uri_handoff.ports.triggers import RestartTrigger

CARRY_KEY = "uri_handoff.uri_to_handle"


class _CarriedMessage(BaseModel):
    # Only `uri` is needed to revive; decomposed components are ignored on read.
    uri: str

    model_config = ConfigDict(extra="ignore")


def decode_carry(blob: str) -> Message:
    try:
        carried = _CarriedMessage.model_validate_json(blob)
        return Message(uri=carried.uri)
    except (ValidationError, ValueError) as exc:
        raise CarryDecodeError(f"Cannot revive carried URI: {type(exc).__name__}") from exc


class RestartCarry:
    # Holds at most one message across a deliberate host restart.
    def __init__(
        self,
        *,
        store: ScopedStore,
        restart: RestartTrigger,
        key: str = CARRY_KEY,
        scope: StorageScope = StorageScope.WORKSPACE,
        logger: EventLogger | None = None,
    ) -> None:
        self._store = store
        self._restart = restart
        self._key = key
        self._scope = scope
        self._log = logger or EventLogger(component="carry")

    def persist(self, message: Message) -> None:
        self._store.put(self._key, json.dumps(message.to_json(), separators=(",", ":")), self._scope)
        self._log.info("persisted", subscriber=message.authority)

    async def persist_and_restart(self, message: Message) -> None:
        self.persist(message)
        self._log.info("restart_requested", subscriber=message.authority)
        await self._restart.restart_host()

    def consume(self) -> Message | None:
        blob = self._store.get(self._key, self._scope)
        if blob is None:
            return None
        self._store.remove(self._key, self._scope)
        try:
            message = decode_carry(blob)
        except CarryDecodeError as exc:
            # A corrupt carry must not break startup; treat it as absent.
            self._log.warning("malformed", error=str(exc))
            return None
        self._log.info("consumed", subscriber=message.authority)
        return message
