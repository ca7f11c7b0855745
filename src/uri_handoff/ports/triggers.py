from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ActivationTrigger(Protocol):
    # Fire-and-forget: the subscriber is expected to call register() eventually.
    async def request_activation(self, address: str) -> None:
        raise NotImplementedError("ActivationTrigger.request_activation must be implemented")


@runtime_checkable
class RestartTrigger(Protocol):
    # May terminate the current process before returning.
    async def restart_host(self) -> None:
        raise NotImplementedError("RestartTrigger.restart_host must be implemented")
