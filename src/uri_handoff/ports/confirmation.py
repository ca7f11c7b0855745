from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ConfirmationService(Protocol):
    # Consent prompt; must tolerate concurrent calls from independent routing flows.
    async def confirm(self, *, message: str, detail: str, primary_label: str) -> bool:
        raise NotImplementedError("ConfirmationService.confirm must be implemented")
