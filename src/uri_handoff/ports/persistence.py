from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable


class StorageScope(str, Enum):
    GLOBAL = "global"
    WORKSPACE = "workspace"
    SESSION = "session"


@runtime_checkable
class ScopedStore(Protocol):
    # Process-external key/value storage partitioned by scope.
    def get(self, key: str, scope: StorageScope) -> str | None:
        raise NotImplementedError("ScopedStore.get must be implemented")

    def put(self, key: str, blob: str, scope: StorageScope) -> None:
        raise NotImplementedError("ScopedStore.put must be implemented")

    def remove(self, key: str, scope: StorageScope) -> None:
        raise NotImplementedError("ScopedStore.remove must be implemented")
