from __future__ import annotations

import json
import os
from pathlib import Path

from uri_handoff.ports.persistence import ScopedStore, StorageScope


class InMemoryScopedStore(ScopedStore):
    # In-memory adapter for deterministic local runs and tests; does not survive the process.
    def __init__(self) -> None:
        self._store: dict[tuple[StorageScope, str], str] = {}

    def get(self, key: str, scope: StorageScope) -> str | None:
        return self._store.get((scope, key))

    def put(self, key: str, blob: str, scope: StorageScope) -> None:
        self._store[(scope, key)] = blob

    def remove(self, key: str, scope: StorageScope) -> None:
        self._store.pop((scope, key), None)


class JsonFileScopedStore(ScopedStore):
    # File-backed adapter: {"<scope>": {"<key>": "<blob>"}} rewritten atomically on each change.
    def __init__(self, path: Path) -> None:
        self._path = path

    def get(self, key: str, scope: StorageScope) -> str | None:
        value = self._read().get(scope.value, {}).get(key)
        return value if isinstance(value, str) else None

    def put(self, key: str, blob: str, scope: StorageScope) -> None:
        data = self._read()
        data.setdefault(scope.value, {})[key] = blob
        self._write(data)

    def remove(self, key: str, scope: StorageScope) -> None:
        data = self._read()
        bucket = data.get(scope.value, {})
        if key not in bucket:
            return
        del bucket[key]
        if not bucket:
            data.pop(scope.value, None)
        self._write(data)

    def _read(self) -> dict[str, dict[str, object]]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            # Unreadable state is treated as empty rather than blocking startup.
            return {}
        if not isinstance(raw, dict):
            return {}
        return {scope: bucket for scope, bucket in raw.items() if isinstance(bucket, dict)}

    def _write(self, data: dict[str, dict[str, object]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_text(json.dumps(data, sort_keys=True, indent=2), encoding="utf-8")
        os.replace(tmp, self._path)
