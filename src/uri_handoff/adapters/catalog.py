from __future__ import annotations

import json
from dataclasses import dataclass

from uri_handoff.config.models import CatalogConfig
from uri_handoff.domain.errors import InstallError
from uri_handoff.domain.messages import PackageRecord, SubscriberRecord
from uri_handoff.domain.subscriber_id import subscriber_key
from uri_handoff.ports.lifecycle import LifecycleResolver
from uri_handoff.ports.persistence import ScopedStore, StorageScope

CHANGES_KEY = "uri_handoff.catalog_changes"


@dataclass
class _InstalledState:
    record: SubscriberRecord
    enabled: bool
    loaded: bool


class CatalogLifecycleResolver(LifecycleResolver):
    # Lifecycle resolver over a static catalog of installed and installable subscribers.
    # Installs and enablement changes take effect for the host only after a restart (loaded=False);
    # with a store they are persisted so the next process starts with them loaded.
    def __init__(self, *, store: ScopedStore | None = None) -> None:
        self._store = store
        self._installed: dict[str, _InstalledState] = {}
        self._installable: dict[str, PackageRecord] = {}
        self._install_failures: dict[str, str] = {}

    @classmethod
    def from_config(cls, catalog: CatalogConfig, *, store: ScopedStore | None = None) -> CatalogLifecycleResolver:
        resolver = cls(store=store)
        for item in catalog.installed:
            resolver.add_installed(
                SubscriberRecord(id=item.id, name=item.name, display_name=item.display_name),
                enabled=item.enabled,
                loaded=item.enabled,
            )
        for item in catalog.installable:
            resolver.add_installable(
                PackageRecord(id=item.id, name=item.name, display_name=item.display_name, version=item.version),
                fail_with=item.fail_install,
            )
        resolver._apply_persisted_changes()
        return resolver

    def add_installed(self, record: SubscriberRecord, *, enabled: bool = True, loaded: bool = True) -> None:
        self._installed[subscriber_key(record.id)] = _InstalledState(record=record, enabled=enabled, loaded=loaded)

    def add_installable(self, package: PackageRecord, *, fail_with: str | None = None) -> None:
        key = subscriber_key(package.id)
        self._installable[key] = package
        if fail_with:
            self._install_failures[key] = fail_with

    async def resolve_active(self, address: str) -> SubscriberRecord | None:
        state = self._installed.get(subscriber_key(address))
        if state is None or not state.enabled or not state.loaded:
            return None
        return state.record

    async def get_installed(self, address: str) -> SubscriberRecord | None:
        state = self._installed.get(subscriber_key(address))
        return state.record if state is not None else None

    def is_enabled(self, record: SubscriberRecord) -> bool:
        state = self._installed.get(subscriber_key(record.id))
        return state is not None and state.enabled

    async def set_enabled(self, record: SubscriberRecord, enabled: bool) -> None:
        state = self._installed.get(subscriber_key(record.id))
        if state is None:
            raise KeyError(f"Subscriber '{record.id}' is not installed")
        state.enabled = enabled
        if not enabled:
            state.loaded = False
        self._record_change("enabled" if enabled else "disabled", record)

    async def get_compatible_installable(self, address: str) -> PackageRecord | None:
        return self._installable.get(subscriber_key(address))

    async def install(self, package: PackageRecord) -> None:
        key = subscriber_key(package.id)
        failure = self._install_failures.get(key)
        if failure is not None:
            raise InstallError(failure)
        record = SubscriberRecord(id=package.id, name=package.name, display_name=package.display_name)
        self.add_installed(record, enabled=True, loaded=False)
        self._record_change("installed", record)

    def _record_change(self, kind: str, record: SubscriberRecord) -> None:
        if self._store is None:
            return
        changes = self._load_changes()
        changes.append(
            {"kind": kind, "id": record.id, "name": record.name, "display_name": record.display_name}
        )
        self._store.put(CHANGES_KEY, json.dumps(changes), StorageScope.GLOBAL)

    def _load_changes(self) -> list[dict[str, object]]:
        if self._store is None:
            return []
        blob = self._store.get(CHANGES_KEY, StorageScope.GLOBAL)
        if blob is None:
            return []
        try:
            changes = json.loads(blob)
        except json.JSONDecodeError:
            return []
        if not isinstance(changes, list):
            return []
        return [item for item in changes if isinstance(item, dict)]

    def _apply_persisted_changes(self) -> None:
        for change in self._load_changes():
            record_id = change.get("id")
            name = change.get("name")
            if not isinstance(record_id, str) or not isinstance(name, str):
                continue
            display_name = change.get("display_name")
            record = SubscriberRecord(
                id=record_id,
                name=name,
                display_name=display_name if isinstance(display_name, str) else None,
            )
            key = subscriber_key(record_id)
            kind = change.get("kind")
            if kind == "installed":
                self.add_installed(record, enabled=True, loaded=True)
            elif kind in ("enabled", "disabled") and key in self._installed:
                self._installed[key].enabled = kind == "enabled"
                self._installed[key].loaded = kind == "enabled"
