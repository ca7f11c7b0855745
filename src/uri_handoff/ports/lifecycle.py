from __future__ import annotations

from typing import Protocol, runtime_checkable

from uri_handoff.domain.messages import PackageRecord, SubscriberRecord


# Lifecycle resolver isolates install/enable state of subscribers from the routing core.
@runtime_checkable
class LifecycleResolver(Protocol):
    async def resolve_active(self, address: str) -> SubscriberRecord | None:
        """Return the subscriber when the running host can activate it, else None."""
        raise NotImplementedError("LifecycleResolver is a port; use a concrete adapter.")

    async def get_installed(self, address: str) -> SubscriberRecord | None:
        """Return the installed subscriber for the id regardless of enablement."""
        raise NotImplementedError("LifecycleResolver is a port; use a concrete adapter.")

    def is_enabled(self, record: SubscriberRecord) -> bool:
        raise NotImplementedError("LifecycleResolver is a port; use a concrete adapter.")

    async def set_enabled(self, record: SubscriberRecord, enabled: bool) -> None:
        raise NotImplementedError("LifecycleResolver is a port; use a concrete adapter.")

    async def get_compatible_installable(self, address: str) -> PackageRecord | None:
        """Look up a catalog package compatible with the running host."""
        raise NotImplementedError("LifecycleResolver is a port; use a concrete adapter.")

    async def install(self, package: PackageRecord) -> None:
        """Install the package; raise InstallError (or any exception) on failure."""
        raise NotImplementedError("LifecycleResolver is a port; use a concrete adapter.")
