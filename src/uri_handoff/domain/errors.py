from __future__ import annotations


class HandoffError(Exception):
    # Base class for uri_handoff domain failures.
    pass


class InvalidSubscriberIdError(HandoffError, ValueError):
    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid subscriber id: {value!r}")
        self.value = value


class InstallError(HandoffError):
    # Raised by lifecycle resolvers when a package cannot be installed.
    pass


class CarryDecodeError(HandoffError):
    # Persisted restart carry could not be revived into a Message.
    pass
