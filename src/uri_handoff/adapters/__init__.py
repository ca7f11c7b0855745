from .catalog import CatalogLifecycleResolver
from .confirmation import ConsoleConfirmation, StaticConfirmation
from .notification import ConsoleNotificationService, RecordedNotification
from .persistence import InMemoryScopedStore, JsonFileScopedStore

# Reference adapters for the handoff ports.
__all__ = [
    "CatalogLifecycleResolver",
    "ConsoleConfirmation",
    "ConsoleNotificationService",
    "InMemoryScopedStore",
    "JsonFileScopedStore",
    "RecordedNotification",
    "StaticConfirmation",
]
