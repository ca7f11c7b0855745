from .confirmation import ConfirmationService
from .handler import MessageHandler
from .lifecycle import LifecycleResolver
from .notification import NotificationAction, NotificationHandle, NotificationService, Severity
from .persistence import ScopedStore, StorageScope
from .triggers import ActivationTrigger, RestartTrigger

# Public port exports keep wiring explicit at composition time.
__all__ = [
    "ActivationTrigger",
    "ConfirmationService",
    "LifecycleResolver",
    "MessageHandler",
    "NotificationAction",
    "NotificationHandle",
    "NotificationService",
    "RestartTrigger",
    "ScopedStore",
    "Severity",
    "StorageScope",
]
