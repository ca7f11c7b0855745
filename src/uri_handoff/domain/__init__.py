from .errors import CarryDecodeError, HandoffError, InstallError, InvalidSubscriberIdError
from .messages import Message, PackageRecord, PendingEntry, SubscriberRecord, render_for_prompt
from .subscriber_id import is_subscriber_id, subscriber_key

# Public domain exports keep imports explicit across layers.
__all__ = [
    "CarryDecodeError",
    "HandoffError",
    "InstallError",
    "InvalidSubscriberIdError",
    "Message",
    "PackageRecord",
    "PendingEntry",
    "SubscriberRecord",
    "is_subscriber_id",
    "render_for_prompt",
    "subscriber_key",
]
