# uri_handoff: deferred delivery of subscriber-addressed URIs.

from uri_handoff.domain import Message, is_subscriber_id, subscriber_key
from uri_handoff.services.service import HandoffService

__all__ = ["HandoffService", "Message", "is_subscriber_id", "subscriber_key"]
