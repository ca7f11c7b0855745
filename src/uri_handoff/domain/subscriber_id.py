from __future__ import annotations

import re

# Two dot-separated segments, each starting with an alphanumeric character.
_SUBSCRIBER_ID = re.compile(r"^[a-z0-9][a-z0-9\-]*\.[a-z0-9][a-z0-9\-]*$", re.IGNORECASE)


def is_subscriber_id(value: object) -> bool:
    if not isinstance(value, str):
        return False
    return _SUBSCRIBER_ID.match(value) is not None


def subscriber_key(value: str) -> str:
    # Subscriber ids compare case-insensitively; registry and buffer use the folded form.
    return value.lower()
