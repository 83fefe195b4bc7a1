"""
Identifier generation for locally created rows.

Ids combine a base36 millisecond timestamp with a short random suffix. They
are unique enough for a single account with low write volume; there is no
cross-machine collision guarantee.
"""

import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def new_short_id(length: int = 6) -> str:
    """Random base36 string, used as the id suffix and for shareable links."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def new_id() -> str:
    """Return an opaque id such as ``'m1k2x3y4z-4f9q0a'``."""
    timestamp = _to_base36(time.time_ns() // 1_000_000)
    return f"{timestamp}-{new_short_id()}"


def new_event_id() -> str:
    return f"event_{new_id()}"


def new_member_id() -> str:
    return f"member_{new_id()}"


def new_assignment_id() -> str:
    return f"assign_{new_id()}"


def new_traffic_id() -> str:
    return f"traffic_{new_id()}"


def new_supervisor_id() -> str:
    return f"super_{new_id()}"


def new_category_id() -> str:
    return f"category_{new_id()}"


def new_task_id() -> str:
    return f"task_{new_id()}"
