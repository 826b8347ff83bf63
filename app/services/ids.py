"""
Per-tenant record id generation
"""

import time
from typing import Iterable

from app.schemas.guest import GuestRecord


def next_record_id(records: Iterable[GuestRecord]) -> str:
    """Return max(integer ids) + 1 as a string; ids that are not integers are ignored."""
    highest = 0
    for record in records:
        try:
            value = int(str(record.id))
        except (TypeError, ValueError):
            continue
        if value > highest:
            highest = value
    return str(highest + 1)


def timestamp_record_id() -> str:
    """Fallback id used when existing records cannot be scanned.

    Two submissions for the same tenant within the same millisecond get the
    same id.
    """
    return str(int(time.time() * 1000))
