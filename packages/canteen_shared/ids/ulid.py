"""ULID generation helpers.

Row ids are canonical 26-character Crockford Base32 ULIDs so they sort by
creation time.
"""

from __future__ import annotations

import secrets
import time
from datetime import UTC, datetime

_ULID_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
ULID_STR_LENGTH = 26


def generate_ulid_str(*, timestamp_ms: int | None = None) -> str:
    """Generate a new ULID string.

    The timestamp occupies the high 48 bits (milliseconds since epoch) and the
    remaining 80 bits are cryptographically secure random entropy.
    """
    ts_ms = int(time.time() * 1000) if timestamp_ms is None else int(timestamp_ms)
    if ts_ms < 0 or ts_ms >= (1 << 48):
        raise ValueError("timestamp_ms out of ULID 48-bit range")

    entropy = int.from_bytes(secrets.token_bytes(10), byteorder="big", signed=False)
    number = (ts_ms << 80) | entropy
    chars: list[str] = []
    for _ in range(ULID_STR_LENGTH):
        number, remainder = divmod(number, 32)
        chars.append(_ULID_ALPHABET[remainder])
    return "".join(reversed(chars))


def ulid_at(moment: datetime) -> str:
    """Generate a ULID whose time prefix is ``moment`` (naive means UTC)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return generate_ulid_str(timestamp_ms=int(moment.timestamp() * 1000))
