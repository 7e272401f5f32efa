"""Order number generation.

Numbers look like ``RG-1718035200123-7QX2``: a prefix, the epoch time in
milliseconds, and a random base-36 suffix. Two checkouts in the same
millisecond collide with probability 1 / 36**4; the ledger still rejects a
duplicate if one ever happens.
"""

import secrets
import string
import time

from checkout.config import get_order_number_prefix

_ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 4


def generate_order_number(prefix: str | None = None, now_ms: int | None = None) -> str:
    prefix = prefix or get_order_number_prefix()
    millis = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{millis}-{suffix}"
