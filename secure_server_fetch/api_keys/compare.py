"""
Constant-Time Comparison
========================
Fixed-time equality for secrets.
"""

import hmac
from typing import Union

Secret = Union[str, bytes]


def _to_bytes(value: Secret) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def constant_time_equal(a: Secret, b: Secret) -> bool:
    """
    Compare two secrets without leaking where they first differ.

    When the lengths differ a full-length comparison of ``a`` against itself
    still runs, so a length mismatch costs the same as a content mismatch.

    Args:
        a: Known secret
        b: Candidate secret

    Returns:
        True if both values are byte-for-byte identical
    """
    a_bytes = _to_bytes(a)
    b_bytes = _to_bytes(b)

    if len(a_bytes) != len(b_bytes):
        hmac.compare_digest(a_bytes, a_bytes)
        return False

    return hmac.compare_digest(a_bytes, b_bytes)
