"""Meeting identifier derivation.

A group's meeting on the conferencing server is identified by the SHA-1 of
the group id concatenated with the tenant's shared secret (no separator).
"""

from __future__ import annotations

import hashlib


def derive_meeting_id(group_id: str, secret: str) -> str:
    """Return the 40-character hex meeting identifier for a group.

    Raises:
        TypeError: If either argument is not a string.
    """
    if not isinstance(group_id, str) or not isinstance(secret, str):
        raise TypeError("group_id and secret must both be str")
    return hashlib.sha1((group_id + secret).encode("utf-8")).hexdigest()
