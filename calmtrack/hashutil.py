"""Salted hashing for key identities captured from the OS."""

import hashlib
from typing import Literal


def hash_str(value: str, purpose: Literal["key"], salt: str) -> str:
    """Generate purpose-scoped salted SHA-256 hash of a string.

    Uses the formula: H = sha256(salt_bytes || purpose || 0x00 || utf8(value))

    Args:
        value: The string to hash (never logged)
        purpose: The purpose domain for hash separation
        salt: Hex-encoded salt from ``Config.hashing.salt``

    Returns:
        Hex SHA-256 digest string
    """
    hasher = hashlib.sha256()
    hasher.update(bytes.fromhex(salt))
    hasher.update(purpose.encode("utf-8"))
    hasher.update(b"\x00")
    hasher.update(value.encode("utf-8"))

    return hasher.hexdigest()


def key_token(value: str, salt: str) -> str:
    """Short opaque token standing in for a key identity."""
    return "k:" + hash_str(value, "key", salt)[:16]
