"""Unit tests for salted key hashing."""

import hashlib

from calmtrack.hashutil import hash_str, key_token

SALT = "00" * 32


def test_hash_matches_formula():
    expected = hashlib.sha256(bytes.fromhex(SALT) + b"key" + b"\x00" + b"a").hexdigest()

    assert hash_str("a", "key", SALT) == expected


def test_salt_changes_hash():
    assert hash_str("a", "key", SALT) != hash_str("a", "key", "11" * 32)


def test_key_token_shape():
    token = key_token("a", SALT)

    assert token.startswith("k:")
    assert len(token) == 18
    assert key_token("a", SALT) == token
