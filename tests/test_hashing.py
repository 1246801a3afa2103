"""Unit tests for access key hashing."""

import pytest

from churchreg.auth.hashing import MAX_SECRET_BYTES, hash_secret, verify_secret


def test_round_trip():
    """A digest verifies its own plaintext."""
    digest = hash_secret("Abc123xyz456QWE")
    assert verify_secret("Abc123xyz456QWE", digest)


def test_other_plaintext_rejected():
    """A digest does not verify a different plaintext."""
    digest = hash_secret("first-key")
    assert not verify_secret("second-key", digest)


def test_salted_with_fixed_cost():
    """Hashing twice yields different bcrypt digests with cost factor 10."""
    first = hash_secret("same")
    second = hash_secret("same")
    assert first != second
    assert first.startswith("$2b$10$")


def test_unrecognised_digest():
    """A digest that is not bcrypt never verifies."""
    assert not verify_secret("plain", "not-a-hash")


def test_secret_at_bcrypt_limit():
    """A secret of exactly the bcrypt limit still hashes and verifies."""
    secret = "k" * MAX_SECRET_BYTES
    assert verify_secret(secret, hash_secret(secret))


def test_secret_past_bcrypt_limit_rejected():
    """Secrets bcrypt would silently truncate are refused."""
    with pytest.raises(ValueError):
        hash_secret("k" * MAX_SECRET_BYTES + "x")
    with pytest.raises(ValueError):
        hash_secret("é" * 37)
