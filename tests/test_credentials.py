"""Unit tests for access key and verification code generation."""

import re

import pytest

from churchreg.utils.credentials import (
    ACCESS_KEY_ALPHABET,
    generate_access_key,
    generate_token,
    generate_verification_code,
)


def test_access_key_defaults():
    """Access keys are 15 mixed-case alphanumeric characters."""
    key = generate_access_key()
    assert len(key) == 15
    assert re.fullmatch(r"[A-Za-z0-9]{15}", key)
    assert len(ACCESS_KEY_ALPHABET) == 62


def test_verification_code_defaults():
    """Verification codes are 10 uppercase letters or digits."""
    code = generate_verification_code()
    assert re.fullmatch(r"[A-Z0-9]{10}", code)


def test_configurable_length():
    """Both generators honour an explicit length."""
    assert len(generate_access_key(32)) == 32
    assert len(generate_verification_code(15)) == 15


def test_custom_alphabet():
    """Tokens only use the given alphabet."""
    token = generate_token(50, "ab")
    assert set(token) <= {"a", "b"}


def test_calls_are_independent():
    """Consecutive keys differ."""
    keys = {generate_access_key() for _ in range(20)}
    assert len(keys) == 20


@pytest.mark.parametrize("length,alphabet", [(0, "abc"), (-1, "abc"), (5, "")])
def test_invalid_arguments(length, alphabet):
    """Non-positive length or empty alphabet is rejected."""
    with pytest.raises(ValueError):
        generate_token(length, alphabet)


@pytest.mark.parametrize("generate", [generate_access_key, generate_verification_code])
def test_zero_length_is_not_the_default(generate):
    """An explicit zero length is rejected instead of falling back to the default."""
    with pytest.raises(ValueError):
        generate(0)
