"""Random access keys and verification codes."""

import secrets
import string

from churchreg.config import settings

ACCESS_KEY_ALPHABET = string.ascii_letters + string.digits
VERIFICATION_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_token(length: int, alphabet: str = ACCESS_KEY_ALPHABET) -> str:
    """Return ``length`` characters drawn independently and uniformly from ``alphabet``."""
    if length < 1:
        raise ValueError("length must be a positive integer")
    if not alphabet:
        raise ValueError("alphabet must not be empty")
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_access_key(length: int | None = None) -> str:
    if length is None:
        length = settings.access_key_length
    return generate_token(length, ACCESS_KEY_ALPHABET)


def generate_verification_code(length: int | None = None) -> str:
    if length is None:
        length = settings.verification_code_length
    return generate_token(length, VERIFICATION_CODE_ALPHABET)
