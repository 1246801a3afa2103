"""One-way hashing for access keys."""

from passlib.context import CryptContext

from churchreg.config import settings

# bcrypt ignores every byte past this
MAX_SECRET_BYTES = 72

secret_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_secret(plaintext: str) -> str:
    """Hash ``plaintext``; secrets bcrypt would truncate raise ValueError."""
    if len(plaintext.encode("utf-8")) > MAX_SECRET_BYTES:
        raise ValueError(f"secret longer than {MAX_SECRET_BYTES} bytes")
    return secret_context.hash(plaintext)


def verify_secret(plaintext: str, digest: str) -> bool:
    """Check ``plaintext`` against a stored digest; unknown digest formats never match."""
    try:
        return secret_context.verify(plaintext, digest)
    except ValueError:
        return False
