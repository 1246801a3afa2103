"""Admin API key authentication."""

import hashlib
import hmac

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from churchreg.config import settings


API_KEY_HEADER = APIKeyHeader(name="Authorization", auto_error=False)


def hash_api_key(api_key: str) -> str:
    """Hash API key with salt for comparison against the configured digest."""
    return hashlib.sha256(
        f"{settings.api_key_hash_salt}:{api_key}".encode()
    ).hexdigest()


async def require_admin(auth_header: str | None = Depends(API_KEY_HEADER)) -> None:
    """Check the Bearer admin key when ``admin_api_key_hash`` is configured."""
    if not settings.admin_api_key_hash:
        return
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
        )
    api_key = auth_header[7:].strip()
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
        )
    if not hmac.compare_digest(hash_api_key(api_key), settings.admin_api_key_hash):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )
