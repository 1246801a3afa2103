"""Error taxonomy for client registration and tenant lifecycle operations.

Each error carries the HTTP status class it is reported with; ``main.py``
translates them into ``{"message": ...}`` responses.
"""

from fastapi import status


class ClientRegistryError(Exception):
    """Base class for errors reported to the caller with a short message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ClientRegistryError):
    """Missing or malformed input. Raised before any mutation."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ClientRegistryError):
    """Organization (or its derived database name) is already registered."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ClientRegistryError):
    """Referenced client id does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ProvisioningError(ClientRegistryError):
    """A database, schema or seed-row step failed.

    Steps completed before the failure are not rolled back; the registry row
    and any partially created tenant database are left for inspection.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class InternalError(ClientRegistryError):
    """Unexpected driver-level failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
