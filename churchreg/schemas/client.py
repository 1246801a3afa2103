"""Client registration and management schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class ClientCreateRequest(BaseModel):
    """POST /v1/clients request."""

    responsible_name: str
    organization_name: str
    email: str
    tax_id: str
    address: str


class ClientUpdateRequest(BaseModel):
    """PUT /v1/clients/{id} request - omitted or null fields stay unchanged."""

    responsible_name: str | None = None
    organization_name: str | None = None
    email: str | None = None
    tax_id: str | None = None
    address: str | None = None
    access_key: str | None = None


class ClientStatusRequest(BaseModel):
    """PATCH /v1/clients/{id}/status request."""

    status: Literal["ativo", "inativo"]


class ProvisionResult(BaseModel):
    """Outcome of a successful registration. The only place the key is exposed."""

    message: str
    access_key: str
    client_id: int
    database_name: str


class AccessKeyResponse(BaseModel):
    """PUT /v1/clients/{id} response."""

    message: str
    access_key: str


class MessageResponse(BaseModel):
    message: str


class ClientOut(BaseModel):
    """Registry row as returned by the API (never the plaintext key)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    responsible_name: str
    organization_name: str
    email: str
    tax_id: str
    address: str
    database_name: str
    status: str
    created_at: datetime | None = None


class ClientListItem(ClientOut):
    """Listing row enriched with live credential fields (None when unavailable)."""

    access_key_hash: str | None = None
    verification_code: str | None = None
