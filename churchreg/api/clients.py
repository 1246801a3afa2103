"""Client registration and management endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from churchreg.database import get_db
from churchreg.provisioning.lifecycle import TenantLifecycleManager
from churchreg.provisioning.provisioner import TenantProvisioner
from churchreg.provisioning.tenant_databases import (
    TenantDatabaseManager,
    get_tenant_databases,
)
from churchreg.schemas.client import (
    AccessKeyResponse,
    ClientCreateRequest,
    ClientListItem,
    ClientOut,
    ClientStatusRequest,
    ClientUpdateRequest,
    MessageResponse,
    ProvisionResult,
)

logger = logging.getLogger(__name__)

router = APIRouter()

DbDep = Annotated[AsyncSession, Depends(get_db)]
TenantDatabasesDep = Annotated[TenantDatabaseManager, Depends(get_tenant_databases)]


def get_lifecycle(db: DbDep, tenant_databases: TenantDatabasesDep) -> TenantLifecycleManager:
    return TenantLifecycleManager(db, tenant_databases)


LifecycleDep = Annotated[TenantLifecycleManager, Depends(get_lifecycle)]


@router.post("/clients", response_model=ProvisionResult)
async def register_client(
    body: ClientCreateRequest,
    db: DbDep,
    tenant_databases: TenantDatabasesDep,
):
    """
    Register a client and provision its database.
    The plaintext access key is returned here and nowhere else.
    """
    return await TenantProvisioner(db, tenant_databases).provision(body)


@router.get("/clients", response_model=list[ClientListItem])
async def list_clients(lifecycle: LifecycleDep):
    """List clients with their live credential hash and verification code."""
    return await lifecycle.list_clients()


@router.get("/clients/{client_id}", response_model=ClientOut)
async def get_client(client_id: int, lifecycle: LifecycleDep):
    return await lifecycle.get(client_id)


@router.put("/clients/{client_id}", response_model=AccessKeyResponse)
async def update_client(client_id: int, body: ClientUpdateRequest, lifecycle: LifecycleDep):
    """Merge profile changes and rotate the access key (generated when omitted)."""
    access_key = await lifecycle.update(client_id, body)
    return AccessKeyResponse(message="Client updated successfully.", access_key=access_key)


@router.patch("/clients/{client_id}/status", response_model=ClientOut)
async def set_client_status(client_id: int, body: ClientStatusRequest, lifecycle: LifecycleDep):
    """Lock (inativo) or unlock (ativo) a client without touching its database."""
    return await lifecycle.set_status(client_id, body.status)


@router.delete("/clients/{client_id}", response_model=MessageResponse)
async def delete_client(client_id: int, lifecycle: LifecycleDep):
    await lifecycle.delete(client_id)
    return MessageResponse(message="Client and its database deleted successfully.")
