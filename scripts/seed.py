#!/usr/bin/env python3
"""
Seed script: registers a demo church client and provisions its database.
Run after migrations: python scripts/seed.py
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from churchreg.config import settings
from churchreg.database import dispose_engine, get_session_maker, init_db
from churchreg.errors import ConflictError
from churchreg.provisioning.provisioner import TenantProvisioner
from churchreg.provisioning.tenant_databases import get_tenant_databases
from churchreg.schemas.client import ClientCreateRequest


DEMO_CLIENT = ClientCreateRequest(
    responsible_name="Jane Doe",
    organization_name="Grace Chapel",
    email="jane@x.org",
    tax_id="11.111/1",
    address="1 Main St",
)


async def seed():
    if settings.env in {"dev", "test"}:
        await init_db()

    try:
        async with get_session_maker()() as session:
            provisioner = TenantProvisioner(session, get_tenant_databases())
            result = await provisioner.provision(DEMO_CLIENT)
    except ConflictError:
        print("Client already exists, nothing to do.")
        return
    finally:
        await dispose_engine()

    print("Seed complete!")
    print(f"Client id: {result.client_id}")
    print(f"Database: {result.database_name}")
    print(f"Access key: {result.access_key}")
    print(f"Login as {DEMO_CLIENT.email} with the access key as password.")


if __name__ == "__main__":
    asyncio.run(seed())
