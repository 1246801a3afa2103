"""Update, lock/unlock, delete and list provisioned clients.

The registry row and the client database are not covered by one constraint
system. Every operation resolves the database name from the registry first
and fails fast when it is missing; registry changes are committed before
the client database is touched, and a later failure is reported without
undoing them.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from churchreg.auth.hashing import MAX_SECRET_BYTES, hash_secret
from churchreg.config import settings
from churchreg.errors import (
    ConflictError,
    NotFoundError,
    ProvisioningError,
    ValidationError,
)
from churchreg.models import Client, ClientStatus, User
from churchreg.provisioning.provisioner import TENANT_FAILURES, strip_fields
from churchreg.provisioning.tenant_databases import TenantDatabaseManager
from churchreg.schemas.client import ClientListItem, ClientOut, ClientUpdateRequest
from churchreg.storage import repositories
from churchreg.utils.credentials import generate_access_key

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("responsible_name", "organization_name", "email", "tax_id", "address")
SETTABLE_STATUSES = (ClientStatus.ACTIVE.value, ClientStatus.INACTIVE.value)
# An unset or malformed database name surfaces as ValueError from the manager
LOOKUP_FAILURES = TENANT_FAILURES + (ValueError,)


class TenantLifecycleManager:
    """Keeps a client's registry row and its database consistent."""

    def __init__(self, db: AsyncSession, tenant_databases: TenantDatabaseManager):
        self.db = db
        self.tenant_databases = tenant_databases

    async def get(self, client_id: int) -> Client:
        client = await repositories.get_client(self.db, client_id)
        if client is None:
            raise NotFoundError("Client not found.")
        return client

    async def update(self, client_id: int, changes: ClientUpdateRequest) -> str:
        """
        Merge ``changes`` into the client and rotate its access key.

        Supplied values are stripped like registration fields. Returns the
        plaintext access key: the supplied one, or a freshly generated key
        when none was given.
        """
        client = await self.get(client_id)
        if not client.database_name:
            raise ProvisioningError("Client has no database configured.")

        fields = strip_fields({
            name: value
            for name, value in changes.model_dump(exclude_unset=True).items()
            if value is not None
        })
        access_key = fields.pop("access_key", None)
        if access_key is None:
            access_key = generate_access_key()
        elif not access_key:
            raise ValidationError("Field 'access_key' must not be blank.")
        elif len(access_key.encode("utf-8")) > MAX_SECRET_BYTES:
            raise ValidationError(
                f"Field 'access_key' must be at most {MAX_SECRET_BYTES} bytes."
            )
        for name in PROFILE_FIELDS:
            if name in fields and not fields[name]:
                raise ValidationError(f"Field '{name}' must not be blank.")

        new_name = fields.get("organization_name")
        if new_name is not None and new_name != client.organization_name:
            other = await repositories.find_client_by_organization_name(self.db, new_name)
            if other is not None and other.id != client.id:
                raise ConflictError("A client with this organization name already exists.")

        previous_email = client.email
        database_name = client.database_name
        responsible_name = fields.get("responsible_name", client.responsible_name)
        email = fields.get("email", client.email)
        access_key_hash = hash_secret(access_key)

        try:
            matched = await repositories.update_client(
                self.db, client_id, **fields, access_key_hash=access_key_hash
            )
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            raise ConflictError("A client with this organization name already exists.") from exc
        if not matched:
            raise NotFoundError("Client not found.")
        logger.info(f"Client {client_id} updated: fields={sorted(fields)}, access key rotated")

        try:
            async with self.tenant_databases.connect(database_name) as conn:
                result = await conn.execute(
                    update(User)
                    .where(User.email == previous_email)
                    .values(name=responsible_name, email=email, password=access_key_hash)
                )
                await conn.commit()
        except LOOKUP_FAILURES as exc:
            logger.exception(f"Updating users in database {database_name} failed for client {client_id}")
            raise ProvisioningError("Error updating client.") from exc
        if result.rowcount == 0:
            logger.warning(f"No user with the client email in database {database_name}")

        return access_key

    async def set_status(self, client_id: int, status: str) -> Client:
        """Lock or unlock a client. Only the registry row changes."""
        status = getattr(status, "value", status)
        if status not in SETTABLE_STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(SETTABLE_STATUSES)}.")
        client = await self.get(client_id)
        await repositories.update_client(self.db, client_id, status=status)
        await self.db.commit()
        await self.db.refresh(client)
        logger.info(f"Client {client_id} status set to {status}")
        return client

    async def delete(self, client_id: int) -> None:
        """
        Drop the client database, then delete the registry row.

        An interrupted delete leaves the row behind pointing at a dropped
        database, never a database with no registry entry.

        Unlike ``update``, a row without a database name does not fail: there
        is nothing to drop, so only the registry row is removed. Otherwise the
        row could never be cleaned up.
        """
        client = await self.get(client_id)
        database_name = client.database_name

        if database_name:
            try:
                await self.tenant_databases.drop_database(database_name)
            except LOOKUP_FAILURES as exc:
                logger.exception(f"Dropping database {database_name} failed for client {client_id}")
                raise ProvisioningError("Error deleting client.") from exc
        else:
            logger.warning(f"Client {client_id} has no database name, skipping drop")

        deleted = await repositories.delete_client(self.db, client_id)
        await self.db.commit()
        if not deleted:
            raise NotFoundError("Client not found or already deleted.")
        logger.info(f"Client {client_id} and database {database_name} deleted")

    async def list_clients(self) -> list[ClientListItem]:
        """
        List every client with its live credential hash.

        A client whose database cannot be read is still listed, with both
        credential fields set to None.
        """
        items = []
        for client in await repositories.list_clients(self.db):
            # Built from ClientOut so registry credential columns never leak in
            item = ClientListItem(**ClientOut.model_validate(client).model_dump())
            if settings.listing_includes_credentials:
                try:
                    item.access_key_hash = await self._live_credential(client)
                    item.verification_code = client.verification_code
                except LOOKUP_FAILURES as exc:
                    logger.warning(
                        f"Credential lookup failed for client {client.id} "
                        f"({client.database_name}): {exc!r}"
                    )
            items.append(item)
        return items

    async def _live_credential(self, client: Client) -> str | None:
        async with self.tenant_databases.connect(client.database_name) as conn:
            result = await conn.execute(
                select(User.password).where(User.email == client.email).limit(1)
            )
            return result.scalar_one_or_none()
