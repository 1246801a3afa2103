"""Client registration: registry row plus a freshly provisioned database."""

import logging

from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from churchreg.auth.hashing import hash_secret
from churchreg.errors import ConflictError, ProvisioningError, ValidationError
from churchreg.models import ClientStatus, Member, User, UserRole
from churchreg.models.enums import MemberStatus
from churchreg.provisioning.tenant_databases import (
    TenantDatabaseManager,
    TenantDatabaseNotFound,
)
from churchreg.schemas.client import ClientCreateRequest, ProvisionResult
from churchreg.storage.repositories import (
    find_client_by_database_name,
    find_client_by_organization_name,
    insert_client,
)
from churchreg.utils.credentials import generate_access_key, generate_verification_code
from churchreg.utils.naming import (
    MAX_DATABASE_NAME_LENGTH,
    database_name_for,
    is_valid_database_name,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("responsible_name", "organization_name", "email", "tax_id", "address")

# Failures from the driver, the filesystem (SQLite files) or a vanished database
TENANT_FAILURES = (SQLAlchemyError, OSError, TenantDatabaseNotFound)


def strip_fields(values: dict[str, str | None]) -> dict[str, str]:
    """Strip surrounding whitespace; missing values become empty strings."""
    return {name: (value or "").strip() for name, value in values.items()}


def validate_registration(request: ClientCreateRequest) -> ClientCreateRequest:
    """Strip every field and reject the request if any is blank."""
    values = strip_fields({name: getattr(request, name) for name in REQUIRED_FIELDS})
    if not all(values.values()):
        raise ValidationError("All fields are required.")
    return ClientCreateRequest(**values)


class TenantProvisioner:
    """
    Registers a client and builds its database.

    Steps run in order and are not wrapped in one transaction: database
    creation cannot be transactional, so a failure leaves every earlier step
    in place and is reported as ProvisioningError.
    """

    def __init__(self, db: AsyncSession, tenant_databases: TenantDatabaseManager):
        self.db = db
        self.tenant_databases = tenant_databases

    async def provision(self, request: ClientCreateRequest) -> ProvisionResult:
        request = validate_registration(request)
        database_name = database_name_for(request.organization_name)
        if not is_valid_database_name(database_name):
            raise ValidationError(
                "Organization name must contain letters or digits and yield a "
                f"database name of at most {MAX_DATABASE_NAME_LENGTH} characters."
            )

        if await find_client_by_organization_name(self.db, request.organization_name):
            logger.warning(f"Registration rejected, organization exists: {request.organization_name}")
            raise ConflictError("A client with this organization name already exists.")
        if await find_client_by_database_name(self.db, database_name):
            logger.warning(f"Registration rejected, database name in use: {database_name}")
            raise ConflictError(
                "Another organization already uses the database name derived from this name."
            )

        access_key = generate_access_key()
        verification_code = generate_verification_code()
        access_key_hash = hash_secret(access_key)

        client_id = await self._insert_registry_row(
            request, database_name, access_key_hash, verification_code
        )
        logger.info(f"Client {client_id} registered, provisioning database {database_name}")

        await self._step(
            "create database",
            database_name,
            self.tenant_databases.create_database(database_name),
        )
        await self._step(
            "create schema",
            database_name,
            self.tenant_databases.create_schema(database_name),
        )
        await self._step(
            "seed user and member",
            database_name,
            self._seed(database_name, request, access_key_hash),
        )

        logger.info(f"Client {client_id} provisioned in database {database_name}")
        return ProvisionResult(
            message="Client registered, database created and user/member linked.",
            access_key=access_key,
            client_id=client_id,
            database_name=database_name,
        )

    async def _insert_registry_row(
        self,
        request: ClientCreateRequest,
        database_name: str,
        access_key_hash: str,
        verification_code: str,
    ) -> int:
        try:
            client = await insert_client(
                self.db,
                responsible_name=request.responsible_name,
                organization_name=request.organization_name,
                email=request.email,
                tax_id=request.tax_id,
                address=request.address,
                database_name=database_name,
                access_key_hash=access_key_hash,
                verification_code=verification_code,
                status=ClientStatus.PENDING.value,
            )
            await self.db.commit()
        except IntegrityError as exc:
            # Lost the race against a concurrent registration of the same names
            await self.db.rollback()
            logger.warning(f"Registry insert conflict for {request.organization_name}: {exc.orig}")
            raise ConflictError(
                "A client with this organization or database name already exists."
            ) from exc
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception(f"Registry insert failed for {request.organization_name}")
            raise ProvisioningError("Error registering client.") from exc
        return client.id

    async def _step(self, name: str, database_name: str, operation) -> None:
        try:
            await operation
        except TENANT_FAILURES as exc:
            logger.exception(f"Provisioning step '{name}' failed for database {database_name}")
            raise ProvisioningError(
                f"Error registering client: {name} failed for database {database_name}."
            ) from exc

    async def _seed(
        self, database_name: str, request: ClientCreateRequest, access_key_hash: str
    ) -> None:
        """Insert the responsible party as a member, then as user, then link them."""
        async with self.tenant_databases.connect(database_name) as conn:
            result = await conn.execute(
                insert(Member).values(
                    name=request.responsible_name,
                    address=request.address,
                    status=MemberStatus.ACTIVE,
                )
            )
            member_id = result.inserted_primary_key[0]
            await conn.commit()

            # The access key doubles as the seed user's login password
            result = await conn.execute(
                insert(User).values(
                    name=request.responsible_name,
                    email=request.email,
                    password=access_key_hash,
                    role=UserRole.FISCAL_COUNCIL,
                )
            )
            user_id = result.inserted_primary_key[0]
            await conn.commit()

            await conn.execute(
                update(Member).where(Member.id == member_id).values(user_id=user_id)
            )
            await conn.commit()
        logger.info(f"Seeded member {member_id} linked to user {user_id} in {database_name}")
