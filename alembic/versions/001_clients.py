"""Clients registry table.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("responsible_name", sa.String(255), nullable=False),
        sa.Column("organization_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("tax_id", sa.String(32), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("database_name", sa.String(63), nullable=False),
        sa.Column("access_key_hash", sa.String(255), nullable=False),
        sa.Column("verification_code", sa.String(32), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="pendente"),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        # Closes the check-then-insert race between concurrent registrations
        sa.UniqueConstraint("organization_name", name="uq_clients_organization_name"),
        sa.UniqueConstraint("database_name", name="uq_clients_database_name"),
    )


def downgrade() -> None:
    op.drop_table("clients")
