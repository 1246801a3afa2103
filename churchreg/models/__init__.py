"""Database models."""

from churchreg.models.client import Client
from churchreg.models.enums import ClientStatus, UserRole
from churchreg.models.tenant_schema import (
    ExpenseEntry,
    IncomeEntry,
    Member,
    Payable,
    TenantBase,
    User,
)

__all__ = [
    "Client",
    "ClientStatus",
    "UserRole",
    "TenantBase",
    "User",
    "Member",
    "IncomeEntry",
    "ExpenseEntry",
    "Payable",
]
