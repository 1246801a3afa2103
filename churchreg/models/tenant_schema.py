"""Fixed schema created inside every client's own database."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from churchreg.models.enums import (
    ExpenseCategory,
    IncomeCategory,
    MemberStatus,
    PayableStatus,
    PaymentMethod,
    UserRole,
)


def _enum(enum_cls: type, name: str) -> Enum:
    """Store enum values (not member names) as a non-native enum."""
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        length=32,
        values_callable=lambda members: [m.value for m in members],
    )


class TenantBase(DeclarativeBase):
    """Declarative base for tables living in a client database."""

    pass


class User(TenantBase):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(_enum(UserRole, "user_role"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class Member(TenantBase):
    __tablename__ = "members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[MemberStatus] = mapped_column(
        _enum(MemberStatus, "member_status"), nullable=False
    )
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL", onupdate="CASCADE"), nullable=True
    )


class IncomeEntry(TenantBase):
    __tablename__ = "income_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    note: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category: Mapped[IncomeCategory] = mapped_column(
        _enum(IncomeCategory, "income_category"), nullable=False
    )
    payment_method: Mapped[PaymentMethod | None] = mapped_column(
        _enum(PaymentMethod, "income_payment_method"), nullable=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    member_id: Mapped[int | None] = mapped_column(
        ForeignKey("members.id", ondelete="SET NULL", onupdate="CASCADE"), nullable=True
    )


class ExpenseEntry(TenantBase):
    __tablename__ = "expense_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    note: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category: Mapped[ExpenseCategory] = mapped_column(
        _enum(ExpenseCategory, "expense_category"), nullable=False
    )
    payment_method: Mapped[PaymentMethod | None] = mapped_column(
        _enum(PaymentMethod, "expense_payment_method"), nullable=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class Payable(TenantBase):
    __tablename__ = "payables"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    note: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[PayableStatus | None] = mapped_column(
        _enum(PayableStatus, "payable_status"), nullable=True
    )
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
