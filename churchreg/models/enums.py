"""Enumerations shared by the registry and tenant schemas.

Stored values keep the vocabulary of existing tenant databases.
"""

import enum


class ClientStatus(str, enum.Enum):
    PENDING = "pendente"
    ACTIVE = "ativo"
    INACTIVE = "inativo"


class UserRole(str, enum.Enum):
    COOPERATOR = "cooperador"
    PASTOR = "pastor"
    TREASURER = "tesoureiro"
    DEACON = "diacono"
    FISCAL_COUNCIL = "conselho_fiscal"


class MemberStatus(str, enum.Enum):
    ACTIVE = "ativo"
    INACTIVE = "inativo"


class IncomeCategory(str, enum.Enum):
    TITHE = "Dizimo"
    OFFERING = "Oferta"
    DONATION = "Doacao"
    CAMPAIGN = "Campanha"


class ExpenseCategory(str, enum.Enum):
    PAYMENT = "Pagamento"
    SALARY = "Salario"
    EXPENSE_ALLOWANCE = "Ajuda de Custo"


class PaymentMethod(str, enum.Enum):
    CASH = "Dinheiro"
    INSTANT_TRANSFER = "PIX"
    DEBIT = "Debito"
    CREDIT = "Credito"


class PayableStatus(str, enum.Enum):
    PAID = "Pago"
    PENDING = "Pendente"
    PARTIALLY_PAID = "Pago Parcial"
    OVERDUE = "Vencida"
