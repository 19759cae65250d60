"""Domain model entities for smartspend.

These are pure data classes representing the user's financial records,
independent of how the gateway stores them. Field names here are the
store-internal names; the gateway mappers translate them to column names.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Income/expense discriminator, independent of the amount's sign."""

    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: str
    description: str
    amount: Decimal
    category: str
    date: date
    type: TransactionType
    user_id: Optional[str] = None


@dataclass(frozen=True)
class BudgetItem:
    """Monthly budget allocation for one category."""

    id: str
    category: str
    budgeted: Decimal
    spent: Decimal
    month: str
    user_id: Optional[str] = None


@dataclass(frozen=True)
class SavingsGoal:
    """Savings goal domain entity. current_amount may exceed target_amount."""

    id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal
    deadline: date
    description: str = ""
    user_id: Optional[str] = None


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a CSV import, shaped for a transient notification."""

    success: bool
    message: str
    imported: int = 0
