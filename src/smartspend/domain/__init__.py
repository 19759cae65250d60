"""Domain layer for smartspend application."""

from smartspend.domain.csv_import import CSVImportService
from smartspend.domain.entities import (
    BudgetItem,
    ImportResult,
    SavingsGoal,
    Transaction,
    TransactionType,
)

__all__ = [
    "CSVImportService",
    "BudgetItem",
    "ImportResult",
    "SavingsGoal",
    "Transaction",
    "TransactionType",
]
