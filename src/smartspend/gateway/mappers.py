"""Mapper functions between domain entities, gateway rows and ORM objects.

Store-internal field names are translated to gateway column names here and
nowhere else, so the rest of the code never sees `budgeted_amount` and friends.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from smartspend.domain.entities import (
    BudgetItem,
    SavingsGoal,
    Transaction,
    TransactionType,
)
from smartspend.gateway.base import Row
from smartspend.utils.date_parser import format_date, to_date

# Fields whose column name differs from the entity field name.
TRANSACTION_COLUMNS: dict[str, str] = {}
BUDGET_COLUMNS = {"budgeted": "budgeted_amount", "spent": "spent_amount"}
GOAL_COLUMNS: dict[str, str] = {}


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _to_column_value(value: Any) -> Any:
    """Serialize a field value for the gateway."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return format_date(value.date())
    if isinstance(value, date):
        return format_date(value)
    return value


def transaction_to_row(txn: Transaction) -> Row:
    """Convert a Transaction entity to a gateway row."""
    return {
        "id": txn.id,
        "user_id": txn.user_id,
        "description": txn.description,
        "amount": txn.amount,
        "category": txn.category,
        "date": format_date(txn.date),
        "type": txn.type.value,
    }


def row_to_transaction(row: Row) -> Transaction:
    """Convert a gateway row to a Transaction entity."""
    return Transaction(
        id=str(row["id"]),
        description=row["description"],
        amount=_to_decimal(row["amount"]),
        category=row["category"],
        date=to_date(row["date"]),
        type=TransactionType(row["type"]),
        user_id=row.get("user_id"),
    )


def budget_to_row(budget: BudgetItem) -> Row:
    """Convert a BudgetItem entity to a gateway row."""
    return {
        "id": budget.id,
        "user_id": budget.user_id,
        "category": budget.category,
        "budgeted_amount": budget.budgeted,
        "spent_amount": budget.spent,
        "month": budget.month,
    }


def row_to_budget(row: Row) -> BudgetItem:
    """Convert a gateway row to a BudgetItem entity."""
    return BudgetItem(
        id=str(row["id"]),
        category=row["category"],
        budgeted=_to_decimal(row.get("budgeted_amount")),
        spent=_to_decimal(row.get("spent_amount")),
        month=row["month"],
        user_id=row.get("user_id"),
    )


def goal_to_row(goal: SavingsGoal) -> Row:
    """Convert a SavingsGoal entity to a gateway row."""
    return {
        "id": goal.id,
        "user_id": goal.user_id,
        "name": goal.name,
        "target_amount": goal.target_amount,
        "current_amount": goal.current_amount,
        "deadline": format_date(goal.deadline),
        "description": goal.description,
    }


def row_to_goal(row: Row) -> SavingsGoal:
    """Convert a gateway row to a SavingsGoal entity.

    A missing deadline falls back to today, a missing description to "".
    """
    deadline = row.get("deadline")
    return SavingsGoal(
        id=str(row["id"]),
        name=row["name"],
        target_amount=_to_decimal(row["target_amount"]),
        current_amount=_to_decimal(row.get("current_amount")),
        deadline=to_date(deadline) if deadline else date.today(),
        description=row.get("description") or "",
        user_id=row.get("user_id"),
    )


def changes_to_columns(changes: dict[str, Any], columns: dict[str, str]) -> Row:
    """Translate a partial entity diff into a partial gateway row."""
    return {columns.get(field, field): _to_column_value(value) for field, value in changes.items()}


def orm_to_row(orm_obj: Any) -> Row:
    """Convert any SQLAlchemy model instance to a gateway row."""
    row: Row = {}
    for column in orm_obj.__table__.columns:
        value = getattr(orm_obj, column.name)
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, date):
            value = format_date(value)
        row[column.name] = value
    return row


def row_to_orm_values(model: Any, row: Row) -> dict[str, Any]:
    """Keep only the model's columns and turn ISO strings back into dates."""
    values: dict[str, Any] = {}
    for column in model.__table__.columns:
        if column.name not in row:
            continue
        value: Optional[Any] = row[column.name]
        if value is not None and column.type.python_type is date:
            value = to_date(value)
        values[column.name] = value
    return values
