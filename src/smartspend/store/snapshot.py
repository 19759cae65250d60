"""Durable local snapshot of the financial store.

The snapshot is advisory: it lets a restarted application show data before
any network round-trip, and is always superseded by the next full load.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from smartspend.domain.entities import BudgetItem, SavingsGoal, Transaction, TransactionType

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_NAME = "smartspend-storage"


@dataclass
class Snapshot:
    """The persisted subset of store state.

    user_id names the identity the collections were loaded for; None means
    nobody was signed in when it was written.
    """

    transactions: list[Transaction] = field(default_factory=list)
    budgets: list[BudgetItem] = field(default_factory=list)
    goals: list[SavingsGoal] = field(default_factory=list)
    last_sync_time: float = 0
    user_id: Optional[str] = None


def _transaction_to_json(txn: Transaction) -> dict[str, Any]:
    return {
        "id": txn.id,
        "description": txn.description,
        "amount": str(txn.amount),
        "category": txn.category,
        "date": txn.date.isoformat(),
        "type": txn.type.value,
        "user_id": txn.user_id,
    }


def _transaction_from_json(data: dict[str, Any]) -> Transaction:
    return Transaction(
        id=data["id"],
        description=data["description"],
        amount=Decimal(data["amount"]),
        category=data["category"],
        date=date.fromisoformat(data["date"]),
        type=TransactionType(data["type"]),
        user_id=data.get("user_id"),
    )


def _budget_to_json(budget: BudgetItem) -> dict[str, Any]:
    return {
        "id": budget.id,
        "category": budget.category,
        "budgeted": str(budget.budgeted),
        "spent": str(budget.spent),
        "month": budget.month,
        "user_id": budget.user_id,
    }


def _budget_from_json(data: dict[str, Any]) -> BudgetItem:
    return BudgetItem(
        id=data["id"],
        category=data["category"],
        budgeted=Decimal(data["budgeted"]),
        spent=Decimal(data["spent"]),
        month=data["month"],
        user_id=data.get("user_id"),
    )


def _goal_to_json(goal: SavingsGoal) -> dict[str, Any]:
    return {
        "id": goal.id,
        "name": goal.name,
        "target_amount": str(goal.target_amount),
        "current_amount": str(goal.current_amount),
        "deadline": goal.deadline.isoformat(),
        "description": goal.description,
        "user_id": goal.user_id,
    }


def _goal_from_json(data: dict[str, Any]) -> SavingsGoal:
    return SavingsGoal(
        id=data["id"],
        name=data["name"],
        target_amount=Decimal(data["target_amount"]),
        current_amount=Decimal(data["current_amount"]),
        deadline=date.fromisoformat(data["deadline"]),
        description=data.get("description") or "",
        user_id=data.get("user_id"),
    )


def snapshot_to_json(snapshot: Snapshot) -> dict[str, Any]:
    """Serialize a snapshot to JSON-compatible data."""
    return {
        "transactions": [_transaction_to_json(t) for t in snapshot.transactions],
        "budgets": [_budget_to_json(b) for b in snapshot.budgets],
        "goals": [_goal_to_json(g) for g in snapshot.goals],
        "last_sync_time": snapshot.last_sync_time,
        "user_id": snapshot.user_id,
    }


def snapshot_from_json(data: dict[str, Any]) -> Snapshot:
    """Deserialize a snapshot. Raises KeyError/ValueError on malformed data."""
    return Snapshot(
        transactions=[_transaction_from_json(t) for t in data.get("transactions", [])],
        budgets=[_budget_from_json(b) for b in data.get("budgets", [])],
        goals=[_goal_from_json(g) for g in data.get("goals", [])],
        last_sync_time=float(data.get("last_sync_time", 0)),
        user_id=data.get("user_id"),
    )


class SnapshotStorage:
    """A single named JSON blob on disk."""

    def __init__(self, directory: Path | str, name: str = DEFAULT_STORAGE_NAME):
        self.directory = Path(directory)
        self.name = name

    @property
    def path(self) -> Path:
        return self.directory / f"{self.name}.json"

    def load(self) -> Optional[Snapshot]:
        """Read the snapshot. Missing or unreadable blobs yield None."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return snapshot_from_json(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable snapshot %s: %s", self.path, e)
            return None

    def save(self, snapshot: Snapshot) -> None:
        """Rewrite the snapshot atomically."""
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(snapshot_to_json(snapshot), f)
        os.replace(tmp_path, self.path)
