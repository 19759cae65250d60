"""Tests for gateway mappers."""

from datetime import date, datetime, UTC
from decimal import Decimal

from smartspend.domain.entities import BudgetItem, SavingsGoal, Transaction, TransactionType
from smartspend.gateway.mappers import (
    BUDGET_COLUMNS,
    budget_to_row,
    changes_to_columns,
    goal_to_row,
    orm_to_row,
    row_to_budget,
    row_to_goal,
    row_to_orm_values,
    row_to_transaction,
    transaction_to_row,
)
from smartspend.gateway.models import SavingsGoal as ORMSavingsGoal
from smartspend.gateway.models import Transaction as ORMTransaction


class TestTransactionMapper:
    """Tests for Transaction rows."""

    def test_transaction_to_row(self):
        txn = Transaction(
            id="t1",
            description="Coffee",
            amount=Decimal("-4.50"),
            category="Food",
            date=date(2025, 1, 5),
            type=TransactionType.EXPENSE,
            user_id="u1",
        )

        row = transaction_to_row(txn)

        assert row == {
            "id": "t1",
            "user_id": "u1",
            "description": "Coffee",
            "amount": Decimal("-4.50"),
            "category": "Food",
            "date": "2025-01-05",
            "type": "expense",
        }

    def test_row_to_transaction_accepts_timestamps_and_floats(self):
        row = {
            "id": 7,
            "user_id": "u1",
            "description": "Salary",
            "amount": 1000.1,
            "category": "Work",
            "date": "2025-01-31T00:00:00+00:00",
            "type": "income",
        }

        txn = row_to_transaction(row)

        assert txn.id == "7"
        assert txn.amount == Decimal("1000.1")
        assert txn.date == date(2025, 1, 31)
        assert txn.type == TransactionType.INCOME


class TestBudgetMapper:
    """Budget field names differ from column names."""

    def test_budget_to_row_renames_amounts(self):
        budget = BudgetItem(
            id="b1", category="Food", budgeted=Decimal("300"), spent=Decimal("20"), month="2025-01", user_id="u1"
        )

        row = budget_to_row(budget)

        assert row["budgeted_amount"] == Decimal("300")
        assert row["spent_amount"] == Decimal("20")
        assert "budgeted" not in row

    def test_row_to_budget_defaults_missing_amounts(self):
        budget = row_to_budget({"id": "b1", "category": "Food", "month": "2025-01", "budgeted_amount": "300"})

        assert budget.budgeted == Decimal("300")
        assert budget.spent == Decimal("0")

    def test_changes_to_columns(self):
        values = changes_to_columns({"spent": Decimal("5"), "month": "2025-02"}, BUDGET_COLUMNS)

        assert values == {"spent_amount": Decimal("5"), "month": "2025-02"}


class TestGoalMapper:
    """Tests for SavingsGoal rows."""

    def test_round_trip(self):
        goal = SavingsGoal(
            id="g1",
            name="Car",
            target_amount=Decimal("5000"),
            current_amount=Decimal("250"),
            deadline=date(2026, 6, 30),
            description="Used",
            user_id="u1",
        )

        assert row_to_goal(goal_to_row(goal)) == goal

    def test_missing_deadline_and_description(self):
        goal = row_to_goal(
            {"id": "g1", "name": "Car", "target_amount": "5000", "current_amount": None, "deadline": None}
        )

        assert goal.deadline == date.today()
        assert goal.description == ""
        assert goal.current_amount == Decimal("0")


class TestORMMapping:
    """Tests for ORM object conversion."""

    def test_orm_to_row_serializes_dates(self):
        created = datetime(2025, 1, 5, 12, 0, tzinfo=UTC)
        obj = ORMTransaction(
            id="t1",
            user_id="u1",
            description="Coffee",
            amount=Decimal("-4.50"),
            category="Food",
            date=date(2025, 1, 5),
            type="expense",
            created_at=created,
            updated_at=created,
        )

        row = orm_to_row(obj)

        assert row["date"] == "2025-01-05"
        assert row["created_at"] == created.isoformat()
        assert row["amount"] == Decimal("-4.50")

    def test_row_to_orm_values_parses_dates_and_drops_unknown_keys(self):
        values = row_to_orm_values(
            ORMSavingsGoal, {"id": "g1", "name": "Car", "deadline": "2026-06-30", "bogus": 1}
        )

        assert values == {"id": "g1", "name": "Car", "deadline": date(2026, 6, 30)}
