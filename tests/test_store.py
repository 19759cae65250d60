"""Tests for the local-first financial store (no event loop running)."""

from datetime import date
from decimal import Decimal

import pytest

from smartspend.domain.entities import TransactionType
from smartspend.domain.errors import GatewayError, ValidationError
from smartspend.gateway.base import BUDGETS_TABLE, GOALS_TABLE, TRANSACTIONS_TABLE
from smartspend.session import SessionBinding
from smartspend.store.financial_store import FinancialStore
from smartspend.store.snapshot import SnapshotStorage

from conftest import USER_ID


def _add_coffee(store, amount="-4.50"):
    return store.add_transaction(
        description="Coffee",
        amount=amount,
        category="Food",
        date="2025-01-05",
        type="expense",
    )


class TestTransactions:
    """Tests for transaction mutations."""

    def test_add_transaction_applies_locally_and_remotely(self, store, memory_gateway):
        txn = _add_coffee(store)

        assert txn is not None
        assert txn.user_id == USER_ID
        assert txn.amount == Decimal("-4.50")
        assert txn.date == date(2025, 1, 5)
        assert txn.type == TransactionType.EXPENSE
        assert store.transactions == [txn]

        rows = memory_gateway.rows(TRANSACTIONS_TABLE)
        assert len(rows) == 1
        assert rows[0]["id"] == txn.id
        assert rows[0]["user_id"] == USER_ID
        assert rows[0]["date"] == "2025-01-05"
        assert rows[0]["type"] == "expense"

    def test_newest_transaction_first(self, store):
        first = _add_coffee(store)
        second = store.add_transaction("Salary", 1000, "Work", date(2025, 1, 31), TransactionType.INCOME)

        assert [t.id for t in store.transactions] == [second.id, first.id]

    def test_add_without_user_is_ignored(self, memory_gateway, storage):
        store = FinancialStore(memory_gateway, SessionBinding(), storage)

        assert _add_coffee(store) is None
        assert store.add_budget("Food", 100) is None
        assert store.add_goal("Car", 5000, 0, "2026-01-01") is None
        assert store.transactions == []
        assert store.budgets == []
        assert store.goals == []
        assert memory_gateway.calls == []

    def test_invalid_type_raises(self, store):
        with pytest.raises(ValidationError) as excinfo:
            store.add_transaction("Coffee", 4, "Food", "2025-01-05", "transfer")

        assert "income" in str(excinfo.value)
        assert store.transactions == []

    def test_invalid_amount_raises(self, store):
        with pytest.raises(ValidationError):
            store.add_transaction("Coffee", "lots", "Food", "2025-01-05", "expense")

    def test_update_merges_fields(self, store, memory_gateway):
        txn = _add_coffee(store)

        store.update_transaction(txn.id, amount="-5.25", category="Drinks")

        updated = store.get_transaction(txn.id)
        assert updated.amount == Decimal("-5.25")
        assert updated.category == "Drinks"
        assert updated.description == "Coffee"
        row = memory_gateway.rows(TRANSACTIONS_TABLE)[0]
        assert row["category"] == "Drinks"
        assert row["amount"] == Decimal("-5.25")

    def test_update_date_is_sent_as_iso_string(self, store, memory_gateway):
        txn = _add_coffee(store)

        store.update_transaction(txn.id, date=date(2025, 2, 1))

        assert memory_gateway.rows(TRANSACTIONS_TABLE)[0]["date"] == "2025-02-01"

    def test_update_unknown_field_raises(self, store):
        txn = _add_coffee(store)

        with pytest.raises(ValidationError):
            store.update_transaction(txn.id, user_id="someone-else")
        with pytest.raises(ValidationError):
            store.update_transaction(txn.id, notes="nope")

    def test_update_unknown_id_is_noop(self, store, memory_gateway):
        _add_coffee(store)
        before = list(store.transactions)
        calls_before = list(memory_gateway.calls)

        store.update_transaction("missing", amount=10)

        assert store.transactions == before
        assert memory_gateway.calls == calls_before

    def test_delete(self, store, memory_gateway):
        txn = _add_coffee(store)

        store.delete_transaction(txn.id)

        assert store.transactions == []
        assert memory_gateway.rows(TRANSACTIONS_TABLE) == []

    def test_delete_unknown_id_is_noop(self, store, memory_gateway):
        _add_coffee(store)
        calls_before = list(memory_gateway.calls)

        store.delete_transaction("missing")

        assert len(store.transactions) == 1
        assert memory_gateway.calls == calls_before

    def test_update_and_delete_are_scoped_to_the_owner(self, store, memory_gateway):
        txn = _add_coffee(store)
        memory_gateway.tables[TRANSACTIONS_TABLE][txn.id]["user_id"] = "user-2"

        store.update_transaction(txn.id, description="Espresso")
        store.delete_transaction(txn.id)

        assert memory_gateway.rows(TRANSACTIONS_TABLE)[0]["description"] == "Coffee"


class TestBudgetsAndGoals:
    """Tests for budget and savings goal mutations."""

    def test_add_budget_defaults(self, store, memory_gateway):
        budget = store.add_budget("Food", "300")

        assert budget.spent == Decimal("0")
        assert budget.month == f"{date.today().year:04d}-{date.today().month:02d}"
        row = memory_gateway.rows(BUDGETS_TABLE)[0]
        assert row["budgeted_amount"] == Decimal("300")
        assert row["spent_amount"] == Decimal("0")

    def test_add_budget_normalizes_month(self, store):
        budget = store.add_budget("Food", 300, 20, "2025-1")

        assert budget.month == "2025-01"

    def test_update_budget_translates_columns(self, store, memory_gateway):
        budget = store.add_budget("Food", 300, 0, "2025-01")

        store.update_budget(budget.id, spent=Decimal("75"))

        assert store.get_budget(budget.id).spent == Decimal("75")
        row = memory_gateway.rows(BUDGETS_TABLE)[0]
        assert row["spent_amount"] == Decimal("75")
        assert "spent" not in row

    def test_goal_lifecycle(self, store, memory_gateway):
        goal = store.add_goal("Emergency fund", 5000, 1000, "2026-12-31", "Six months")

        assert goal.deadline == date(2026, 12, 31)
        assert memory_gateway.rows(GOALS_TABLE)[0]["deadline"] == "2026-12-31"

        store.update_goal(goal.id, current_amount=6000)
        assert store.get_goal(goal.id).current_amount == Decimal("6000")

        store.delete_goal(goal.id)
        assert store.goals == []
        assert memory_gateway.rows(GOALS_TABLE) == []


class TestDerivedValues:
    """Tests for derived totals."""

    def test_totals_use_magnitudes(self, store):
        store.add_transaction("Salary", 1000, "Work", "2025-01-01", "income")
        store.add_transaction("Coffee", -5, "Food", "2025-01-05", "expense")
        # Positive-signed expense is still an expense
        store.add_transaction("Lunch", 12, "Food", "2025-01-06", "expense")
        store.add_transaction("Bus", "-2.50", "Transport", "2025-01-07", "expense")

        assert store.get_total_income() == Decimal("1000")
        assert store.get_total_expenses() == Decimal("19.50")
        assert store.get_balance() == store.get_total_income() - store.get_total_expenses()
        assert store.get_spending_by_category() == {
            "Food": Decimal("17"),
            "Transport": Decimal("2.50"),
        }

    def test_budget_status(self, store):
        store.add_budget("Food", 100, 40, "2025-01")

        assert store.get_budget_status()["Food"] == {
            "spent": Decimal("40"),
            "budgeted": Decimal("100"),
            "remaining": Decimal("60"),
        }

    def test_budget_status_month_filter(self, store):
        store.add_budget("Food", 100, 40, "2025-01")
        store.add_budget("Food", 200, 10, "2025-02")

        assert store.get_budget_status(month="2025-01")["Food"]["budgeted"] == Decimal("100")
        assert store.get_budget_status(month="2025-02")["Food"]["budgeted"] == Decimal("200")
        assert store.get_budget_status(month="2025-03") == {}

    def test_actual_spending_is_independent_of_budget_spent(self, store):
        store.add_budget("Food", 100, 0, "2025-01")
        store.add_transaction("Coffee", -5, "Food", "2025-01-05", "expense")
        store.add_transaction("Dinner", -30, "Food", "2025-02-05", "expense")

        assert store.get_actual_spending("Food", "2025-01") == Decimal("5")
        assert store.budgets[0].spent == Decimal("0")

    def test_savings_progress_is_average_percentage(self, store):
        store.add_goal("A", 100, 50, "2026-01-01")
        store.add_goal("B", 200, 200, "2026-01-01")

        assert store.get_savings_progress() == Decimal("75")

    def test_savings_progress_without_goals(self, store):
        assert store.get_savings_progress() == Decimal("0")

    def test_budget_alert_fires_past_eighty_percent(self, store):
        store.add_budget("Food", 60, 0, "2025-01")
        store.add_budget("Rent", 40, 0, "2025-01")
        store.add_transaction("Groceries", -80, "Food", "2025-01-10", "expense")

        assert store.get_budget_alert("2025-01") is False

        store.add_transaction("Bus", -1, "Transport", "2025-01-11", "expense")

        assert store.get_budget_alert("2025-01") is True
        assert store.get_budget_alert("2025-02") is False

    def test_budget_alert_defaults_to_current_month(self, store):
        store.add_budget("Food", 100)
        store.add_transaction("Groceries", -90, "Food", date.today().isoformat(), "expense")

        assert store.get_budget_alert() is True

    def test_budget_alert_needs_a_budget(self, store):
        store.add_transaction("Groceries", -90, "Food", date.today().isoformat(), "expense")

        assert store.get_budget_alert() is False

    def test_budget_remaining_counts_only_budgeted_categories(self, store):
        store.add_budget("Food", 100, 0, "2025-01")
        store.add_transaction("Groceries", -30, "Food", "2025-01-10", "expense")
        store.add_transaction("Cinema", -500, "Fun", "2025-01-11", "expense")
        store.add_transaction("Refund", 20, "Food", "2025-01-12", "income")

        assert store.get_budget_remaining() == Decimal("70")

        store.add_transaction("Feast", -120, "Food", "2025-01-13", "expense")

        assert store.get_budget_remaining() == Decimal("-50")
        assert store.get_budget_remaining(month="2025-02") == 0

    def test_goal_alerts_for_nearly_reached_goals(self, store):
        near = store.add_goal("Car", 1000, 750, "2026-01-01")
        store.add_goal("Trip", 1000, 740, "2026-01-01")
        store.add_goal("Laptop", 100, 100, "2026-01-01")

        assert store.get_goal_alerts() == [(near, Decimal("75"))]

    def test_clear(self, store):
        _add_coffee(store)
        store.add_budget("Food", 100)
        store.add_goal("Car", 5000, 0, "2026-01-01")
        store.last_sync_time = 123.0

        store.clear()

        assert store.transactions == []
        assert store.budgets == []
        assert store.goals == []
        assert store.last_sync_time == 0
        assert store.get_total_income() == 0
        assert store.get_total_expenses() == 0
        assert store.get_balance() == 0
        assert store.get_spending_by_category() == {}
        assert store.get_budget_status() == {}
        assert store.get_savings_progress() == 0
        assert store.get_budget_remaining() == 0
        assert store.get_goal_alerts() == []


class TestGatewayFailures:
    """Remote failures are reported, never rolled back."""

    def test_failed_insert_keeps_local_state(self, store, memory_gateway):
        errors = []
        store.add_error_listener(lambda operation, error: errors.append((operation, error)))
        memory_gateway.fail_tables.add(TRANSACTIONS_TABLE)

        txn = _add_coffee(store)

        assert store.transactions == [txn]
        assert len(errors) == 1
        assert errors[0][0] == "insert transaction"
        assert isinstance(errors[0][1], GatewayError)

    def test_failed_delete_keeps_local_deletion(self, store, memory_gateway):
        txn = _add_coffee(store)
        memory_gateway.fail_tables.add(TRANSACTIONS_TABLE)

        store.delete_transaction(txn.id)

        assert store.transactions == []
        assert len(memory_gateway.rows(TRANSACTIONS_TABLE)) == 1

    def test_failing_error_listener_does_not_break_others(self, store, memory_gateway):
        seen = []

        def broken(operation, error):
            raise RuntimeError("listener bug")

        store.add_error_listener(broken)
        store.add_error_listener(lambda operation, error: seen.append(operation))
        memory_gateway.fail_tables.add(BUDGETS_TABLE)

        store.add_budget("Food", 100)

        assert seen == ["insert budget"]

    def test_server_id_is_reconciled(self, store, memory_gateway):
        memory_gateway.server_ids.append("server-42")

        _add_coffee(store)

        assert store.transactions[0].id == "server-42"
        assert store.get_transaction("server-42") is not None


class TestObservation:
    """Tests for subscribe/unsubscribe."""

    def test_observer_sees_every_change(self, store):
        seen = []
        unsubscribe = store.subscribe(lambda s: seen.append(len(s.transactions)))

        txn = _add_coffee(store)
        store.delete_transaction(txn.id)
        unsubscribe()
        _add_coffee(store)

        assert seen[0] == 1
        assert seen[-1] == 0

    def test_failing_observer_is_isolated(self, store):
        def broken(_store):
            raise RuntimeError("observer bug")

        store.subscribe(broken)

        assert _add_coffee(store) is not None


class TestSnapshot:
    """The local snapshot survives restarts."""

    def test_rehydrates_from_snapshot(self, store, memory_gateway, session, tmp_path):
        txn = _add_coffee(store)
        budget = store.add_budget("Food", 100, 40, "2025-01")
        goal = store.add_goal("Car", 5000, 250, "2026-06-30", "Used")

        restarted = FinancialStore(memory_gateway, session, SnapshotStorage(tmp_path))

        assert restarted.transactions == [txn]
        assert restarted.budgets == [budget]
        assert restarted.goals == [goal]

    def test_corrupt_snapshot_is_ignored(self, memory_gateway, session, tmp_path):
        storage = SnapshotStorage(tmp_path)
        storage.path.write_text("{not json", encoding="utf-8")

        store = FinancialStore(memory_gateway, session, storage)

        assert store.transactions == []

    def test_snapshot_name(self, storage, tmp_path):
        assert storage.path == tmp_path / "smartspend-storage.json"

    def test_snapshot_records_owner(self, store, storage):
        _add_coffee(store)

        assert storage.load().user_id == USER_ID

    def test_snapshot_of_another_user_is_not_rehydrated(self, store, memory_gateway, tmp_path):
        _add_coffee(store)

        other = FinancialStore(memory_gateway, SessionBinding("user-2"), SnapshotStorage(tmp_path))

        assert other.transactions == []
        assert other.owner_id == "user-2"
