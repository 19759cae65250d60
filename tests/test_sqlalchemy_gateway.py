"""Tests for the SQLAlchemy gateway and the store on top of it."""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from smartspend.domain.errors import GatewayError
from smartspend.gateway.base import BUDGETS_TABLE, GOALS_TABLE, TRANSACTIONS_TABLE
from smartspend.session import SessionBinding
from smartspend.store.financial_store import FinancialStore

from conftest import USER_ID


def _transaction_row(row_id, day, user_id=USER_ID):
    return {
        "id": row_id,
        "user_id": user_id,
        "description": f"Item {row_id}",
        "amount": Decimal("-10.00"),
        "category": "Food",
        "date": f"2025-01-{day:02d}",
        "type": "expense",
    }


@pytest.mark.anyio
async def test_insert_and_select_round_trip(sqlite_gateway):
    stored = await sqlite_gateway.insert(TRANSACTIONS_TABLE, _transaction_row("t1", 5))

    assert stored["id"] == "t1"
    assert stored["date"] == "2025-01-05"

    rows = await sqlite_gateway.select(TRANSACTIONS_TABLE, USER_ID, "date")
    assert len(rows) == 1
    assert rows[0]["amount"] == Decimal("-10.00")
    assert rows[0]["created_at"] is not None


@pytest.mark.anyio
async def test_select_filters_by_owner_and_orders(sqlite_gateway):
    await sqlite_gateway.insert(TRANSACTIONS_TABLE, _transaction_row("t1", 5))
    await sqlite_gateway.insert(TRANSACTIONS_TABLE, _transaction_row("t2", 20))
    await sqlite_gateway.insert(TRANSACTIONS_TABLE, _transaction_row("t3", 10, user_id="other"))

    newest_first = await sqlite_gateway.select(TRANSACTIONS_TABLE, USER_ID, "date")
    oldest_first = await sqlite_gateway.select(TRANSACTIONS_TABLE, USER_ID, "date", descending=False)

    assert [r["id"] for r in newest_first] == ["t2", "t1"]
    assert [r["id"] for r in oldest_first] == ["t1", "t2"]


@pytest.mark.anyio
async def test_update_and_delete(sqlite_gateway):
    await sqlite_gateway.insert(TRANSACTIONS_TABLE, _transaction_row("t1", 5))

    await sqlite_gateway.update(TRANSACTIONS_TABLE, USER_ID, "t1", {"category": "Drinks", "date": "2025-02-01"})
    rows = await sqlite_gateway.select(TRANSACTIONS_TABLE, USER_ID, "date")
    assert rows[0]["category"] == "Drinks"
    assert rows[0]["date"] == "2025-02-01"

    await sqlite_gateway.delete(TRANSACTIONS_TABLE, USER_ID, "t1")
    assert await sqlite_gateway.select(TRANSACTIONS_TABLE, USER_ID, "date") == []


@pytest.mark.anyio
async def test_update_missing_row_is_not_an_error(sqlite_gateway):
    await sqlite_gateway.update(TRANSACTIONS_TABLE, USER_ID, "missing", {"category": "Drinks"})


@pytest.mark.anyio
async def test_update_and_delete_ignore_other_owners_rows(sqlite_gateway):
    await sqlite_gateway.insert(TRANSACTIONS_TABLE, _transaction_row("t1", 5, user_id="alice"))

    await sqlite_gateway.update(TRANSACTIONS_TABLE, "bob", "t1", {"category": "Drinks"})
    await sqlite_gateway.delete(TRANSACTIONS_TABLE, "bob", "t1")

    rows = await sqlite_gateway.select(TRANSACTIONS_TABLE, "alice", "date")
    assert [(r["id"], r["category"]) for r in rows] == [("t1", "Food")]


@pytest.mark.anyio
async def test_duplicate_budget_month_is_rejected(sqlite_gateway):
    row = {
        "id": "b1",
        "user_id": USER_ID,
        "category": "Food",
        "budgeted_amount": Decimal("300"),
        "spent_amount": Decimal("0"),
        "month": "2025-01",
    }
    await sqlite_gateway.insert(BUDGETS_TABLE, row)

    with pytest.raises(GatewayError) as excinfo:
        await sqlite_gateway.insert(BUDGETS_TABLE, {**row, "id": "b2"})

    assert excinfo.value.table == BUDGETS_TABLE
    assert excinfo.value.operation == "insert"
    # The session is still usable after the rollback.
    assert len(await sqlite_gateway.select(BUDGETS_TABLE, USER_ID, "month")) == 1


@pytest.mark.anyio
async def test_invalid_transaction_type_is_rejected(sqlite_gateway):
    with pytest.raises(GatewayError):
        await sqlite_gateway.insert(TRANSACTIONS_TABLE, {**_transaction_row("t1", 5), "type": "transfer"})


@pytest.mark.anyio
async def test_unknown_table_and_column(sqlite_gateway):
    with pytest.raises(GatewayError):
        await sqlite_gateway.select("accounts", USER_ID, "id")
    with pytest.raises(GatewayError):
        await sqlite_gateway.select(TRANSACTIONS_TABLE, USER_ID, "no_such_column")


def test_store_survives_restart_through_sqlite(sqlite_gateway):
    session = SessionBinding(USER_ID)
    store = FinancialStore(sqlite_gateway, session)
    txn = store.add_transaction("Coffee", "-4.50", "Food", date(2025, 1, 5), "expense")
    store.add_budget("Food", 300, 40, "2025-01")
    store.add_goal("Car", 5000, 250, date(2026, 6, 30), "Used")

    fresh = FinancialStore(sqlite_gateway, session)
    asyncio.run(fresh.load_user_data(USER_ID))

    assert fresh.transactions == [txn]
    assert fresh.budgets[0].budgeted == Decimal("300")
    assert fresh.budgets[0].spent == Decimal("40")
    assert fresh.goals[0].description == "Used"
    assert fresh.goals[0].deadline == date(2026, 6, 30)


def test_goal_update_is_persisted(sqlite_gateway):
    session = SessionBinding(USER_ID)
    store = FinancialStore(sqlite_gateway, session)
    goal = store.add_goal("Car", 5000, 250, "2026-06-30")

    store.update_goal(goal.id, current_amount=400, deadline="2026-09-30")

    rows = asyncio.run(sqlite_gateway.select(GOALS_TABLE, USER_ID, "created_at"))
    assert rows[0]["current_amount"] == Decimal("400")
    assert rows[0]["deadline"] == "2026-09-30"
