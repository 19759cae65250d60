"""Shared pytest fixtures for smartspend tests."""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import pytest

from smartspend.domain.errors import GatewayError
from smartspend.gateway.base import Gateway, Row
from smartspend.gateway.factories import create_sqlite_gateway
from smartspend.logging_config import LOGGER_NAME
from smartspend.session import SessionBinding, bind_store
from smartspend.store.financial_store import FinancialStore
from smartspend.store.snapshot import SnapshotStorage

USER_ID = "user-1"


class InMemoryGateway(Gateway):
    """Gateway double that keeps rows in dicts and records every call.

    Tables listed in fail_tables reject every call with a GatewayError.
    When server_ids is set, inserts are stored under the next id from that
    list instead of the id the store sent.
    """

    def __init__(self):
        self.tables: dict[str, dict[str, Row]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_tables: set[str] = set()
        self.server_ids: list[str] = []

    def _check(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        if table in self.fail_tables:
            raise GatewayError(f"{operation} on {table} rejected", table=table, operation=operation)

    async def select(self, table: str, owner_id: str, order_by: str, descending: bool = True) -> list[Row]:
        self._check("select", table)
        rows = [dict(r) for r in self.tables.get(table, {}).values() if r.get("user_id") == owner_id]
        return sorted(rows, key=lambda r: str(r.get(order_by) or ""), reverse=descending)

    async def insert(self, table: str, row: Row) -> Row:
        self._check("insert", table)
        stored = dict(row)
        if self.server_ids:
            stored["id"] = self.server_ids.pop(0)
        self.tables.setdefault(table, {})[stored["id"]] = stored
        return dict(stored)

    async def update(self, table: str, owner_id: str, row_id: str, values: Row) -> None:
        self._check("update", table)
        row = self.tables.get(table, {}).get(row_id)
        if row is not None and row.get("user_id") == owner_id:
            row.update(values)

    async def delete(self, table: str, owner_id: str, row_id: str) -> None:
        self._check("delete", table)
        row = self.tables.get(table, {}).get(row_id)
        if row is not None and row.get("user_id") == owner_id:
            del self.tables[table][row_id]

    def rows(self, table: str) -> list[Row]:
        return list(self.tables.get(table, {}).values())

    def seed(self, table: str, **row: Any) -> None:
        self.tables.setdefault(table, {})[row["id"]] = row


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep tests away from the user's real configuration and log handlers."""
    for name in (
        "SMARTSPEND_DATA_DIR",
        "SMARTSPEND_DB_PATH",
        "SMARTSPEND_GATEWAY_URL",
        "SMARTSPEND_API_KEY",
        "SMARTSPEND_USER_ID",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    logging.getLogger(LOGGER_NAME).handlers.clear()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def temp_db_path():
    """Create a temporary SQLite file path for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    yield db_path

    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def sqlite_gateway(temp_db_path):
    """Create a SQLite-backed gateway on a temporary database."""
    gateway = create_sqlite_gateway(database_path=temp_db_path)
    yield gateway
    asyncio.run(gateway.close())


@pytest.fixture
def memory_gateway():
    return InMemoryGateway()


@pytest.fixture
def session():
    """A session already signed in as USER_ID."""
    return SessionBinding(USER_ID)


@pytest.fixture
def storage(tmp_path) -> SnapshotStorage:
    return SnapshotStorage(tmp_path)


def make_store(
    gateway: Gateway, session: SessionBinding, storage: Optional[SnapshotStorage] = None
) -> FinancialStore:
    store = FinancialStore(gateway, session, storage)
    bind_store(session, store)
    return store


@pytest.fixture
def store(memory_gateway, session, storage):
    """A store over the in-memory gateway, persisting to a temporary directory."""
    return make_store(memory_gateway, session, storage)


@pytest.fixture
def sqlite_store(sqlite_gateway, session, storage):
    """A store writing through to a real SQLite gateway."""
    return make_store(sqlite_gateway, session, storage)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def cli_args(tmp_path, temp_db_path):
    """Global CLI options pointing at temporary storage."""
    return ["--data-dir", str(tmp_path / "data"), "--db-path", temp_db_path]


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
