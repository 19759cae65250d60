"""Abstract remote persistence gateway interface."""

from abc import ABC, abstractmethod
from typing import Any

TRANSACTIONS_TABLE = "transactions"
BUDGETS_TABLE = "budget_items"
GOALS_TABLE = "savings_goals"

Row = dict[str, Any]


class Gateway(ABC):
    """Abstract relational backend holding per-user financial tables.

    Rows are plain dicts keyed by column name. Date columns cross this
    boundary as ISO calendar-date strings. Reads, updates and deletes only
    touch rows whose user_id matches the given owner. Every method raises
    GatewayError when the backend rejects the call.
    """

    @abstractmethod
    async def select(
        self, table: str, owner_id: str, order_by: str, descending: bool = True
    ) -> list[Row]:
        """Return all rows of table owned by owner_id, ordered by a column."""
        pass

    @abstractmethod
    async def insert(self, table: str, row: Row) -> Row:
        """Insert a row. Returns the row as stored, including its id."""
        pass

    @abstractmethod
    async def update(self, table: str, owner_id: str, row_id: str, values: Row) -> None:
        """Apply a partial update to owner_id's row with the given id."""
        pass

    @abstractmethod
    async def delete(self, table: str, owner_id: str, row_id: str) -> None:
        """Delete owner_id's row with the given id."""
        pass

    async def close(self) -> None:
        """Release any held connections."""
        pass
