"""Local-first financial store."""

from smartspend.store.financial_store import FinancialStore
from smartspend.store.snapshot import SnapshotStorage

__all__ = ["FinancialStore", "SnapshotStorage"]
