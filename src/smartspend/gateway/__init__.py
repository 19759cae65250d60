"""Remote persistence gateway layer for smartspend."""

from smartspend.gateway.base import Gateway, TRANSACTIONS_TABLE, BUDGETS_TABLE, GOALS_TABLE
from smartspend.gateway.factories import create_gateway, create_sqlite_gateway, create_rest_gateway

__all__ = [
    "Gateway",
    "TRANSACTIONS_TABLE",
    "BUDGETS_TABLE",
    "GOALS_TABLE",
    "create_gateway",
    "create_sqlite_gateway",
    "create_rest_gateway",
]
