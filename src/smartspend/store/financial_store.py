"""Local-first financial store.

Holds one user's transactions, budgets and savings goals in memory, mirrors
them to a local snapshot on every change, and writes each mutation through to
the remote gateway *after* applying it locally.

Consistency model: local state is authoritative for reads; remote writes are
best-effort. A rejected write is logged and reported to error listeners but
is not rolled back, so local and remote may diverge until the next
load_user_data(). Mutations are not queued against each other: two updates
of the same record race, and the last remote write to land wins.
"""

import asyncio
import dataclasses
import logging
import time
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Coroutine, Optional

from smartspend.domain import summary
from smartspend.domain.entities import BudgetItem, SavingsGoal, Transaction, TransactionType
from smartspend.domain.errors import ValidationError, invalid_transaction_type, unknown_fields
from smartspend.gateway.base import BUDGETS_TABLE, GOALS_TABLE, TRANSACTIONS_TABLE, Gateway, Row
from smartspend.gateway.mappers import (
    BUDGET_COLUMNS,
    GOAL_COLUMNS,
    TRANSACTION_COLUMNS,
    budget_to_row,
    changes_to_columns,
    goal_to_row,
    row_to_budget,
    row_to_goal,
    row_to_transaction,
    transaction_to_row,
)
from smartspend.session import SessionBinding
from smartspend.store.snapshot import Snapshot, SnapshotStorage
from smartspend.utils.amount_parser import to_decimal
from smartspend.utils.date_parser import current_month, normalize_month, to_date

logger = logging.getLogger(__name__)

Observer = Callable[["FinancialStore"], None]
ErrorListener = Callable[[str, Exception], None]


def _to_type(value: Any) -> TransactionType:
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().lower())
    except ValueError:
        raise ValueError(invalid_transaction_type(value)) from None


@dataclass(frozen=True)
class _EntityKind:
    """How one entity kind is stored locally and remotely."""

    label: str
    attr: str
    table: str
    order_by: str
    coercers: dict[str, Callable[[Any], Any]]
    columns: dict[str, str]
    to_row: Callable[[Any], Row]
    from_row: Callable[[Row], Any]


TRANSACTIONS = _EntityKind(
    label="transaction",
    attr="transactions",
    table=TRANSACTIONS_TABLE,
    order_by="date",
    coercers={
        "description": str,
        "amount": to_decimal,
        "category": str,
        "date": to_date,
        "type": _to_type,
    },
    columns=TRANSACTION_COLUMNS,
    to_row=transaction_to_row,
    from_row=row_to_transaction,
)

BUDGETS = _EntityKind(
    label="budget",
    attr="budgets",
    table=BUDGETS_TABLE,
    order_by="month",
    coercers={
        "category": str,
        "budgeted": to_decimal,
        "spent": to_decimal,
        "month": normalize_month,
    },
    columns=BUDGET_COLUMNS,
    to_row=budget_to_row,
    from_row=row_to_budget,
)

GOALS = _EntityKind(
    label="goal",
    attr="goals",
    table=GOALS_TABLE,
    order_by="created_at",
    coercers={
        "name": str,
        "target_amount": to_decimal,
        "current_amount": to_decimal,
        "deadline": to_date,
        "description": str,
    },
    columns=GOAL_COLUMNS,
    to_row=goal_to_row,
    from_row=row_to_goal,
)


def _new_id() -> str:
    return str(uuid.uuid4())


class FinancialStore:
    """Observable, persisted state container for one user's finances.

    Construct one per application run and hand it to whatever needs it.
    """

    def __init__(
        self,
        gateway: Gateway,
        session: SessionBinding,
        storage: Optional[SnapshotStorage] = None,
    ):
        """Initialize the store and rehydrate it from the local snapshot.

        Args:
            gateway: Remote persistence gateway
            session: Source of the signed-in identity
            storage: Optional snapshot storage; without it nothing is persisted
        """
        self.gateway = gateway
        self.session = session
        self.storage = storage

        self.transactions: list[Transaction] = []
        self.budgets: list[BudgetItem] = []
        self.goals: list[SavingsGoal] = []
        self.is_loading = False
        self.last_sync_time: float = 0
        # Identity the collections belong to.
        self.owner_id: Optional[str] = session.get_current_user_id()

        self._observers: list[Observer] = []
        self._error_listeners: list[ErrorListener] = []
        self._pending: set[asyncio.Task] = set()

        self._rehydrate()

    # Observation
    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Call observer(store) after every state change. Returns an unsubscribe function."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def add_error_listener(self, listener: ErrorListener) -> None:
        """Call listener(operation, error) for every failed gateway call."""
        self._error_listeners.append(listener)

    # Transaction operations
    def add_transaction(
        self,
        description: str,
        amount: Any,
        category: str,
        date: Any,
        type: TransactionType | str,
    ) -> Optional[Transaction]:
        """Add a transaction for the signed-in user.

        Returns:
            The new transaction, or None when nobody is signed in

        Raises:
            ValidationError: If a field cannot be coerced
        """
        user_id = self.session.get_current_user_id()
        if user_id is None:
            logger.info("Ignoring add_transaction: no signed-in user")
            return None

        fields = self._coerce(
            TRANSACTIONS,
            {"description": description, "amount": amount, "category": category, "date": date, "type": type},
        )
        txn = Transaction(id=_new_id(), user_id=user_id, **fields)
        self._add(TRANSACTIONS, txn)
        return txn

    def update_transaction(self, transaction_id: str, **changes: Any) -> None:
        """Merge changes into a transaction. Unknown ids are ignored."""
        self._update(TRANSACTIONS, transaction_id, changes)

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction. Unknown ids are ignored."""
        self._delete(TRANSACTIONS, transaction_id)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self._find(TRANSACTIONS, transaction_id)

    # Budget operations
    def add_budget(
        self, category: str, budgeted: Any, spent: Any = 0, month: Optional[str] = None
    ) -> Optional[BudgetItem]:
        """Add a budget item; month defaults to the current period."""
        user_id = self.session.get_current_user_id()
        if user_id is None:
            logger.info("Ignoring add_budget: no signed-in user")
            return None

        if month is None:
            month = current_month()
        fields = self._coerce(
            BUDGETS, {"category": category, "budgeted": budgeted, "spent": spent, "month": month}
        )
        budget = BudgetItem(id=_new_id(), user_id=user_id, **fields)
        self._add(BUDGETS, budget)
        return budget

    def update_budget(self, budget_id: str, **changes: Any) -> None:
        """Merge changes into a budget item. Unknown ids are ignored."""
        self._update(BUDGETS, budget_id, changes)

    def delete_budget(self, budget_id: str) -> None:
        """Delete a budget item. Unknown ids are ignored."""
        self._delete(BUDGETS, budget_id)

    def get_budget(self, budget_id: str) -> Optional[BudgetItem]:
        return self._find(BUDGETS, budget_id)

    # Savings goal operations
    def add_goal(
        self,
        name: str,
        target_amount: Any,
        current_amount: Any,
        deadline: Any,
        description: str = "",
    ) -> Optional[SavingsGoal]:
        """Add a savings goal for the signed-in user."""
        user_id = self.session.get_current_user_id()
        if user_id is None:
            logger.info("Ignoring add_goal: no signed-in user")
            return None

        fields = self._coerce(
            GOALS,
            {
                "name": name,
                "target_amount": target_amount,
                "current_amount": current_amount,
                "deadline": deadline,
                "description": description or "",
            },
        )
        goal = SavingsGoal(id=_new_id(), user_id=user_id, **fields)
        self._add(GOALS, goal)
        return goal

    def update_goal(self, goal_id: str, **changes: Any) -> None:
        """Merge changes into a savings goal. Unknown ids are ignored."""
        self._update(GOALS, goal_id, changes)

    def delete_goal(self, goal_id: str) -> None:
        """Delete a savings goal. Unknown ids are ignored."""
        self._delete(GOALS, goal_id)

    def get_goal(self, goal_id: str) -> Optional[SavingsGoal]:
        return self._find(GOALS, goal_id)

    # Loading and clearing
    async def load_user_data(self, user_id: str) -> None:
        """Replace all three collections with the gateway's copy.

        Each kind loads independently: a failure is logged and reported, the
        old collection for that kind is kept, and the other kinds still load.
        Loading for a different identity than the current owner first drops
        the local collections, so another user's data is never kept.
        """
        self._adopt_owner(user_id)
        for kind in (TRANSACTIONS, BUDGETS, GOALS):
            try:
                rows = await self.gateway.select(kind.table, user_id, kind.order_by, descending=True)
                items = [kind.from_row(row) for row in rows]
            except Exception as e:
                self._report(f"load {kind.attr}", e)
                continue
            self._set(kind, items)
            logger.info("Loaded %d %s for user %s", len(items), kind.attr, user_id)

    async def sync_data(self) -> None:
        """Reload the signed-in user's data, tracking is_loading and last_sync_time."""
        user_id = self.session.get_current_user_id()
        if user_id is None:
            return

        self.is_loading = True
        self._notify()
        try:
            await self.load_user_data(user_id)
            self.last_sync_time = time.time()
        finally:
            self.is_loading = False
            self._commit()

    def clear(self) -> None:
        """Drop all local data and sync bookkeeping."""
        self.transactions = []
        self.budgets = []
        self.goals = []
        self.is_loading = False
        self.last_sync_time = 0
        self.owner_id = self.session.get_current_user_id()
        self._commit()

    async def wait_for_pending(self) -> None:
        """Wait until every scheduled gateway write has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    @property
    def has_pending_writes(self) -> bool:
        return bool(self._pending)

    # Derived values
    def get_total_income(self) -> Decimal:
        return summary.total_income(self.transactions)

    def get_total_expenses(self) -> Decimal:
        return summary.total_expenses(self.transactions)

    def get_balance(self) -> Decimal:
        return summary.balance(self.transactions)

    def get_spending_by_category(self) -> dict[str, Decimal]:
        return summary.spending_by_category(self.transactions)

    def get_budget_status(self, month: Optional[str] = None) -> dict[str, dict[str, Decimal]]:
        return summary.budget_status(self.budgets, month=month)

    def get_actual_spending(self, category: str, month: str) -> Decimal:
        """Spending for a budget's category/month derived from transactions."""
        return summary.actual_spending(self.transactions, category, month)

    def get_savings_progress(self) -> Decimal:
        return summary.savings_progress(self.goals)

    def get_budget_alert(self, month: Optional[str] = None) -> bool:
        """Whether more than 80% of the month's budget is spent; month defaults to the current one."""
        return summary.budget_alert(self.transactions, self.budgets, month or current_month())

    def get_budget_remaining(self, month: Optional[str] = None) -> Decimal:
        """Budgeted minus spending in budgeted categories; negative when over budget."""
        return summary.budget_remaining(self.transactions, self.budgets, month=month)

    def get_goal_alerts(self) -> list[tuple[SavingsGoal, Decimal]]:
        return summary.goal_alerts(self.goals)

    # Internals
    def _coerce(self, kind: _EntityKind, fields: dict[str, Any]) -> dict[str, Any]:
        unknown = set(fields) - set(kind.coercers)
        if unknown:
            raise ValidationError(unknown_fields(kind.label, unknown))

        coerced = {}
        for name, value in fields.items():
            try:
                coerced[name] = kind.coercers[name](value)
            except (ValueError, TypeError) as e:
                raise ValidationError(f"Invalid {kind.label} {name} '{value}': {e}") from e
        return coerced

    def _adopt_owner(self, user_id: str) -> None:
        if user_id == self.owner_id:
            return
        logger.info("Dropping local data of %s for %s", self.owner_id, user_id)
        self.transactions = []
        self.budgets = []
        self.goals = []
        self.last_sync_time = 0
        self.owner_id = user_id

    def _find(self, kind: _EntityKind, item_id: str) -> Any:
        for item in getattr(self, kind.attr):
            if item.id == item_id:
                return item
        return None

    def _add(self, kind: _EntityKind, entity: Any) -> None:
        self._adopt_owner(entity.user_id)
        # Newest first.
        self._set(kind, [entity, *getattr(self, kind.attr)])
        self._schedule(self._remote_insert(kind, entity))

    def _update(self, kind: _EntityKind, item_id: str, changes: dict[str, Any]) -> None:
        fields = self._coerce(kind, changes)
        item = self._find(kind, item_id)
        if not fields or item is None:
            return

        items = getattr(self, kind.attr)
        self._set(kind, [dataclasses.replace(i, **fields) if i.id == item_id else i for i in items])
        self._schedule(
            self._remote_update(kind, item.user_id, item_id, changes_to_columns(fields, kind.columns))
        )

    def _delete(self, kind: _EntityKind, item_id: str) -> None:
        item = self._find(kind, item_id)
        if item is None:
            return
        self._set(kind, [i for i in getattr(self, kind.attr) if i.id != item_id])
        self._schedule(self._remote_delete(kind, item.user_id, item_id))

    async def _remote_insert(self, kind: _EntityKind, entity: Any) -> None:
        try:
            saved = await self.gateway.insert(kind.table, kind.to_row(entity))
        except Exception as e:
            self._report(f"insert {kind.label}", e)
            return

        server_id = saved.get("id") if saved else None
        if server_id is not None and str(server_id) != entity.id:
            self._reconcile_id(kind, entity.id, str(server_id))

    async def _remote_update(self, kind: _EntityKind, owner_id: str, item_id: str, values: Row) -> None:
        try:
            await self.gateway.update(kind.table, owner_id, item_id, values)
        except Exception as e:
            self._report(f"update {kind.label}", e)

    async def _remote_delete(self, kind: _EntityKind, owner_id: str, item_id: str) -> None:
        try:
            await self.gateway.delete(kind.table, owner_id, item_id)
        except Exception as e:
            self._report(f"delete {kind.label}", e)

    def _reconcile_id(self, kind: _EntityKind, local_id: str, server_id: str) -> None:
        if self._find(kind, local_id) is None:
            return
        logger.debug("Reconciling %s id %s -> %s", kind.label, local_id, server_id)
        items = getattr(self, kind.attr)
        self._set(
            kind,
            [dataclasses.replace(i, id=server_id) if i.id == local_id else i for i in items],
        )

    def _schedule(self, write: Coroutine[Any, Any, None]) -> None:
        """Run a gateway write in the background, or inline outside an event loop."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(write)
            return

        task = loop.create_task(write)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _set(self, kind: _EntityKind, items: list[Any]) -> None:
        setattr(self, kind.attr, items)
        self._commit()

    def _commit(self) -> None:
        self._persist()
        self._notify()

    def _persist(self) -> None:
        if self.storage is None:
            return
        try:
            self.storage.save(
                Snapshot(
                    transactions=self.transactions,
                    budgets=self.budgets,
                    goals=self.goals,
                    last_sync_time=self.last_sync_time,
                    user_id=self.owner_id,
                )
            )
        except OSError as e:
            logger.error("Could not write snapshot %s: %s", self.storage.path, e)

    def _notify(self) -> None:
        for observer in list(self._observers):
            try:
                observer(self)
            except Exception:
                logger.exception("Store observer %r failed", observer)

    def _report(self, operation: str, error: Exception) -> None:
        logger.error("Gateway %s failed: %s", operation, error)
        for listener in list(self._error_listeners):
            try:
                listener(operation, error)
            except Exception:
                logger.exception("Error listener %r failed", listener)

    def _rehydrate(self) -> None:
        if self.storage is None:
            return
        snapshot = self.storage.load()
        if snapshot is None:
            return
        if snapshot.user_id != self.owner_id:
            logger.info(
                "Ignoring snapshot owned by %s while bound to %s", snapshot.user_id, self.owner_id
            )
            return
        self.transactions = snapshot.transactions
        self.budgets = snapshot.budgets
        self.goals = snapshot.goals
        self.last_sync_time = snapshot.last_sync_time
        logger.debug(
            "Rehydrated %d transactions, %d budgets, %d goals from %s",
            len(self.transactions),
            len(self.budgets),
            len(self.goals),
            self.storage.path,
        )
