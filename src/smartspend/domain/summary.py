"""Derived financial values.

Pure functions over entity collections. They never look at the gateway and
never cache, so they always reflect whatever collections they are given.
Every aggregate uses abs(amount); the stored sign is not trusted.
"""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from smartspend.domain.entities import BudgetItem, SavingsGoal, Transaction, TransactionType

ZERO = Decimal("0")

# Share of the month's budget that may be spent before the alert fires.
BUDGET_ALERT_RATIO = Decimal("0.8")

# Goals at or past this percentage, but not yet complete, are flagged.
GOAL_ALERT_PERCENT = Decimal("75")


def _in_month(txn: Transaction, month: str) -> bool:
    return f"{txn.date.year:04d}-{txn.date.month:02d}" == month


def total_income(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of income magnitudes."""
    return sum(
        (abs(txn.amount) for txn in transactions if txn.type == TransactionType.INCOME),
        ZERO,
    )


def total_expenses(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of expense magnitudes. Never negative."""
    return sum(
        (abs(txn.amount) for txn in transactions if txn.type == TransactionType.EXPENSE),
        ZERO,
    )


def balance(transactions: Sequence[Transaction]) -> Decimal:
    """Income minus expenses."""
    return total_income(transactions) - total_expenses(transactions)


def spending_by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Expense magnitudes grouped by category label."""
    spending: dict[str, Decimal] = {}
    for txn in transactions:
        if txn.type != TransactionType.EXPENSE:
            continue
        spending[txn.category] = spending.get(txn.category, ZERO) + abs(txn.amount)
    return spending


def budget_status(
    budgets: Iterable[BudgetItem], month: Optional[str] = None
) -> dict[str, dict[str, Decimal]]:
    """Per-category spent/budgeted/remaining from the stored budget items.

    When several items share a category (different months, unless filtered),
    the one appearing later in the collection wins.
    """
    status: dict[str, dict[str, Decimal]] = {}
    for budget in budgets:
        if month is not None and budget.month != month:
            continue
        status[budget.category] = {
            "spent": budget.spent,
            "budgeted": budget.budgeted,
            "remaining": budget.budgeted - budget.spent,
        }
    return status


def actual_spending(transactions: Iterable[Transaction], category: str, month: str) -> Decimal:
    """Expense total recorded by transactions for one category and YYYY-MM month.

    This is computed independently of BudgetItem.spent; neither value
    overrides the other.
    """
    return sum(
        (
            abs(txn.amount)
            for txn in transactions
            if txn.type == TransactionType.EXPENSE
            and txn.category == category
            and _in_month(txn, month)
        ),
        ZERO,
    )


def savings_progress(goals: Sequence[SavingsGoal]) -> Decimal:
    """Average completion percentage across goals, 0 when there are none."""
    ratios = [goal.current_amount / goal.target_amount for goal in goals if goal.target_amount]
    if not goals:
        return ZERO
    return sum(ratios, ZERO) / len(goals) * 100


def goal_progress(goal: SavingsGoal) -> Decimal:
    """Completion percentage of one goal, 0 when it has no target."""
    if not goal.target_amount:
        return ZERO
    return goal.current_amount / goal.target_amount * 100


def goal_alerts(goals: Iterable[SavingsGoal]) -> list[tuple[SavingsGoal, Decimal]]:
    """Goals that are nearly reached: at least 75% but under 100% funded.

    Returns:
        (goal, progress percentage) pairs in collection order
    """
    alerts = []
    for goal in goals:
        progress = goal_progress(goal)
        if GOAL_ALERT_PERCENT <= progress < 100:
            alerts.append((goal, progress))
    return alerts


def total_budgeted(budgets: Iterable[BudgetItem], month: Optional[str] = None) -> Decimal:
    """Sum of budgeted amounts, optionally for a single YYYY-MM month."""
    return sum(
        (budget.budgeted for budget in budgets if month is None or budget.month == month),
        ZERO,
    )


def monthly_expenses(transactions: Iterable[Transaction], month: str) -> Decimal:
    """Expense magnitudes dated in one YYYY-MM month, across all categories."""
    return total_expenses(txn for txn in transactions if _in_month(txn, month))


def budget_alert(
    transactions: Sequence[Transaction],
    budgets: Sequence[BudgetItem],
    month: str,
    ratio: Decimal = BUDGET_ALERT_RATIO,
) -> bool:
    """Whether the month's expenses exceed ratio of what was budgeted for it.

    Never fires for a month with nothing budgeted.
    """
    budgeted = total_budgeted(budgets, month)
    if budgeted <= 0:
        return False
    return monthly_expenses(transactions, month) > budgeted * ratio


def budget_remaining(
    transactions: Sequence[Transaction],
    budgets: Sequence[BudgetItem],
    month: Optional[str] = None,
) -> Decimal:
    """Total budgeted minus spending recorded in budgeted categories.

    Expenses in categories without a budget item do not count against it.
    A negative result is the amount by which spending is over budget.
    """
    scoped = [budget for budget in budgets if month is None or budget.month == month]
    categories = {budget.category for budget in scoped}
    spent = total_expenses(
        txn
        for txn in transactions
        if txn.category in categories and (month is None or _in_month(txn, month))
    )
    return total_budgeted(scoped) - spent
