"""CSV export of store collections.

Each export has a fixed header row. Free-text fields are double-quoted
(embedded quotes doubled), dates are YYYY-MM-DD. The transactions export is
accepted as-is by the transactions importer.
"""

from decimal import Decimal
from typing import Iterable, Optional

from smartspend.domain.entities import BudgetItem, SavingsGoal, Transaction

TRANSACTIONS_HEADER = "description,amount,category,date,type"
BUDGETS_HEADER = "category,budgeted,spent,month"
GOALS_HEADER = "name,targetAmount,currentAmount,deadline,description"
ALL_HEADER = (
    "type,description,amount,category,date,budgeted,spent,month,"
    "targetAmount,currentAmount,deadline,goalName"
)

EXPORT_KINDS = ("transactions", "budget", "goals", "all")


def quote(text: Optional[str]) -> str:
    """Double-quote a free-text field."""
    return '"' + (text or "").replace('"', '""') + '"'


def _number(value: Decimal) -> str:
    return format(value, "f")


def _lines(header: str, rows: Iterable[str]) -> str:
    return "\n".join([header, *rows]) + "\n"


def export_transactions(transactions: Iterable[Transaction]) -> str:
    return _lines(
        TRANSACTIONS_HEADER,
        (
            ",".join(
                [
                    quote(t.description),
                    _number(t.amount),
                    quote(t.category),
                    quote(t.date.isoformat()),
                    quote(t.type.value),
                ]
            )
            for t in transactions
        ),
    )


def export_budgets(budgets: Iterable[BudgetItem]) -> str:
    return _lines(
        BUDGETS_HEADER,
        (
            ",".join([quote(b.category), _number(b.budgeted), _number(b.spent), quote(b.month)])
            for b in budgets
        ),
    )


def export_goals(goals: Iterable[SavingsGoal]) -> str:
    return _lines(
        GOALS_HEADER,
        (
            ",".join(
                [
                    quote(g.name),
                    _number(g.target_amount),
                    _number(g.current_amount),
                    quote(g.deadline.isoformat()),
                    quote(g.description),
                ]
            )
            for g in goals
        ),
    )


def export_all(
    transactions: Iterable[Transaction],
    budgets: Iterable[BudgetItem],
    goals: Iterable[SavingsGoal],
) -> str:
    """Export everything into one file, one entity per row, tagged by a type column."""
    rows: list[str] = []
    for t in transactions:
        rows.append(
            ",".join(
                ["transaction", quote(t.description), _number(t.amount), quote(t.category), t.date.isoformat()]
                + [""] * 7
            )
        )
    for b in budgets:
        rows.append(
            ",".join(
                ["budget", "", "", quote(b.category), "", _number(b.budgeted), _number(b.spent), quote(b.month)]
                + [""] * 4
            )
        )
    for g in goals:
        rows.append(
            ",".join(
                ["goal"]
                + [""] * 7
                + [_number(g.target_amount), _number(g.current_amount), g.deadline.isoformat(), quote(g.name)]
            )
        )
    return _lines(ALL_HEADER, rows)


def export_kind(kind: str, transactions, budgets, goals) -> str:
    """Dispatch on one of EXPORT_KINDS.

    Raises:
        ValueError: If kind is not recognized
    """
    if kind == "transactions":
        return export_transactions(transactions)
    if kind == "budget":
        return export_budgets(budgets)
    if kind == "goals":
        return export_goals(goals)
    if kind == "all":
        return export_all(transactions, budgets, goals)
    raise ValueError(f"Unknown export kind '{kind}'. Supported: {', '.join(EXPORT_KINDS)}")


def default_filename(kind: str) -> str:
    return {
        "transactions": "transactions.csv",
        "budget": "budget.csv",
        "goals": "goals.csv",
        "all": "smartspend-complete-data.csv",
    }[kind]
