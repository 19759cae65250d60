"""CSV import domain service.

Import is best-effort. Each target field is located by substring match
against a short list of header synonyms; a field whose header cannot be found
falls back to its position in the canonical column order, so headerless or
oddly labelled files still import. Rows that fail validation are skipped
without being reported individually.
"""

import csv
import logging
from datetime import date
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from smartspend.domain.entities import ImportResult, TransactionType
from smartspend.utils.amount_parser import parse_amount
from smartspend.utils.date_parser import current_month, normalize_month, parse_date

if TYPE_CHECKING:
    from smartspend.store.financial_store import FinancialStore

logger = logging.getLogger(__name__)

FieldSpec = tuple[str, tuple[str, ...]]

# Canonical column order doubles as the positional fallback.
TRANSACTION_FIELDS: list[FieldSpec] = [
    ("description", ("description", "desc")),
    ("amount", ("amount", "value")),
    ("category", ("category",)),
    ("date", ("date",)),
    ("type", ("type",)),
]

BUDGET_FIELDS: list[FieldSpec] = [
    ("category", ("category",)),
    ("budgeted", ("budgeted", "budget", "amount")),
    ("spent", ("spent",)),
    ("month", ("month", "period")),
]

DEFAULT_DESCRIPTION = "Imported Transaction"
DEFAULT_CATEGORY = "General"

NO_DATA_ROWS = "CSV file must contain a header row and at least one data row"


def split_lines(content: str) -> list[str]:
    """Split raw content into non-blank lines, dropping a UTF-8 BOM."""
    return [line for line in content.lstrip("\ufeff").splitlines() if line.strip()]


def tokenize(line: str) -> list[str]:
    """Split one line on commas and strip enclosing quotes and whitespace from each cell.

    Quotes inside a cell are kept, so a doubled quote written on export
    comes back as the single quote it stood for.
    """
    cells = next(csv.reader([line]), [])
    return [cell.strip().strip('"') for cell in cells]


def resolve_columns(header: Sequence[str], fields: Sequence[FieldSpec]) -> dict[str, int]:
    """Map each field to a column index.

    The first header cell (left to right) containing any of the field's
    candidate substrings wins; otherwise the field's canonical position is used.

    Args:
        header: Lower-cased, quote-stripped header cells
        fields: Ordered (field, candidate substrings) pairs

    Returns:
        Dict of field name to column index
    """
    columns: dict[str, int] = {}
    for position, (field, candidates) in enumerate(fields):
        index = next(
            (i for i, name in enumerate(header) if any(candidate in name for candidate in candidates)),
            None,
        )
        columns[field] = index if index is not None else position
    return columns


def _cell(values: Sequence[str], index: int) -> Optional[str]:
    if index < len(values) and values[index]:
        return values[index]
    return None


def parse_transaction_row(values: Sequence[str], columns: dict[str, int]) -> Optional[dict[str, Any]]:
    """Build add_transaction() arguments from a row, or None if the row is invalid.

    A nonzero parseable amount is required. The stored sign follows the
    type (expenses negative, income positive) whatever the file says. When
    the type cell is missing or unrecognized it is inferred from the sign.
    """
    amount_text = _cell(values, columns["amount"])
    if amount_text is None:
        return None
    try:
        amount = parse_amount(amount_text)
    except (ValueError, ArithmeticError):
        return None
    if amount == 0:
        return None

    type_text = (_cell(values, columns["type"]) or "").lower()
    if type_text in (TransactionType.INCOME.value, TransactionType.EXPENSE.value):
        txn_type = TransactionType(type_text)
    else:
        txn_type = TransactionType.EXPENSE if amount < 0 else TransactionType.INCOME

    magnitude = abs(amount)
    signed_amount = -magnitude if txn_type == TransactionType.EXPENSE else magnitude

    txn_date = date.today()
    date_text = _cell(values, columns["date"])
    if date_text is not None:
        try:
            txn_date = parse_date(date_text)
        except ValueError:
            pass

    return {
        "description": _cell(values, columns["description"]) or DEFAULT_DESCRIPTION,
        "amount": signed_amount,
        "category": _cell(values, columns["category"]) or DEFAULT_CATEGORY,
        "date": txn_date,
        "type": txn_type,
    }


def parse_budget_row(values: Sequence[str], columns: dict[str, int]) -> Optional[dict[str, Any]]:
    """Build add_budget() arguments from a row, or None if the row is invalid.

    A parseable, strictly positive budgeted amount is required; spent falls
    back to zero and month to the current period.
    """
    budgeted_text = _cell(values, columns["budgeted"])
    if budgeted_text is None:
        return None
    try:
        budgeted = parse_amount(budgeted_text)
    except (ValueError, ArithmeticError):
        return None
    if budgeted <= 0:
        return None

    try:
        spent = parse_amount(_cell(values, columns["spent"]) or "")
    except (ValueError, ArithmeticError):
        spent = 0

    month = current_month()
    month_text = _cell(values, columns["month"])
    if month_text is not None:
        try:
            month = normalize_month(month_text)
        except ValueError:
            pass

    return {
        "category": _cell(values, columns["category"]) or DEFAULT_CATEGORY,
        "budgeted": budgeted,
        "spent": spent,
        "month": month,
    }


class CSVImportService:
    """Service for importing CSV content into the financial store."""

    def __init__(self, store: "FinancialStore"):
        """Initialize CSV import service.

        Args:
            store: Financial store receiving one add per valid row
        """
        self.store = store

    def import_transactions(self, content: str) -> ImportResult:
        """Import transactions from CSV text."""
        return self._import(
            content, TRANSACTION_FIELDS, parse_transaction_row, self.store.add_transaction, "transactions"
        )

    def import_budgets(self, content: str) -> ImportResult:
        """Import budget items from CSV text."""
        return self._import(content, BUDGET_FIELDS, parse_budget_row, self.store.add_budget, "budget items")

    def _import(
        self,
        content: str,
        fields: Sequence[FieldSpec],
        parse_row: Callable[[Sequence[str], dict[str, int]], Optional[dict[str, Any]]],
        add: Callable[..., Any],
        label: str,
    ) -> ImportResult:
        imported = 0
        skipped = 0
        try:
            lines = split_lines(content)
            if len(lines) < 2:
                return ImportResult(success=False, message=NO_DATA_ROWS)

            header = [cell.lower() for cell in tokenize(lines[0])]
            columns = resolve_columns(header, fields)

            for line in lines[1:]:
                row = parse_row(tokenize(line), columns)
                if row is None:
                    skipped += 1
                    continue
                if add(**row) is not None:
                    imported += 1
        except Exception as e:
            logger.warning("CSV import of %s failed after %d rows: %s", label, imported, e)
            return ImportResult(success=False, message=f"Failed to parse CSV: {e}", imported=imported)

        logger.info("Imported %d %s (%d rows skipped)", imported, label, skipped)
        return ImportResult(
            success=True,
            message=f"Successfully imported {imported} {label}",
            imported=imported,
        )
