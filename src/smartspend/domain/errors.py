"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class GatewayError(DomainError):
    """A remote persistence call was rejected or could not be completed."""

    def __init__(self, message: str, table: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.table = table
        self.operation = operation


def unknown_fields(entity_name: str, fields: set[str]) -> str:
    """Return message for update fields the entity does not have."""
    return f"Cannot update {entity_name}: unknown field(s) {', '.join(sorted(fields))}"


def invalid_transaction_type(value: object) -> str:
    """Return message for a type outside income/expense."""
    return f"Invalid transaction type '{value}': expected 'income' or 'expense'"


def gateway_failure(operation: str, table: str, detail: object) -> str:
    """Return message for a failed gateway call."""
    return f"Gateway {operation} on '{table}' failed: {detail}"
