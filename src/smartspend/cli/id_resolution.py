"""Resolve full or abbreviated record IDs typed on the command line."""

from typing import Iterable, TypeVar

import click

from smartspend.domain.errors import NotFoundError, ValidationError

T = TypeVar("T")


def resolve_id(items: Iterable[T], reference: str, label: str) -> T:
    """Find the record whose ID equals or starts with reference.

    Args:
        items: Records carrying an ``id`` attribute
        reference: Full ID or a unique prefix of one
        label: Record kind used in error messages (e.g. "Transaction")

    Returns:
        The matching record

    Raises:
        NotFoundError: If nothing matches
        ValidationError: If the prefix is ambiguous
    """
    reference = reference.strip()
    if not reference:
        raise ValidationError(f"{label} ID must not be empty")

    matches = []
    for item in items:
        if item.id == reference:
            return item
        if item.id.startswith(reference):
            matches.append(item)

    if not matches:
        raise NotFoundError(f"{label} {reference} not found")
    if len(matches) > 1:
        raise ValidationError(f"{label} ID '{reference}' is ambiguous ({len(matches)} matches)")
    return matches[0]


def resolve_id_or_exit(ctx: click.Context, items: Iterable[T], reference: str, label: str) -> T:
    """Resolve a record ID, or exit with a CLI error."""
    try:
        return resolve_id(items, reference, label)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
