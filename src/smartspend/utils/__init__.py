"""Utility functions for smartspend."""

from smartspend.utils.date_parser import parse_date, to_date, current_month, normalize_month
from smartspend.utils.amount_parser import parse_amount, to_decimal

__all__ = ["parse_date", "to_date", "current_month", "normalize_month", "parse_amount", "to_decimal"]
