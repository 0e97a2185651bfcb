"""Utility functions for smallbooks."""

from smallbooks.utils.date_parser import parse_date
from smallbooks.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_amount"]
