"""Utility functions for billcycle."""

from billcycle.utils.date_parser import parse_date, parse_month
from billcycle.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_month", "parse_amount"]
