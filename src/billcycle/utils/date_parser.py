"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from billcycle.domain.entities import YearMonth


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "last month", "next month"

    Args:
        date_str: Date string in various formats
        today: Reference date for relative dates (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    if today is None:
        today = date.today()

    # Handle relative dates
    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "next month": (today + relativedelta(months=1)).replace(day=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # Try parsing as absolute date
    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_month(month_str: str, today: Optional[date] = None) -> YearMonth:
    """Parse a month string into a YearMonth.

    Accepts "yyyy-MM" as well as "this month", "last month" and "next month"
    (with or without the word "month", e.g. "this", "last", "next").

    Args:
        month_str: Month string
        today: Reference date for relative months (defaults to today)

    Returns:
        YearMonth

    Raises:
        ValueError: If the month string cannot be parsed
    """
    text = month_str.strip().lower()
    if today is None:
        today = date.today()

    offsets = {"this": 0, "current": 0, "last": -1, "previous": -1, "next": 1}
    word = text[: -len(" month")] if text.endswith(" month") else text
    if word in offsets:
        return YearMonth.of(today).shift(offsets[word])

    return YearMonth.parse(text)
