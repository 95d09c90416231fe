"""Month arithmetic helpers."""

from datetime import date

from dateutil.relativedelta import relativedelta

from billcycle.domain.entities import YearMonth


def clamp_to_month(month: YearMonth, day: int) -> date:
    """Return ``day`` of ``month``, clamped to the month's last day.

    An anchor day of 31 lands on April 30 and on February 28 (or 29 in a leap
    year); the result never rolls over into the following month.
    """
    if day < 1:
        raise ValueError(f"Invalid anchor day {day}")
    return month.first_day + relativedelta(day=day)


def add_months(value: date, months: int) -> date:
    """Shift a date by whole calendar months, clamping the day."""
    return value + relativedelta(months=months)


def month_options(today: date, past: int = 11, future: int = 6) -> list[YearMonth]:
    """Return the selectable months around ``today``.

    Args:
        today: Reference date
        past: Number of months before the current month
        future: Number of months after the current month

    Returns:
        Months in ascending order, current month included
    """
    current = YearMonth.of(today)
    return [current.shift(offset) for offset in range(-past, future + 1)]
