"""Recurrence projection.

Given every stored row and a target month, compute the line items visible for
that month:

- non-fixed rows appear in each of their installment months;
- a fixed template appears as itself in its own first month, and in every
  later month either through the row materialized from it for that month or,
  when there is none, as a virtual occurrence dated on the template's anchor
  day (clamped to the month's length).

Projection is pure. A row whose stored date cannot be read is left out and
reported as a ``DataAnomaly``; it never aborts the whole projection.
"""

from datetime import date, datetime
from typing import Iterable, Optional

from billcycle.domain.entities import (
    ConcreteOccurrence,
    DataAnomaly,
    ObligationRow,
    Occurrence,
    VirtualOccurrence,
    YearMonth,
)
from billcycle.domain.months import add_months, clamp_to_month


def project(rows: Iterable[ObligationRow], target_month: YearMonth) -> list[Occurrence]:
    """Return the occurrences visible in ``target_month``, ordered by date."""
    occurrences, _ = project_with_anomalies(rows, target_month)
    return occurrences


def project_with_anomalies(
    rows: Iterable[ObligationRow], target_month: YearMonth
) -> tuple[list[Occurrence], list[DataAnomaly]]:
    """Project ``target_month`` and also return the rows that were skipped.

    Args:
        rows: Every stored row, in store order
        target_month: Month to project

    Returns:
        Tuple of (occurrences sorted by scheduled date, anomalies). Occurrences
        sharing a date keep the order of their rows in ``rows``.
    """
    anomalies: list[DataAnomaly] = []
    dated: list[tuple[ObligationRow, date]] = []
    for row in rows:
        scheduled = coerce_date(row.scheduled_date)
        if scheduled is None:
            anomalies.append(
                DataAnomaly(
                    row_id=getattr(row, "id", None),
                    reason=f"unreadable scheduled date {row.scheduled_date!r}",
                )
            )
            continue
        dated.append((row, scheduled))

    # Templates already materialized for this month
    materialized = {
        row.original_template_id
        for row, scheduled in dated
        if not row.is_fixed and row.original_template_id and target_month.contains(scheduled)
    }

    occurrences: list[Occurrence] = []
    for row, scheduled in dated:
        if row.is_fixed:
            occurrence = _project_template(row, scheduled, target_month, materialized)
        else:
            occurrence = _project_row(row, scheduled, target_month)
        if occurrence is not None:
            occurrences.append(occurrence)

    occurrences.sort(key=lambda occurrence: occurrence.scheduled_date)
    return occurrences, anomalies


def _project_row(
    row: ObligationRow, scheduled: date, target_month: YearMonth
) -> Optional[ConcreteOccurrence]:
    offset = target_month.months_since(YearMonth.of(scheduled))
    if not 0 <= offset < row.installment_count:
        return None
    return ConcreteOccurrence(
        row=row,
        scheduled_date=add_months(scheduled, offset),
        installment=offset + 1,
    )


def _project_template(
    template: ObligationRow,
    scheduled: date,
    target_month: YearMonth,
    materialized: set,
) -> Optional[Occurrence]:
    anchor_month = YearMonth.of(scheduled)
    if target_month == anchor_month:
        return ConcreteOccurrence(row=template, scheduled_date=scheduled)
    if target_month < anchor_month:
        return None
    if template.id in materialized:
        # The materialized row is emitted on its own as a non-fixed row
        return None
    return VirtualOccurrence(
        template=template,
        month=target_month,
        scheduled_date=clamp_to_month(target_month, scheduled.day),
    )


def coerce_date(value) -> Optional[date]:
    """Read a stored date value, returning None when it is unusable.

    Accepts ``date`` values and ISO ``yyyy-mm-dd`` strings (as read back from
    loosely typed sources); datetimes are truncated to their date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None
