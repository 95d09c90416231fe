"""Tests for recurrence projection."""

from datetime import date
from decimal import Decimal

import pytest

from billcycle.domain.entities import (
    ConcreteOccurrence,
    ObligationRow,
    VirtualOccurrence,
    YearMonth,
)
from billcycle.domain.projection import coerce_date, project, project_with_anomalies


def _row(row_id, scheduled, amount="100.00", **fields):
    return ObligationRow(
        id=row_id,
        description=fields.pop("description", f"Obligation {row_id}"),
        amount=Decimal(amount),
        scheduled_date=scheduled,
        **fields,
    )


def _slot(occurrences, template_id):
    """Occurrences tied to a template: virtual, materialized, or the template itself."""
    return [
        o
        for o in occurrences
        if o.original_template_id == template_id or o.occurrence_id == template_id
    ]


class TestSingleRows:
    def test_row_shown_in_its_month_only(self):
        row = _row("a", date(2024, 3, 10))

        assert [o.occurrence_id for o in project([row], YearMonth(2024, 3))] == ["a"]
        assert project([row], YearMonth(2024, 2)) == []
        assert project([row], YearMonth(2024, 4)) == []

    def test_concrete_occurrence_keeps_row_fields(self):
        row = _row("a", date(2024, 3, 10), settled=True, settled_date=date(2024, 3, 9))

        (occurrence,) = project([row], YearMonth(2024, 3))

        assert isinstance(occurrence, ConcreteOccurrence)
        assert occurrence.row is row
        assert occurrence.is_virtual is False
        assert occurrence.settled is True
        assert occurrence.settled_date == date(2024, 3, 9)
        assert occurrence.installment == 1

    @pytest.mark.parametrize("installments", [None, 0, -3])
    def test_missing_or_non_positive_installments_count_as_one(self, installments):
        row = _row("a", date(2024, 1, 15), installments=installments)

        assert len(project([row], YearMonth(2024, 1))) == 1
        assert project([row], YearMonth(2024, 2)) == []


class TestInstallments:
    def test_installments_expand_over_consecutive_months(self):
        row = _row("loan", date(2024, 1, 20), amount="100.00", installments=3)

        for month_number, installment in [(1, 1), (2, 2), (3, 3)]:
            (occurrence,) = project([row], YearMonth(2024, month_number))
            assert occurrence.amount == Decimal("100.00")
            assert occurrence.installment == installment
            assert occurrence.installment_count == 3
            assert occurrence.scheduled_date == date(2024, month_number, 20)

        assert project([row], YearMonth(2023, 12)) == []
        assert project([row], YearMonth(2024, 4)) == []

    def test_installment_dates_clamp_to_short_months(self):
        row = _row("loan", date(2024, 1, 31), installments=3)

        (february,) = project([row], YearMonth(2024, 2))
        (march,) = project([row], YearMonth(2024, 3))

        assert february.scheduled_date == date(2024, 2, 29)
        assert march.scheduled_date == date(2024, 3, 31)

    def test_installments_cross_year_boundary(self):
        row = _row("loan", date(2024, 11, 5), installments=4)

        months = [m for m in range(1, 13) if project([row], YearMonth(2025, m))]

        assert months == [1, 2]


class TestTemplates:
    def test_template_shown_as_itself_in_anchor_month(self):
        template = _row("rent", date(2024, 1, 31), is_fixed=True)

        (occurrence,) = project([template], YearMonth(2024, 1))

        assert isinstance(occurrence, ConcreteOccurrence)
        assert occurrence.row is template

    def test_template_contributes_nothing_before_anchor_month(self):
        template = _row("rent", date(2024, 5, 1), is_fixed=True)

        assert project([template], YearMonth(2024, 4)) == []
        assert project([template], YearMonth(2023, 5)) == []

    def test_virtual_occurrence_synthesized_after_anchor_month(self):
        template = _row(
            "rent",
            date(2024, 1, 10),
            is_fixed=True,
            settled=True,
            settled_date=date(2024, 1, 10),
            category="Housing",
        )

        (occurrence,) = project([template], YearMonth(2024, 6))

        assert isinstance(occurrence, VirtualOccurrence)
        assert occurrence.is_virtual is True
        assert occurrence.occurrence_id == "virtual:rent:2024-06"
        assert occurrence.scheduled_date == date(2024, 6, 10)
        assert occurrence.settled is False
        assert occurrence.settled_date is None
        assert occurrence.original_template_id == "rent"
        assert occurrence.amount == template.amount
        assert occurrence.description == template.description
        assert occurrence.template.category == "Housing"

    @pytest.mark.parametrize(
        "month, expected",
        [
            (YearMonth(2024, 4), date(2024, 4, 30)),
            (YearMonth(2023, 2), date(2023, 2, 28)),
            (YearMonth(2024, 2), date(2024, 2, 29)),
            (YearMonth(2024, 12), date(2024, 12, 31)),
        ],
    )
    def test_anchor_day_clamps_to_last_day_of_month(self, month, expected):
        template = _row("rent", date(2023, 1, 31), is_fixed=True)

        (occurrence,) = project([template], month)

        assert occurrence.scheduled_date == expected

    def test_materialized_row_replaces_virtual_occurrence(self):
        template = _row("rent", date(2024, 1, 31), is_fixed=True)
        materialized = _row(
            "rent-apr",
            date(2024, 4, 30),
            original_template_id="rent",
            settled=True,
            settled_date=date(2024, 4, 30),
        )

        occurrences = project([template, materialized], YearMonth(2024, 4))

        assert [o.occurrence_id for o in occurrences] == ["rent-apr"]
        assert occurrences[0].is_virtual is False

    def test_materialized_row_only_covers_its_own_month(self):
        template = _row("rent", date(2024, 1, 31), is_fixed=True)
        materialized = _row("rent-apr", date(2024, 4, 30), original_template_id="rent")

        (occurrence,) = project([template, materialized], YearMonth(2024, 5))

        assert occurrence.is_virtual is True
        assert occurrence.occurrence_id == "virtual:rent:2024-05"

    def test_materialized_row_without_template_still_shown(self):
        orphan = _row("rent-apr", date(2024, 4, 30), original_template_id="deleted")

        assert [o.occurrence_id for o in project([orphan], YearMonth(2024, 4))] == ["rent-apr"]

    def test_at_most_one_occurrence_per_template_and_month(self):
        template = _row("rent", date(2024, 1, 31), is_fixed=True)
        other = _row("gym", date(2024, 2, 15), is_fixed=True)
        rows = [
            template,
            other,
            _row("rent-mar", date(2024, 3, 31), original_template_id="rent"),
            _row("gym-jun", date(2024, 6, 15), original_template_id="gym"),
        ]

        for month_number in range(1, 13):
            occurrences = project(rows, YearMonth(2024, month_number))
            assert len(_slot(occurrences, "rent")) == 1
            expected_gym = 0 if month_number < 2 else 1
            assert len(_slot(occurrences, "gym")) == expected_gym


class TestOrderingAndPurity:
    def test_occurrences_sorted_by_date(self):
        rows = [
            _row("a", date(2024, 3, 5)),
            _row("b", date(2024, 3, 1)),
            _row("c", date(2024, 3, 20)),
        ]

        dates = [o.scheduled_date for o in project(rows, YearMonth(2024, 3))]

        assert dates == [date(2024, 3, 1), date(2024, 3, 5), date(2024, 3, 20)]

    def test_ties_keep_input_order(self):
        rows = [
            _row("z", date(2024, 3, 5)),
            _row("template", date(2024, 1, 5), is_fixed=True),
            _row("a", date(2024, 3, 5)),
        ]

        ids = [o.occurrence_id for o in project(rows, YearMonth(2024, 3))]

        assert ids == ["z", "virtual:template:2024-03", "a"]

    def test_projection_is_idempotent(self):
        rows = [
            _row("rent", date(2024, 1, 31), is_fixed=True),
            _row("loan", date(2024, 2, 3), installments=5),
            _row("one-off", date(2024, 4, 30)),
            _row("rent-mar", date(2024, 3, 31), original_template_id="rent"),
        ]

        first = project(rows, YearMonth(2024, 4))
        second = project(rows, YearMonth(2024, 4))

        assert first == second
        assert [o.occurrence_id for o in first] == [o.occurrence_id for o in second]

    def test_projection_does_not_modify_rows(self):
        rows = [_row("rent", date(2024, 1, 31), is_fixed=True)]
        snapshot = list(rows)

        project(rows, YearMonth(2024, 9))

        assert rows == snapshot


class TestMalformedRows:
    def test_unreadable_date_is_skipped_and_reported(self):
        rows = [
            _row("good", date(2024, 3, 5)),
            _row("bad", "2024-02-30"),
            _row("worse", None, is_fixed=True),
        ]

        occurrences, anomalies = project_with_anomalies(rows, YearMonth(2024, 3))

        assert [o.occurrence_id for o in occurrences] == ["good"]
        assert [a.row_id for a in anomalies] == ["bad", "worse"]
        assert "2024-02-30" in anomalies[0].reason

    def test_iso_string_dates_are_accepted(self):
        rows = [_row("text", "2024-03-05")]

        (occurrence,) = project(rows, YearMonth(2024, 3))

        assert occurrence.scheduled_date == date(2024, 3, 5)

    def test_coerce_date(self):
        assert coerce_date(date(2024, 1, 1)) == date(2024, 1, 1)
        assert coerce_date(" 2024-01-02 ") == date(2024, 1, 2)
        assert coerce_date("not a date") is None
        assert coerce_date(20240101) is None
