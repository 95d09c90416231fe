"""Domain model entities for billcycle.

These are pure data classes representing business concepts, independent of
the database schema. Only ``ObligationRow`` is ever persisted; occurrences are
derived from rows for a given month by the projector.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

VIRTUAL_ID_PREFIX = "virtual"


class ObligationKind(str, Enum):
    """Direction of an obligation."""

    PAYABLE = "payable"
    RECEIVABLE = "receivable"


@dataclass(frozen=True, order=True)
class YearMonth:
    """A calendar month, rendered as ``yyyy-MM``."""

    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month {self.month}: must be between 1 and 12")

    @classmethod
    def of(cls, value: date) -> "YearMonth":
        """Return the month containing ``value``."""
        return cls(value.year, value.month)

    @classmethod
    def parse(cls, text: str) -> "YearMonth":
        """Parse a ``yyyy-MM`` string."""
        parts = text.strip().split("-")
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            raise ValueError(f"Could not parse month '{text}': expected yyyy-MM")
        return cls(int(parts[0]), int(parts[1]))

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def index(self) -> int:
        """Months since year 0, used for month arithmetic."""
        return self.year * 12 + (self.month - 1)

    def shift(self, months: int) -> "YearMonth":
        total = self.index() + months
        return YearMonth(total // 12, total % 12 + 1)

    def months_since(self, other: "YearMonth") -> int:
        return self.index() - other.index()

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return self.next().first_day - timedelta(days=1)

    @property
    def days_in_month(self) -> int:
        return self.last_day.day

    def next(self) -> "YearMonth":
        return self.shift(1)

    def contains(self, value: date) -> bool:
        return value.year == self.year and value.month == self.month


@dataclass(frozen=True)
class ObligationRow:
    """Persisted obligation: a standalone occurrence or a fixed template.

    When ``is_fixed`` is true the row is a template recurring every month from
    the month of ``scheduled_date`` on the day-of-month of ``scheduled_date``.
    Otherwise ``installments`` successive monthly occurrences of ``amount``
    are represented by this single row.
    """

    id: str
    description: str
    amount: Decimal
    scheduled_date: date
    kind: ObligationKind = ObligationKind.PAYABLE
    is_fixed: bool = False
    installments: int = 1
    settled: bool = False
    settled_date: Optional[date] = None
    original_template_id: Optional[str] = None
    category: Optional[str] = None
    counterparty: Optional[str] = None
    responsible_party: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def installment_count(self) -> int:
        """Installment count with absent or non-positive values read as 1."""
        if self.is_fixed or not self.installments or self.installments < 1:
            return 1
        return self.installments

    def with_changes(self, **changes) -> "ObligationRow":
        return replace(self, **changes)


@dataclass(frozen=True)
class ObligationDraft:
    """User-entered fields of an obligation, before it is stored."""

    description: str
    amount: Decimal
    scheduled_date: date
    kind: ObligationKind = ObligationKind.PAYABLE
    is_fixed: bool = False
    installments: int = 1
    category: Optional[str] = None
    counterparty: Optional[str] = None
    responsible_party: Optional[str] = None
    notes: Optional[str] = None
    original_template_id: Optional[str] = None
    settled: bool = False
    settled_date: Optional[date] = None

    @classmethod
    def from_row(cls, row: ObligationRow) -> "ObligationDraft":
        return cls(
            description=row.description,
            amount=row.amount,
            scheduled_date=row.scheduled_date,
            kind=row.kind,
            is_fixed=row.is_fixed,
            installments=row.installments,
            category=row.category,
            counterparty=row.counterparty,
            responsible_party=row.responsible_party,
            notes=row.notes,
            original_template_id=row.original_template_id,
            settled=row.settled,
            settled_date=row.settled_date,
        )


def virtual_occurrence_id(template_id: str, month: YearMonth) -> str:
    """Return the synthetic id of the (template, month) slot."""
    return f"{VIRTUAL_ID_PREFIX}:{template_id}:{month}"


def parse_virtual_occurrence_id(occurrence_id: str) -> Optional[tuple[str, YearMonth]]:
    """Split a synthetic id into (template id, month), or None if not virtual."""
    prefix, sep, rest = occurrence_id.partition(":")
    if prefix != VIRTUAL_ID_PREFIX or not sep:
        return None
    template_id, sep, month_text = rest.rpartition(":")
    if not sep or not template_id:
        return None
    try:
        return template_id, YearMonth.parse(month_text)
    except ValueError:
        return None


@dataclass(frozen=True)
class ConcreteOccurrence:
    """A stored row shown for a month.

    ``scheduled_date`` is the displayed date, which differs from the row's own
    date for installments after the first.
    """

    row: ObligationRow
    scheduled_date: date
    installment: int = 1

    is_virtual = False

    @property
    def occurrence_id(self) -> str:
        return self.row.id

    @property
    def description(self) -> str:
        return self.row.description

    @property
    def amount(self) -> Decimal:
        return self.row.amount

    @property
    def kind(self) -> ObligationKind:
        return self.row.kind

    @property
    def settled(self) -> bool:
        return self.row.settled

    @property
    def settled_date(self) -> Optional[date]:
        return self.row.settled_date

    @property
    def original_template_id(self) -> Optional[str]:
        return self.row.original_template_id

    @property
    def responsible_party(self) -> Optional[str]:
        return self.row.responsible_party

    @property
    def installment_count(self) -> int:
        return self.row.installment_count

    @property
    def month(self) -> YearMonth:
        return YearMonth.of(self.scheduled_date)


@dataclass(frozen=True)
class VirtualOccurrence:
    """Projected, never stored, stand-in for a template's month."""

    template: ObligationRow
    month: YearMonth
    scheduled_date: date

    is_virtual = True
    settled = False
    settled_date = None
    installment = 1
    installment_count = 1

    @property
    def occurrence_id(self) -> str:
        return virtual_occurrence_id(self.template.id, self.month)

    @property
    def description(self) -> str:
        return self.template.description

    @property
    def amount(self) -> Decimal:
        return self.template.amount

    @property
    def kind(self) -> ObligationKind:
        return self.template.kind

    @property
    def original_template_id(self) -> str:
        return self.template.id

    @property
    def responsible_party(self) -> Optional[str]:
        return self.template.responsible_party


Occurrence = Union[ConcreteOccurrence, VirtualOccurrence]


@dataclass(frozen=True)
class DataAnomaly:
    """A stored row that could not be projected."""

    row_id: Optional[str]
    reason: str


@dataclass(frozen=True)
class NoSelection:
    """Nothing is being edited; saving creates a new row."""


@dataclass(frozen=True)
class EditingConcrete:
    """Editing an existing non-template row."""

    row: ObligationRow


@dataclass(frozen=True)
class EditingTemplate:
    """Editing a fixed template."""

    template: ObligationRow


EditTarget = Union[NoSelection, EditingConcrete, EditingTemplate]


def edit_target_for(row: Optional[ObligationRow]) -> EditTarget:
    """Return the edit target matching a stored row (or no selection)."""
    if row is None:
        return NoSelection()
    if row.is_fixed:
        return EditingTemplate(row)
    return EditingConcrete(row)


@dataclass(frozen=True)
class MonthSummary:
    """Totals of the occurrences projected for one month."""

    month: YearMonth
    kind: Optional[ObligationKind]
    total: Decimal
    settled_total: Decimal
    outstanding_total: Decimal
    occurrence_count: int
    virtual_count: int
    settled_by_responsible: dict[str, Decimal] = field(default_factory=dict)
