"""Obligation domain service."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Callable, Optional, Union, TYPE_CHECKING

from billcycle.domain.entities import (
    ConcreteOccurrence,
    EditingConcrete,
    EditingTemplate,
    EditTarget,
    MonthSummary,
    NoSelection,
    ObligationDraft,
    ObligationKind,
    ObligationRow,
    Occurrence,
    VirtualOccurrence,
    YearMonth,
    parse_virtual_occurrence_id,
)
from billcycle.domain.errors import (
    NotFoundError,
    SettlementConflictError,
    ValidationError,
    obligation_not_found,
    occurrence_not_found,
    settlement_in_future,
    slot_already_settled,
    virtual_not_deletable,
    virtual_not_editable,
)
from billcycle.domain.materializer import Materializer
from billcycle.domain.projection import project_with_anomalies

if TYPE_CHECKING:
    from billcycle.database.base import ObligationStore

logger = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"


class ObligationService:
    """Service for managing obligations and their monthly occurrences."""

    def __init__(self, store: ObligationStore, clock: Callable[[], date] = date.today):
        """Initialize obligation service.

        Args:
            store: Obligation store
            clock: Returns today's date
        """
        self.store = store
        self.clock = clock
        self.materializer = Materializer(store, clock=clock)

    def create(self, draft: ObligationDraft) -> ObligationRow:
        """Validate and store a new obligation.

        Raises:
            ValidationError: If the draft is malformed
        """
        draft = self.validate_draft(draft)
        row = self.store.insert(draft)
        logger.info(
            "Created %s obligation %s%s", row.kind.value, row.id, " (fixed)" if row.is_fixed else ""
        )
        return row

    def save(self, target: EditTarget, draft: ObligationDraft) -> ObligationRow:
        """Create or update an obligation depending on what is being edited.

        Args:
            target: NoSelection to create, EditingConcrete/EditingTemplate to
                update that row in place
            draft: Entered fields

        Returns:
            The stored row

        Raises:
            ValidationError: If the draft is malformed or the target is a
                virtual occurrence
            NotFoundError: If the edited row no longer exists
        """
        if isinstance(target, VirtualOccurrence):
            raise ValidationError(virtual_not_editable(target.occurrence_id))
        if isinstance(target, NoSelection):
            return self.create(draft)
        if isinstance(target, EditingConcrete):
            row = target.row
        elif isinstance(target, EditingTemplate):
            row = target.template
        else:
            raise ValidationError(f"Unsupported edit target: {target!r}")

        # Keep the template link of an edited occurrence
        draft = self.validate_draft(replace(draft, original_template_id=row.original_template_id))
        updated = self.store.update(
            row.id,
            kind=draft.kind,
            description=draft.description,
            amount=draft.amount,
            scheduled_date=draft.scheduled_date,
            is_fixed=draft.is_fixed,
            installments=draft.installments,
            settled=draft.settled,
            settled_date=draft.settled_date,
            category=draft.category,
            counterparty=draft.counterparty,
            responsible_party=draft.responsible_party,
            notes=draft.notes,
        )
        logger.info("Updated obligation %s", updated.id)
        return updated

    def get(self, row_id: str) -> Optional[ObligationRow]:
        """Get a stored row by ID."""
        return self.store.get(row_id)

    def require(self, row_id: str) -> ObligationRow:
        """Get a stored row by ID or raise NotFoundError."""
        row = self.store.get(row_id)
        if row is None:
            raise NotFoundError(obligation_not_found(row_id))
        return row

    def delete(self, target: Union[ObligationRow, Occurrence]) -> None:
        """Delete a stored row.

        Rows materialized from a deleted template are kept.

        Raises:
            ValidationError: If given a virtual occurrence
            NotFoundError: If the row no longer exists
        """
        if isinstance(target, VirtualOccurrence):
            raise ValidationError(virtual_not_deletable(target.occurrence_id))
        row_id = target.row.id if isinstance(target, ConcreteOccurrence) else target.id
        self.store.delete(row_id)
        logger.info("Deleted obligation %s", row_id)

    def occurrences_for_month(
        self, month: YearMonth, kind: Optional[ObligationKind] = None
    ) -> list[Occurrence]:
        """Project the stored rows onto a month.

        Rows with unreadable dates are skipped and logged as warnings.
        """
        rows = self.store.fetch_all()
        if kind is not None:
            rows = [row for row in rows if row.kind == kind]

        occurrences, anomalies = project_with_anomalies(rows, month)
        for anomaly in anomalies:
            logger.warning(
                "Skipping obligation %s while projecting %s: %s", anomaly.row_id, month, anomaly.reason
            )
        return occurrences

    def find_occurrence(self, occurrence_id: str, month: Optional[YearMonth] = None) -> Occurrence:
        """Resolve an occurrence ID as shown by ``occurrences_for_month``.

        Args:
            occurrence_id: Stored row ID or virtual occurrence ID
            month: Month the row is displayed in, for installment rows; defaults
                to the row's own month

        Raises:
            NotFoundError: If no such occurrence is visible
        """
        parsed = parse_virtual_occurrence_id(occurrence_id)
        if parsed is not None:
            _, month = parsed
        elif month is None:
            row = self.require(occurrence_id)
            return ConcreteOccurrence(row=row, scheduled_date=row.scheduled_date)

        for occurrence in self.occurrences_for_month(month):
            if occurrence.occurrence_id == occurrence_id:
                return occurrence
        raise NotFoundError(occurrence_not_found(occurrence_id))

    def confirm(self, occurrence_id: str, settlement_date: Optional[date] = None) -> ObligationRow:
        """Confirm settlement of the occurrence with the given ID.

        Raises:
            SettlementConflictError: If ``occurrence_id`` is a virtual ID whose
                month was already settled, for example by a repeated command
            NotFoundError: If no such occurrence is visible
        """
        parsed = parse_virtual_occurrence_id(occurrence_id)
        if parsed is not None:
            template_id, month = parsed
            existing = self.store.find_materialized(template_id, month)
            if existing is not None:
                logger.warning(
                    "Occurrence %s was already settled as obligation %s", occurrence_id, existing.id
                )
                raise SettlementConflictError(
                    slot_already_settled(template_id, str(month), existing.id), existing=existing
                )

        occurrence = self.find_occurrence(occurrence_id)
        return self.materializer.confirm_settlement(occurrence, settlement_date)

    def reverse(self, row_id: str) -> ObligationRow:
        """Reverse settlement of a stored row (or reject a virtual ID)."""
        occurrence = self.find_occurrence(row_id)
        return self.materializer.reverse_settlement(occurrence)

    def summarize_month(
        self, month: YearMonth, kind: Optional[ObligationKind] = None
    ) -> MonthSummary:
        """Total the occurrences of a month.

        Each line counts its stored per-installment amount once.
        """
        occurrences = self.occurrences_for_month(month, kind=kind)

        total = Decimal("0.00")
        settled_total = Decimal("0.00")
        settled_by_responsible: dict[str, Decimal] = {}
        for occurrence in occurrences:
            total += occurrence.amount
            if occurrence.settled:
                settled_total += occurrence.amount
                party = occurrence.responsible_party or UNASSIGNED
                settled_by_responsible[party] = (
                    settled_by_responsible.get(party, Decimal("0.00")) + occurrence.amount
                )

        return MonthSummary(
            month=month,
            kind=kind,
            total=total,
            settled_total=settled_total,
            outstanding_total=total - settled_total,
            occurrence_count=len(occurrences),
            virtual_count=sum(1 for occurrence in occurrences if occurrence.is_virtual),
            settled_by_responsible=settled_by_responsible,
        )

    def validate_draft(self, draft: ObligationDraft) -> ObligationDraft:
        """Check a draft and normalize it for storage.

        Fixed templates always carry a single installment.

        Raises:
            ValidationError: If a field is missing or malformed
        """
        if not draft.description or not draft.description.strip():
            raise ValidationError("Description is required")
        if not isinstance(draft.amount, Decimal) or not draft.amount.is_finite():
            raise ValidationError(f"Invalid amount: {draft.amount!r}")
        if draft.amount.as_tuple().exponent < -2:
            raise ValidationError(f"Amount {draft.amount} has more than two decimal places")
        if not isinstance(draft.scheduled_date, date):
            raise ValidationError(f"Invalid scheduled date: {draft.scheduled_date!r}")

        if draft.is_fixed:
            draft = replace(draft, installments=1)
        elif not isinstance(draft.installments, int) or draft.installments < 1:
            raise ValidationError("Installments must be at least 1 for non-fixed obligations")

        if draft.settled != (draft.settled_date is not None):
            raise ValidationError("Settled flag and settlement date must be set together")
        if draft.settled_date is not None and draft.settled_date > self.clock():
            raise ValidationError(settlement_in_future(draft.settled_date, self.clock()))

        return replace(
            draft,
            kind=ObligationKind(draft.kind),
            description=draft.description.strip(),
            amount=draft.amount.quantize(Decimal("0.01")),
        )
