"""Settlement state transitions.

A (template, month) slot moves through::

    VIRTUAL -> confirm -> SETTLED-CONCRETE -> reverse -> UNSETTLED-CONCRETE
                               ^------------- confirm ---------'

Confirming a virtual occurrence is the only way it gains a stored row. There
is no way back to VIRTUAL: reversing keeps the row and clears its settlement.
"""

from __future__ import annotations

import logging
import threading
import weakref
from datetime import date
from typing import Callable, Optional, Union, TYPE_CHECKING

from billcycle.domain.entities import (
    ConcreteOccurrence,
    ObligationDraft,
    ObligationRow,
    Occurrence,
    VirtualOccurrence,
    YearMonth,
)
from billcycle.domain.errors import (
    NotFoundError,
    SettlementConflictError,
    ValidationError,
    obligation_not_found,
    settlement_in_future,
    slot_already_settled,
    virtual_not_reversible,
)

if TYPE_CHECKING:
    from billcycle.database.base import ObligationStore

logger = logging.getLogger(__name__)


class Materializer:
    """Confirms and reverses settlements against an obligation store."""

    def __init__(self, store: ObligationStore, clock: Callable[[], date] = date.today):
        """Initialize materializer.

        Args:
            store: Obligation store
            clock: Returns today's date; settlement dates may not be later
        """
        self.store = store
        self.clock = clock
        # Held only while a confirmation for the slot is in progress
        self._slot_locks: weakref.WeakValueDictionary = weakref.WeakValueDictionary()
        self._slot_locks_guard = threading.Lock()

    def confirm_settlement(
        self, occurrence: Occurrence, settlement_date: Optional[date] = None
    ) -> ObligationRow:
        """Mark an occurrence as received/paid.

        A concrete occurrence is updated in place. A virtual occurrence is
        materialized as a new non-fixed row linked to its template; the template
        itself is left untouched.

        Args:
            occurrence: Occurrence to settle
            settlement_date: Settlement date, defaults to today

        Returns:
            The settled stored row

        Raises:
            ValidationError: If the settlement date is after today
            SettlementConflictError: If the virtual occurrence's month was
                already materialized by another action
            NotFoundError: If the row or template no longer exists
        """
        if settlement_date is None:
            settlement_date = self.clock()
        today = self.clock()
        if settlement_date > today:
            raise ValidationError(settlement_in_future(settlement_date, today))

        if isinstance(occurrence, VirtualOccurrence):
            return self._materialize(occurrence, settlement_date)

        row = self.store.update(occurrence.row.id, settled=True, settled_date=settlement_date)
        logger.info("Settled obligation %s on %s", row.id, settlement_date)
        return row

    def reverse_settlement(self, target: Union[ObligationRow, Occurrence]) -> ObligationRow:
        """Clear the settlement of a stored row.

        The row is kept, even when it was materialized from a template.

        Raises:
            ValidationError: If given a virtual occurrence
            NotFoundError: If the row no longer exists
        """
        if isinstance(target, VirtualOccurrence):
            raise ValidationError(virtual_not_reversible(target.occurrence_id))
        row_id = target.row.id if isinstance(target, ConcreteOccurrence) else target.id

        row = self.store.update(row_id, settled=False, settled_date=None)
        logger.info("Reversed settlement of obligation %s", row.id)
        return row

    def _materialize(self, occurrence: VirtualOccurrence, settlement_date: date) -> ObligationRow:
        template = occurrence.template
        month = occurrence.month

        with self._lock_for(template.id, month):
            existing = self.store.find_materialized(template.id, month)
            if existing is not None:
                logger.warning(
                    "Template %s already materialized for %s as %s", template.id, month, existing.id
                )
                raise SettlementConflictError(
                    slot_already_settled(template.id, str(month), existing.id), existing=existing
                )
            if self.store.get(template.id) is None:
                raise NotFoundError(obligation_not_found(template.id))

            draft = ObligationDraft(
                description=template.description,
                amount=template.amount,
                scheduled_date=occurrence.scheduled_date,
                kind=template.kind,
                is_fixed=False,
                installments=1,
                category=template.category,
                counterparty=template.counterparty,
                responsible_party=template.responsible_party,
                notes=template.notes,
                original_template_id=template.id,
                settled=True,
                settled_date=settlement_date,
            )
            try:
                row = self.store.insert(draft)
            except SettlementConflictError:
                logger.warning("Concurrent materialization of template %s for %s", template.id, month)
                raise

        logger.info(
            "Materialized template %s for %s as obligation %s (settled %s)",
            template.id,
            month,
            row.id,
            settlement_date,
        )
        return row

    def _lock_for(self, template_id: str, month: YearMonth) -> threading.Lock:
        key = (template_id, month)
        with self._slot_locks_guard:
            lock = self._slot_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._slot_locks[key] = lock
            return lock
