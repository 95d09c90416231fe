"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain rows stay stable
when the table layout changes.
"""

from datetime import date
from typing import Optional

from billcycle.domain import entities as domain
from billcycle.database.models import Obligation as ORMObligation


def obligation_to_domain(orm_obligation: ORMObligation) -> domain.ObligationRow:
    """Convert SQLAlchemy Obligation model to a domain ObligationRow."""
    return domain.ObligationRow(
        id=orm_obligation.id,
        description=orm_obligation.description,
        amount=orm_obligation.amount,
        scheduled_date=orm_obligation.scheduled_date,
        kind=domain.ObligationKind(orm_obligation.kind),
        is_fixed=orm_obligation.is_fixed,
        installments=orm_obligation.installments,
        settled=orm_obligation.settled,
        settled_date=orm_obligation.settled_date,
        original_template_id=orm_obligation.original_template_id,
        category=orm_obligation.category,
        counterparty=orm_obligation.counterparty,
        responsible_party=orm_obligation.responsible_party,
        notes=orm_obligation.notes,
        created_at=orm_obligation.created_at,
    )


def occurrence_month_for(orm_obligation: ORMObligation) -> Optional[str]:
    """Return the uniqueness key month for rows linked to a template."""
    if orm_obligation.original_template_id is None:
        return None
    if not isinstance(orm_obligation.scheduled_date, date):
        return None
    return str(domain.YearMonth.of(orm_obligation.scheduled_date))


def draft_to_orm(draft: domain.ObligationDraft, seq: int) -> ORMObligation:
    """Build a new SQLAlchemy Obligation from a domain draft."""
    orm_obligation = ORMObligation(
        seq=seq,
        kind=domain.ObligationKind(draft.kind).value,
        description=draft.description,
        amount=draft.amount,
        scheduled_date=draft.scheduled_date,
        is_fixed=draft.is_fixed,
        installments=1 if draft.is_fixed else draft.installments,
        settled=draft.settled,
        settled_date=draft.settled_date,
        original_template_id=draft.original_template_id,
        category=draft.category,
        counterparty=draft.counterparty,
        responsible_party=draft.responsible_party,
        notes=draft.notes,
    )
    orm_obligation.occurrence_month = occurrence_month_for(orm_obligation)
    return orm_obligation
