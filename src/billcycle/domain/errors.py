"""Shared domain error messages and error types."""

from datetime import date
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or an operation the occurrence does not allow."""


class NotFoundError(DomainError):
    """Requested row or occurrence does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class SettlementConflictError(ConflictError):
    """A (template, month) slot was already materialized by another action.

    The existing row is attached so callers can re-project and pick it up.
    """

    def __init__(self, message: str, existing=None):
        super().__init__(message)
        self.existing = existing


def obligation_not_found(row_id: str) -> str:
    """Return message for a missing row."""
    return f"Obligation {row_id} not found"


def occurrence_not_found(occurrence_id: str) -> str:
    """Return message for an unknown occurrence id."""
    return f"Occurrence '{occurrence_id}' not found"


def slot_already_settled(template_id: str, month: str, existing_id: Optional[str] = None) -> str:
    """Return message when a template month was materialized concurrently."""
    message = f"Occurrence of template {template_id} for {month} was already settled by another action"
    if existing_id is not None:
        message += f" (obligation {existing_id})"
    return message


def virtual_not_editable(occurrence_id: str) -> str:
    return (
        f"Occurrence '{occurrence_id}' is projected from a fixed template; "
        "edit the fixed template instead"
    )


def virtual_not_deletable(occurrence_id: str) -> str:
    return (
        f"Occurrence '{occurrence_id}' is projected from a fixed template and cannot be deleted; "
        "delete the fixed template instead"
    )


def virtual_not_reversible(occurrence_id: str) -> str:
    return f"Occurrence '{occurrence_id}' has not been settled yet; nothing to reverse"


def settlement_in_future(settlement_date: date, today: date) -> str:
    """Return message for a settlement date after today."""
    return f"Settlement date {settlement_date} is after today ({today})"
