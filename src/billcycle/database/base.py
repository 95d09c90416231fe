"""Abstract obligation store interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any

# Import entities directly to avoid circular import through domain/__init__.py
from billcycle.domain.entities import ObligationDraft, ObligationRow, YearMonth


class ObligationStore(ABC):
    """Durable table of obligation rows."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def fetch_all(self) -> list[ObligationRow]:
        """Return every row regardless of month, in insertion order."""
        pass

    @abstractmethod
    def get(self, row_id: str) -> Optional[ObligationRow]:
        """Get a row by ID."""
        pass

    @abstractmethod
    def insert(self, draft: ObligationDraft) -> ObligationRow:
        """Store a new row and return it with its assigned ID.

        Rows linked to a template (``original_template_id`` set) are unique per
        (template, month of ``scheduled_date``).

        Raises:
            SettlementConflictError: If the template already has a row for
                that month
        """
        pass

    @abstractmethod
    def update(self, row_id: str, **fields: Any) -> ObligationRow:
        """Update the given fields of a row and return the updated row.

        Raises:
            NotFoundError: If the row does not exist
        """
        pass

    @abstractmethod
    def delete(self, row_id: str) -> None:
        """Delete a row.

        Raises:
            NotFoundError: If the row does not exist
        """
        pass

    @abstractmethod
    def find_materialized(self, template_id: str, month: YearMonth) -> Optional[ObligationRow]:
        """Get the row materialized from a template for a month, if any."""
        pass
