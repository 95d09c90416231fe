"""Database layer for billcycle application."""

from billcycle.database.base import ObligationStore
from billcycle.database.factories import create_sqlite_database

__all__ = ["ObligationStore", "create_sqlite_database"]
