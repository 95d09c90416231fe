"""Database factory functions for creating store instances."""

import os
from pathlib import Path
from typing import Optional

from billcycle.database.sqlalchemy_db import SQLAlchemyObligationStore


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyObligationStore:
    """Create a SQLite-backed obligation store.

    Args:
        database_path: Path to SQLite database file. If None, checks BILLCYCLE_DB_PATH
            environment variable, then defaults to ~/.billcycle/billcycle.db

    Returns:
        SQLAlchemyObligationStore instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("BILLCYCLE_DB_PATH")

    if database_path is None:
        # Default to ~/.billcycle/billcycle.db
        home = Path.home()
        db_dir = home / ".billcycle"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "billcycle.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyObligationStore(database_url)
