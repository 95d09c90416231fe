"""Shared pytest fixtures for billcycle tests."""

import logging
import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from billcycle.database.factories import create_sqlite_database
from billcycle.domain.entities import ObligationDraft, ObligationKind
from billcycle.domain.materializer import Materializer
from billcycle.domain.obligation import ObligationService

TODAY = date(2024, 12, 31)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by configure_logging during a test."""
    yield
    package_logger = logging.getLogger("billcycle")
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    """Fixed 'today' so settlement dates in 2024 are never in the future."""
    return lambda: TODAY


@pytest.fixture
def obligation_service(temp_db, clock):
    """Create an ObligationService with a temporary database."""
    return ObligationService(temp_db, clock=clock)


@pytest.fixture
def materializer(temp_db, clock):
    """Create a Materializer with a temporary database."""
    return Materializer(temp_db, clock=clock)


@pytest.fixture
def rent_template(obligation_service):
    """A fixed payable anchored on January 31st, 2024."""
    return obligation_service.create(
        ObligationDraft(
            description="Rent",
            amount=Decimal("1200.00"),
            scheduled_date=date(2024, 1, 31),
            kind=ObligationKind.PAYABLE,
            is_fixed=True,
            responsible_party="Alex",
        )
    )


@pytest.fixture
def salary_template(obligation_service):
    """A fixed receivable anchored on March 5th, 2024."""
    return obligation_service.create(
        ObligationDraft(
            description="Salary",
            amount=Decimal("3000.00"),
            scheduled_date=date(2024, 3, 5),
            kind=ObligationKind.RECEIVABLE,
            is_fixed=True,
        )
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
