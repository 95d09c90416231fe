"""SQLAlchemy models for billcycle database."""

import uuid
from datetime import date, datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


def new_row_id() -> str:
    return uuid.uuid4().hex


class IsoDate(TypeDecorator):
    """Calendar date stored as ISO ``yyyy-mm-dd`` text.

    Stored values that are not valid dates are returned unchanged as strings,
    so a single bad row does not fail a whole query.
    """

    impl = String(10)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if isinstance(value, date):
            return value.isoformat()
        return value

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, date):
            return value
        try:
            return date.fromisoformat(value)
        except (TypeError, ValueError):
            return value


class Obligation(Base):
    """Obligation row: a one-off or installment record, or a fixed template."""

    __tablename__ = "obligations"

    id = Column(String(32), primary_key=True, default=new_row_id)
    # Insertion order, used as the stable order of fetch_all
    seq = Column(Integer, nullable=False, index=True)
    kind = Column(String(16), nullable=False, default="payable")
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    scheduled_date = Column(IsoDate, nullable=False)
    is_fixed = Column(Boolean, default=False, nullable=False)
    installments = Column(Integer, default=1, nullable=False)
    settled = Column(Boolean, default=False, nullable=False)
    settled_date = Column(IsoDate, nullable=True)
    # Plain reference: deleting a template keeps the rows materialized from it
    original_template_id = Column(String(32), nullable=True, index=True)
    # yyyy-MM of scheduled_date, only set for rows linked to a template
    occurrence_month = Column(String(7), nullable=True)
    category = Column(String, nullable=True)
    counterparty = Column(String, nullable=True)
    responsible_party = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # One materialized row per (template, month)
    __table_args__ = (
        UniqueConstraint(
            "original_template_id", "occurrence_month", name="uq_template_occurrence_month"
        ),
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
