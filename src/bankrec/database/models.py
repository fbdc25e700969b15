"""SQLAlchemy models for the bankrec database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Category(Base):
    """Category model, unique by name per owner."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    category_type = Column(String, nullable=False, default="expenditure")
    color = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("owner_id", "name", name="uq_owner_category_name"),)

    transactions = relationship("LedgerTransaction", back_populates="category")


class LedgerTransaction(Base):
    """Permanent ledger transaction model."""

    __tablename__ = "ledger_transactions"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    direction = Column(String, nullable=False)
    occurred_on = Column(Date, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    bank_reference = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = {"sqlite_autoincrement": True}

    category = relationship("Category", back_populates="transactions")


class StagedImportRecord(Base):
    """Staging table row: one bank record plus its reconciliation metadata."""

    __tablename__ = "staged_import_records"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    kind = Column(String, nullable=False)
    product = Column(String, nullable=False, default="")
    started_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    fee = Column(Numeric(12, 2), nullable=False, default=0)
    currency = Column(String, nullable=False, default="")
    state = Column(String, nullable=False)
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    matched_ledger_id = Column(Integer, ForeignKey("ledger_transactions.id"), nullable=True)
    match_confidence = Column(String, nullable=True)
    match_status = Column(String, nullable=False, default="unmatched")
    match_reasons = Column(JSON, nullable=False, default=list)
    suggested_category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    verification_note = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    reviewed = Column(Boolean, default=False, nullable=False)
    verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    # Row ids are never reused after a batch is cleared
    __table_args__ = {"sqlite_autoincrement": True}

    matched_ledger = relationship("LedgerTransaction")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        # SQLite leaves foreign keys unenforced unless asked per connection
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
