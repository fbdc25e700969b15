"""Shared pytest fixtures for bankrec tests."""

import logging
import tempfile
import os
from datetime import datetime
from decimal import Decimal
from pathlib import Path
import pytest

from bankrec.database.factories import create_sqlite_database
from bankrec.domain.category import CategoryService
from bankrec.domain.commit import CommitService
from bankrec.domain.entities import (
    CategorySuggestion,
    MatchStatus,
    StagedImportRecord,
    TransactionKind,
    TransactionState,
)
from bankrec.domain.ledger import LedgerService
from bankrec.domain.matching import CategorySuggester
from bankrec.domain.review import ReviewService
from bankrec.domain.statement import REQUIRED_HEADERS
from bankrec.domain.statement_import import StatementImportService
from bankrec.utils.logging_config import LOGGER_NAME


class StubSuggester(CategorySuggester):
    """Suggester returning fixed suggestions for every description."""

    def __init__(self, suggestions):
        self.suggestions = list(suggestions)
        self.calls = []

    def suggest(self, description):
        self.calls.append(description)
        return self.suggestions


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers the CLI attaches so later tests don't log to closed streams."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


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
def owner():
    return "alice"


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a StatementImportService with a temporary database."""
    return StatementImportService(temp_db)


@pytest.fixture
def review_service(temp_db):
    """Create a ReviewService with a temporary database."""
    return ReviewService(temp_db)


@pytest.fixture
def commit_service(temp_db):
    """Create a CommitService with a temporary database."""
    return CommitService(temp_db)


@pytest.fixture
def sample_categories(category_service, owner):
    """Create a few categories and return their IDs by name."""
    return {
        name: category_service.create_category(owner, name)
        for name in ("Groceries", "Office Supplies", "Travel")
    }


@pytest.fixture
def make_suggester():
    """Build a stub suggester from (category_id, confidence) pairs."""

    def _make(*pairs):
        return StubSuggester(CategorySuggestion(cid, conf) for cid, conf in pairs)

    return _make


@pytest.fixture
def make_staged():
    """Build an in-memory staged record for matching tests."""

    def _make(
        description="Acme Ltd",
        amount="-12.34",
        started_at=datetime(2024, 3, 1, 10, 0),
        record_id=1,
        **overrides,
    ):
        values = dict(
            id=record_id,
            owner_id="alice",
            kind=TransactionKind.CARD_PAYMENT,
            product="Current",
            started_at=started_at,
            completed_at=started_at,
            description=description,
            amount=Decimal(amount),
            fee=Decimal("0"),
            currency="GBP",
            state=TransactionState.COMPLETED,
            balance=Decimal("100.00"),
            matched_ledger_id=None,
            match_confidence=None,
            match_status=MatchStatus.UNMATCHED,
            match_reasons=(),
            suggested_category_id=None,
            verification_note=None,
            notes=None,
            reviewed=False,
            verified=False,
            created_at=started_at,
        )
        values.update(overrides)
        return StagedImportRecord(**values)

    return _make


@pytest.fixture
def statement_text():
    """Render statement rows (dicts of column overrides) as CSV text."""

    def _render(*rows, headers=REQUIRED_HEADERS):
        defaults = {
            "Type": "CARD_PAYMENT",
            "Product": "Current",
            "Started Date": "2024-03-01 10:00:00",
            "Completed Date": "2024-03-01 12:00:00",
            "Description": "Acme Ltd",
            "Amount": "12.34",
            "Fee": "0.00",
            "Currency": "GBP",
            "State": "COMPLETED",
            "Balance": "100.00",
        }
        lines = [",".join(headers)]
        for row in rows:
            values = {**defaults, **row}
            lines.append(",".join(values[header] for header in headers))
        return "\n".join(lines) + "\n"

    return _render


@pytest.fixture
def write_statement(tmp_path, statement_text):
    """Write statement rows to a CSV file and return its path."""

    def _write(*rows, name="statement.csv", headers=REQUIRED_HEADERS):
        path = tmp_path / name
        path.write_text(statement_text(*rows, headers=headers), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
