"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from bankrec.domain.entities import (
    BankTransactionRecord,
    Category,
    CategoryType,
    Direction,
    LedgerTransaction,
    MatchConfidence,
    MatchStatus,
    NewLedgerTransaction,
    StagedImportRecord,
)


class Database(ABC):
    """Abstract store for ledger, staging and category data.

    Every row is scoped by an owner id. Write methods commit immediately
    unless called inside ``transaction()``, in which case the whole block
    commits or rolls back as one unit.
    """

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
    def transaction(self) -> AbstractContextManager[None]:
        """Group writes into a single atomic unit."""
        pass

    @abstractmethod
    def owner_lock(self, owner_id: str) -> AbstractContextManager[None]:
        """Serialise import and commit sessions for one owner."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        owner_id: str,
        name: str,
        category_type: CategoryType = CategoryType.EXPENDITURE,
        color: Optional[str] = None,
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, owner_id: str, name: str) -> Optional[Category]:
        """Get an owner's category by exact name."""
        pass

    @abstractmethod
    def list_categories(self, owner_id: str) -> list[Category]:
        """List an owner's categories ordered by name."""
        pass

    # Ledger operations
    @abstractmethod
    def create_ledger_transaction(
        self,
        owner_id: str,
        description: str,
        amount: Decimal,
        direction: Direction,
        occurred_on: date,
        category_id: Optional[int] = None,
        bank_reference: Optional[str] = None,
    ) -> int:
        """Create a ledger transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def insert_ledger_transactions(
        self, owner_id: str, transactions: list[NewLedgerTransaction]
    ) -> list[int]:
        """Insert many ledger rows. Returns IDs in input order."""
        pass

    @abstractmethod
    def get_ledger_transaction(self, transaction_id: int) -> Optional[LedgerTransaction]:
        """Get ledger transaction by ID."""
        pass

    @abstractmethod
    def list_ledger_transactions(self, owner_id: str) -> list[LedgerTransaction]:
        """List an owner's ledger transactions, oldest first."""
        pass

    @abstractmethod
    def count_ledger_transactions(self, owner_id: str) -> int:
        """Count an owner's ledger transactions."""
        pass

    @abstractmethod
    def delete_ledger_transactions(self, owner_id: str) -> int:
        """Delete all of an owner's ledger transactions. Returns count deleted."""
        pass

    @abstractmethod
    def update_ledger_category(self, transaction_id: int, category_id: Optional[int]) -> None:
        """Set the category of a ledger transaction."""
        pass

    # Staging operations
    @abstractmethod
    def add_staged_records(
        self, owner_id: str, records: list[BankTransactionRecord]
    ) -> list[StagedImportRecord]:
        """Stage bank records in the unmatched state. Returns them in input order."""
        pass

    @abstractmethod
    def get_staged_record(self, record_id: int) -> Optional[StagedImportRecord]:
        """Get staged record by ID."""
        pass

    @abstractmethod
    def list_staged_records(self, owner_id: str) -> list[StagedImportRecord]:
        """List an owner's staged records in staging order."""
        pass

    @abstractmethod
    def update_staged_match(
        self,
        record_id: int,
        matched_ledger_id: Optional[int],
        match_confidence: Optional[MatchConfidence],
        match_status: MatchStatus,
        match_reasons: list[str],
        suggested_category_id: Optional[int],
    ) -> None:
        """Store matching results on a staged record."""
        pass

    @abstractmethod
    def update_staged_review(
        self,
        record_id: int,
        match_status: MatchStatus,
        reviewed: bool,
        verified: bool,
        verification_note: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Store a human review decision on a staged record."""
        pass

    @abstractmethod
    def clear_staged_records(self, owner_id: str) -> int:
        """Delete an owner's whole staging batch. Returns count deleted."""
        pass

    @abstractmethod
    def sever_ledger_references(self, owner_id: str) -> int:
        """Null staged references to the owner's ledger rows. Returns count updated."""
        pass
