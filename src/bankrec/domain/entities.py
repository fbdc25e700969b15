"""Domain model entities for bankrec.

These are pure data classes representing the reconciliation concepts,
independent of database schema. Everything the parser hands to the rest of
the pipeline is one of these typed records; untyped CSV rows never leave the
parser.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionKind(Enum):
    """Transaction type as exported by the bank."""

    TOPUP = "TOPUP"
    CARD_PAYMENT = "CARD_PAYMENT"
    TRANSFER = "TRANSFER"
    FEE = "FEE"
    CHARGE = "CHARGE"
    CASHBACK = "CASHBACK"
    REV_PAYMENT = "REV_PAYMENT"
    REV_PAYMENT_REFUND = "REV_PAYMENT_REFUND"
    CARD_REFUND = "CARD_REFUND"
    TEMP_BLOCK = "TEMP_BLOCK"

    @property
    def fixed_direction(self) -> Optional["Direction"]:
        """Direction implied by the kind alone, or None if the sign decides."""
        if self in _INCOME_KINDS:
            return Direction.INCOME
        if self in _EXPENDITURE_KINDS:
            return Direction.EXPENDITURE
        return None


class TransactionState(Enum):
    """Settlement state of a bank transaction."""

    COMPLETED = "COMPLETED"
    REVERTED = "REVERTED"
    PENDING = "PENDING"


class Direction(Enum):
    """Money flow direction of a ledger transaction."""

    INCOME = "income"
    EXPENDITURE = "expenditure"

    @classmethod
    def from_amount(cls, amount: Decimal) -> "Direction":
        """Positive amounts are income, everything else expenditure."""
        return cls.INCOME if amount > 0 else cls.EXPENDITURE


class CategoryType(Enum):
    """Category classification."""

    INCOME = "income"
    EXPENDITURE = "expenditure"
    CAPITAL = "capital"


class MatchConfidence(Enum):
    """Confidence tier of a match score."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class MatchStatus(Enum):
    """Review-workflow state of a staged record."""

    UNMATCHED = "unmatched"
    POTENTIAL = "potential"
    MATCHED = "matched"
    REVIEWED = "reviewed"
    VERIFIED = "verified"


_INCOME_KINDS = frozenset(
    {
        TransactionKind.TOPUP,
        TransactionKind.CASHBACK,
        TransactionKind.REV_PAYMENT_REFUND,
        TransactionKind.CARD_REFUND,
    }
)
_EXPENDITURE_KINDS = frozenset(
    {TransactionKind.CARD_PAYMENT, TransactionKind.FEE, TransactionKind.CHARGE}
)


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: int
    owner_id: str
    name: str
    category_type: CategoryType
    color: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class LedgerTransaction:
    """Permanent, user-visible transaction."""

    id: int
    owner_id: str
    description: str
    amount: Decimal
    direction: Direction
    occurred_on: date
    category_id: Optional[int]
    bank_reference: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class NewLedgerTransaction:
    """Values for a ledger row that has not been inserted yet."""

    description: str
    amount: Decimal
    direction: Direction
    occurred_on: date
    category_id: Optional[int] = None
    bank_reference: Optional[str] = None


@dataclass(frozen=True)
class BankTransactionRecord:
    """Validated transaction extracted from a bank statement."""

    kind: TransactionKind
    product: str
    started_at: datetime
    completed_at: Optional[datetime]
    description: str
    amount: Decimal
    fee: Decimal
    currency: str
    state: TransactionState
    balance: Decimal

    @property
    def direction(self) -> Direction:
        return Direction.from_amount(self.amount)

    @property
    def is_income(self) -> bool:
        """Income by kind, falling back to the sign for neutral kinds."""
        fixed = self.kind.fixed_direction
        if fixed is not None:
            return fixed is Direction.INCOME
        return self.amount > 0


@dataclass(frozen=True)
class StagedImportRecord:
    """Working copy of a bank record inside the current import session."""

    id: int
    owner_id: str
    kind: TransactionKind
    product: str
    started_at: datetime
    completed_at: Optional[datetime]
    description: str
    amount: Decimal
    fee: Decimal
    currency: str
    state: TransactionState
    balance: Decimal
    matched_ledger_id: Optional[int]
    match_confidence: Optional[MatchConfidence]
    match_status: MatchStatus
    match_reasons: tuple[str, ...]
    suggested_category_id: Optional[int]
    verification_note: Optional[str]
    notes: Optional[str]
    reviewed: bool
    verified: bool
    created_at: datetime

    @property
    def direction(self) -> Direction:
        return Direction.from_amount(self.amount)


@dataclass(frozen=True)
class CategorySuggestion:
    """One candidate category from a category suggester."""

    category_id: int
    confidence: float


@dataclass(frozen=True)
class MatchResult:
    """Best match of a staged record against the ledger."""

    score: float
    confidence: Optional[MatchConfidence]
    status: MatchStatus
    reasons: tuple[str, ...] = ()
    ledger_id: Optional[int] = None
    suggested_category_id: Optional[int] = None


@dataclass(frozen=True)
class StatementStats:
    """Aggregate statistics for a parsed statement."""

    total_rows: int
    completed: int
    reverted: int
    pending: int
    by_kind: dict[TransactionKind, int]
    total_amount: Decimal
    income_amount: Decimal
    expenditure_amount: Decimal
    earliest: Optional[datetime]
    latest: Optional[datetime]
    rejected_rows: int = 0


@dataclass(frozen=True)
class ParsedStatement:
    """Parser output: completed records plus statistics and row errors."""

    records: list[BankTransactionRecord]
    stats: StatementStats
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ImportResult:
    """Outcome of importing a statement into the staging store."""

    stats: StatementStats
    staged: list[StagedImportRecord]
    duplicates_skipped: int
    rejected_rows: list[str]
    match_summary: dict[str, int] = field(default_factory=dict)

    @property
    def all_duplicates(self) -> bool:
        return not self.staged and self.duplicates_skipped > 0


@dataclass(frozen=True)
class CommitPreview:
    """Read-only summary of what a commit would do."""

    to_delete: int
    staged: int
    breakdown: dict[MatchStatus, int]


@dataclass(frozen=True)
class CommitResult:
    """Summary of a completed commit."""

    committed: int
    verified_with_category: int
    needs_categorization: int
    warnings: list[str] = field(default_factory=list)
