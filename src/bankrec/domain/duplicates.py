"""Duplicate detection for statement records before staging."""

from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Iterable

from bankrec.domain.entities import (
    BankTransactionRecord,
    Direction,
    LedgerTransaction,
    StagedImportRecord,
)
from bankrec.utils.logging_config import get_logger
from bankrec.utils.text import collapse_description, is_significant_substring, word_overlap

logger = get_logger(__name__)

AMOUNT_TOLERANCE = Decimal("0.01")
DATE_TOLERANCE = timedelta(days=1)
WORD_SIMILARITY_THRESHOLD = 0.7


@dataclass(frozen=True)
class DeduplicationResult:
    """Records that survived both passes and how many were dropped.

    ``not_in_ledger`` keeps every candidate that is not already committed,
    in file order, including those only repeated from the staged batch.
    """

    unique: list[BankTransactionRecord]
    duplicates: int
    not_in_ledger: list[BankTransactionRecord] = field(default_factory=list)


def is_staged_duplicate(candidate: BankTransactionRecord, staged: StagedImportRecord) -> bool:
    """Same bank description, amount within a cent, started within a day."""
    return (
        candidate.description == staged.description
        and abs(candidate.amount - staged.amount) < AMOUNT_TOLERANCE
        and abs(candidate.started_at - staged.started_at) <= DATE_TOLERANCE
    )


def descriptions_match(candidate: str, existing: str) -> bool:
    """Exact, significant-substring or word-overlap match after normalisation."""
    candidate_desc = collapse_description(candidate)
    existing_desc = collapse_description(existing)
    if candidate_desc == existing_desc:
        return True
    if is_significant_substring(candidate_desc, existing_desc):
        return True
    return word_overlap(candidate_desc, existing_desc) >= WORD_SIMILARITY_THRESHOLD


def is_ledger_duplicate(candidate: BankTransactionRecord, ledger: LedgerTransaction) -> bool:
    """Description, signed amount and date all agree with a committed transaction.

    The description may match either the ledger description or the bank
    description recorded when the row was committed.
    """
    if abs(abs(candidate.amount) - abs(ledger.amount)) >= AMOUNT_TOLERANCE:
        return False
    if Direction.from_amount(candidate.amount) is not ledger.direction:
        return False
    if abs((candidate.started_at.date() - ledger.occurred_on).days) > DATE_TOLERANCE.days:
        return False
    if descriptions_match(candidate.description, ledger.description):
        return True
    # Committed rows keep the bank's wording even when the description was replaced
    return bool(ledger.bank_reference) and descriptions_match(
        candidate.description, ledger.bank_reference
    )


class DuplicateDetector:
    """Drops statement records already staged or already in the ledger.

    Both checks run against a snapshot taken before the import; records of
    the file being imported are never compared with each other, so repeated
    identical purchases on one statement are kept.
    """

    def __init__(
        self,
        staged: Iterable[StagedImportRecord],
        ledger: Iterable[LedgerTransaction],
    ):
        self.staged = list(staged)
        self.ledger = list(ledger)

    def in_batch(self, candidate: BankTransactionRecord) -> bool:
        return any(is_staged_duplicate(candidate, staged) for staged in self.staged)

    def in_ledger(self, candidate: BankTransactionRecord) -> bool:
        return any(is_ledger_duplicate(candidate, existing) for existing in self.ledger)

    def is_duplicate(self, candidate: BankTransactionRecord) -> bool:
        return self.in_batch(candidate) or self.in_ledger(candidate)

    def filter(self, candidates: list[BankTransactionRecord]) -> DeduplicationResult:
        """Split candidates into unique records and a duplicate count."""
        not_in_ledger = [candidate for candidate in candidates if not self.in_ledger(candidate)]
        unique = [candidate for candidate in not_in_ledger if not self.in_batch(candidate)]
        duplicates = len(candidates) - len(unique)
        logger.debug(
            "%d unique, %d already staged, %d already in the ledger",
            len(unique),
            len(not_in_ledger) - len(unique),
            len(candidates) - len(not_in_ledger),
        )
        return DeduplicationResult(unique=unique, duplicates=duplicates, not_in_ledger=not_in_ledger)
