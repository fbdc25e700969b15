"""Review workflow for staged records."""

from typing import Optional

from bankrec.database.base import Database
from bankrec.domain.entities import MatchStatus, StagedImportRecord
from bankrec.domain.errors import (
    InvalidTransitionError,
    NotFoundError,
    invalid_transition,
    staged_record_not_found,
)
from bankrec.utils.logging_config import get_logger

logger = get_logger(__name__)

# States owned by the matching engine; re-scoring may move between them freely.
SCORED_STATES = frozenset({MatchStatus.UNMATCHED, MatchStatus.POTENTIAL, MatchStatus.MATCHED})

# Human decisions; nothing moves a record out of these within a session.
TERMINAL_STATES = frozenset({MatchStatus.REVIEWED, MatchStatus.VERIFIED})


def can_rescore(record: StagedImportRecord) -> bool:
    """True while no human decision has been recorded."""
    return record.match_status in SCORED_STATES and not record.reviewed


def check_review_transition(record: StagedImportRecord, new_status: MatchStatus) -> None:
    """Validate a human transition.

    Raises:
        InvalidTransitionError: If the move is not allowed
    """
    current = record.match_status.value
    if new_status in SCORED_STATES:
        raise InvalidTransitionError(
            invalid_transition(record.id, current, new_status.value, "set by matching only")
        )
    if record.match_status in TERMINAL_STATES:
        raise InvalidTransitionError(
            invalid_transition(record.id, current, new_status.value, "already decided")
        )
    if new_status is MatchStatus.VERIFIED and record.matched_ledger_id is None:
        raise InvalidTransitionError(
            invalid_transition(record.id, current, new_status.value, "no matched ledger transaction")
        )


def verification_note(existing_description: str) -> str:
    return f"Verified against manual entry: {existing_description}"


class ReviewService:
    """Service applying human review decisions to staged records."""

    def __init__(self, db: Database):
        """Initialize review service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_record(self, owner_id: str, record_id: int) -> StagedImportRecord:
        record = self.db.get_staged_record(record_id)
        if record is None or record.owner_id != owner_id:
            raise NotFoundError(staged_record_not_found(record_id))
        return record

    def update_record_status(
        self,
        owner_id: str,
        record_id: int,
        new_status: MatchStatus,
        note: Optional[str] = None,
    ) -> StagedImportRecord:
        """Move a staged record to ``reviewed`` or ``verified``.

        Verifying stores a note naming the matched ledger transaction's
        original description, which the commit later keeps.

        Args:
            owner_id: Owner of the staging batch
            record_id: Staged record ID
            new_status: REVIEWED or VERIFIED
            note: Optional free-text reviewer note

        Returns:
            The updated staged record

        Raises:
            NotFoundError: If the record (or its matched ledger entry) is gone
            InvalidTransitionError: If the transition is not allowed
        """
        record = self._require_record(owner_id, record_id)
        check_review_transition(record, new_status)

        if new_status is MatchStatus.VERIFIED:
            existing = self.db.get_ledger_transaction(record.matched_ledger_id)
            if existing is None:
                raise NotFoundError(
                    f"Ledger transaction {record.matched_ledger_id} matched by staged record {record_id} not found"
                )
            self.db.update_staged_review(
                record_id,
                match_status=MatchStatus.VERIFIED,
                reviewed=True,
                verified=True,
                verification_note=verification_note(existing.description),
                notes=note,
            )
        else:
            self.db.update_staged_review(
                record_id,
                match_status=MatchStatus.REVIEWED,
                reviewed=True,
                verified=False,
                notes=note,
            )

        logger.info("Staged record %d marked %s", record_id, new_status.value)
        return self.db.get_staged_record(record_id)

    def accept(self, owner_id: str, record_id: int, note: Optional[str] = None) -> StagedImportRecord:
        """Accept the bank record as-is."""
        return self.update_record_status(owner_id, record_id, MatchStatus.REVIEWED, note or "Accepted")

    def reject(self, owner_id: str, record_id: int, note: Optional[str] = None) -> StagedImportRecord:
        """Reject the proposed match; the bank record is still committed."""
        return self.update_record_status(owner_id, record_id, MatchStatus.REVIEWED, note or "Rejected")

    def verify(self, owner_id: str, record_id: int, note: Optional[str] = None) -> StagedImportRecord:
        """Confirm the match and keep the ledger entry's description and category."""
        return self.update_record_status(owner_id, record_id, MatchStatus.VERIFIED, note)
