"""Statement import domain service."""

from typing import Optional, Sequence

from bankrec.database.base import Database
from bankrec.domain.duplicates import DuplicateDetector
from bankrec.domain.entities import (
    ImportResult,
    LedgerTransaction,
    MatchResult,
    ParsedStatement,
    StagedImportRecord,
)
from bankrec.domain.errors import ValidationError, store_phase
from bankrec.domain.matching import CategorySuggester, MatchingEngine
from bankrec.domain.review import can_rescore
from bankrec.domain.statement import DEFAULT_MAX_FILE_BYTES, StatementParser
from bankrec.utils.logging_config import get_logger

logger = get_logger(__name__)


def require_owner(owner_id: Optional[str]) -> str:
    if not owner_id or not owner_id.strip():
        raise ValidationError("An owner id is required")
    return owner_id


class StatementImportService:
    """Service for importing bank statements into the staging store.

    Each owner has exactly one staging batch. A successful import replaces
    the previous batch; an import in which every record is a duplicate
    changes nothing.
    """

    def __init__(
        self,
        db: Database,
        suggester: Optional[CategorySuggester] = None,
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
        max_workers: int = 1,
    ):
        """Initialize statement import service.

        Args:
            db: Database instance
            suggester: Category suggester used to fill gaps in matching
            max_file_bytes: Largest statement file accepted
            max_workers: Threads used for match scoring
        """
        self.db = db
        self.parser = StatementParser(max_file_bytes=max_file_bytes)
        self.matcher = MatchingEngine(suggester=suggester, max_workers=max_workers)

    def import_statement(self, owner_id: str, file_path: str) -> ImportResult:
        """Import a statement file.

        Args:
            owner_id: Owner whose ledger and staging batch are used
            file_path: Path to the exported CSV statement

        Returns:
            ImportResult with statistics, staged records and duplicate count

        Raises:
            StatementFormatError: If the file cannot be imported at all
            FileNotFoundError: If the file doesn't exist
            StoreError: If the store fails, naming the phase
        """
        require_owner(owner_id)
        content = self.parser.read_file(file_path)
        return self.import_statement_text(owner_id, content)

    def import_statement_text(self, owner_id: str, content: str) -> ImportResult:
        """Import statement content that has already been read."""
        require_owner(owner_id)
        parsed = self.parser.parse_text(content)

        with self.db.owner_lock(owner_id):
            return self._stage(owner_id, parsed)

    def _stage(self, owner_id: str, parsed: ParsedStatement) -> ImportResult:
        with store_phase("duplicate check"):
            previous_batch = self.db.list_staged_records(owner_id)
            ledger = self.db.list_ledger_transactions(owner_id)

        dedup = DuplicateDetector(previous_batch, ledger).filter(parsed.records)
        if not dedup.unique:
            logger.warning(
                "All %d transactions appear to be duplicates - no new data imported",
                dedup.duplicates,
            )
            return ImportResult(
                stats=parsed.stats,
                staged=[],
                duplicates_skipped=dedup.duplicates,
                rejected_rows=parsed.errors,
                match_summary=MatchingEngine.summarize([]),
            )

        # The previous batch is replaced, so rows it shared with this file
        # are staged again; only ledger duplicates stay out.
        to_stage = dedup.not_in_ledger
        skipped = len(parsed.records) - len(to_stage)
        if skipped:
            logger.info("Skipped %d transactions already in the ledger", skipped)

        with store_phase("staging"):
            with self.db.transaction():
                cleared = self.db.clear_staged_records(owner_id)
                staged = self.db.add_staged_records(owner_id, to_stage)
        if cleared:
            logger.info("Cleared %d records from the previous staging batch", cleared)

        with store_phase("matching"):
            results = self._apply_matches(staged, ledger)
            staged = self.db.list_staged_records(owner_id)

        logger.info("Imported %d transactions for owner %s", len(staged), owner_id)
        return ImportResult(
            stats=parsed.stats,
            staged=staged,
            duplicates_skipped=skipped,
            rejected_rows=parsed.errors,
            match_summary=MatchingEngine.summarize(results),
        )

    def _apply_matches(
        self, records: Sequence[StagedImportRecord], ledger: Sequence[LedgerTransaction]
    ) -> list[MatchResult]:
        """Score records that have no human decision yet and store the results."""
        eligible = [record for record in records if can_rescore(record)]
        results = self.matcher.match_all(eligible, ledger)
        with self.db.transaction():
            for record, result in zip(eligible, results):
                self.db.update_staged_match(
                    record.id,
                    matched_ledger_id=result.ledger_id,
                    match_confidence=result.confidence,
                    match_status=result.status,
                    match_reasons=list(result.reasons),
                    suggested_category_id=result.suggested_category_id,
                )
        return results

    def rematch(self, owner_id: str) -> list[StagedImportRecord]:
        """Re-score the staging batch against the current ledger.

        Records already reviewed or verified keep their decision.
        """
        require_owner(owner_id)
        with self.db.owner_lock(owner_id):
            with store_phase("matching"):
                records = self.db.list_staged_records(owner_id)
                ledger = self.db.list_ledger_transactions(owner_id)
                rescored = self._apply_matches(records, ledger)
                logger.info("Re-scored %d of %d staged records", len(rescored), len(records))
                return self.db.list_staged_records(owner_id)

    def get_staged_records(self, owner_id: str, for_review: bool = False) -> list[StagedImportRecord]:
        """List the owner's staged records.

        Args:
            owner_id: Owner of the staging batch
            for_review: Order by confidence and reason count instead of staging order
        """
        require_owner(owner_id)
        with store_phase("read staging"):
            records = self.db.list_staged_records(owner_id)
        return MatchingEngine.sort_matches(records) if for_review else records

    def clear_staging(self, owner_id: str) -> int:
        """Discard the owner's staging batch. Returns count removed."""
        require_owner(owner_id)
        with self.db.owner_lock(owner_id):
            with store_phase("clear staging"):
                cleared = self.db.clear_staged_records(owner_id)
        logger.info("Cleared %d staged records for owner %s", cleared, owner_id)
        return cleared
