"""Commit workflow: fold the staging batch into the permanent ledger."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Optional

from bankrec.database.base import Database
from bankrec.domain.entities import (
    CommitPreview,
    CommitResult,
    MatchStatus,
    NewLedgerTransaction,
    StagedImportRecord,
)
from bankrec.domain.errors import CommitError, DomainError, StoreError, ValidationError, store_phase
from bankrec.domain.statement_import import require_owner
from bankrec.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SnapshotEntry:
    """A staged record plus what it needs from its matched ledger row."""

    record: StagedImportRecord
    existing_description: Optional[str] = None
    existing_category_name: Optional[str] = None

    @property
    def is_verified(self) -> bool:
        return self.record.match_status is MatchStatus.VERIFIED


@dataclass
class CommitContext:
    """State handed from one commit step to the next."""

    owner_id: str
    snapshot: list[SnapshotEntry] = field(default_factory=list)
    severed: int = 0
    deleted: int = 0
    new_rows: list[NewLedgerTransaction] = field(default_factory=list)
    inserted_ids: list[int] = field(default_factory=list)
    final_category_ids: list[Optional[int]] = field(default_factory=list)
    restored: int = 0
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CommitStep:
    """One named step; fatal steps abort the commit, soft steps only warn."""

    name: str
    run: Callable[[CommitContext], None]
    fatal: bool = True


def build_ledger_row(entry: SnapshotEntry) -> NewLedgerTransaction:
    """Turn a staged record into ledger values.

    Verified records keep the matched ledger description, followed by the
    verification note in parentheses. The bank description is always kept
    as the bank reference for later duplicate checks.
    """
    record = entry.record
    if entry.is_verified and entry.existing_description:
        description = entry.existing_description
    else:
        description = record.description
    if entry.is_verified and record.verification_note:
        description = f"{description} ({record.verification_note})"

    return NewLedgerTransaction(
        description=description,
        amount=abs(record.amount),
        direction=record.direction,
        occurred_on=record.started_at.date(),
        category_id=record.suggested_category_id,
        bank_reference=record.description,
    )


class CommitService:
    """Service replacing an owner's ledger with the reviewed staging batch.

    Steps 2 to 5 (sever, delete, build, insert) run inside one store
    transaction, so a failure there leaves both the ledger and the staging
    batch untouched. Category restoration and staging cleanup run after the
    ledger is committed and only produce warnings when they fail.
    """

    def __init__(self, db: Database):
        """Initialize commit service.

        Args:
            db: Database instance
        """
        self.db = db
        self.snapshot_step = CommitStep("snapshot staging", self._snapshot)
        self.ledger_steps = [
            CommitStep("sever references", self._sever_references),
            CommitStep("delete ledger", self._delete_ledger),
            CommitStep("build ledger rows", self._build_rows),
            CommitStep("insert ledger rows", self._insert_rows),
        ]
        self.cleanup_steps = [
            CommitStep("restore categories", self._restore_categories, fatal=False),
            CommitStep("clear staging", self._clear_staging, fatal=False),
        ]

    def commit_import(self, owner_id: str) -> CommitResult:
        """Replace the owner's ledger with the staged batch.

        Args:
            owner_id: Owner whose ledger and staging batch are used

        Returns:
            CommitResult with committed, restored and uncategorised counts,
            plus warnings from any soft step that failed

        Raises:
            ValidationError: If there is nothing staged
            CommitError: If a fatal step failed; the ledger is unchanged
        """
        require_owner(owner_id)
        with self.db.owner_lock(owner_id):
            context = CommitContext(owner_id=owner_id)
            self._run(self.snapshot_step, context)
            if not context.snapshot:
                raise ValidationError("No staged transactions found to commit")

            try:
                with self.db.transaction():
                    for step in self.ledger_steps:
                        self._run(step, context)
            except StoreError as e:
                # The unit of work itself failed to commit
                logger.error("Commit aborted while committing the ledger: %s", e)
                raise CommitError(
                    "commit ledger replacement", str(e), staged=len(context.snapshot)
                ) from e

            for step in self.cleanup_steps:
                self._run(step, context)

        needs_categorization = sum(1 for cid in context.final_category_ids if cid is None)
        result = CommitResult(
            committed=len(context.inserted_ids),
            verified_with_category=context.restored,
            needs_categorization=needs_categorization,
            warnings=context.warnings,
        )
        logger.info(
            "Import committed: %d transactions, %d with categories restored, %d need categorization",
            result.committed,
            result.verified_with_category,
            result.needs_categorization,
        )
        return result

    def _run(self, step: CommitStep, context: CommitContext) -> None:
        logger.debug("Commit step '%s' starting", step.name)
        try:
            step.run(context)
        except Exception as e:
            if step.fatal:
                logger.error("Commit step '%s' failed: %s", step.name, e)
                raise CommitError(step.name, str(e), staged=len(context.snapshot)) from e
            logger.warning("Commit step '%s' failed, continuing: %s", step.name, e)
            context.warnings.append(f"{step.name}: {e}")

    def _snapshot(self, context: CommitContext) -> None:
        ledger_cache = {}
        categories = {}
        for record in self.db.list_staged_records(context.owner_id):
            if record.matched_ledger_id is None:
                context.snapshot.append(SnapshotEntry(record))
                continue
            if record.matched_ledger_id not in ledger_cache:
                ledger_cache[record.matched_ledger_id] = self.db.get_ledger_transaction(
                    record.matched_ledger_id
                )
            existing = ledger_cache[record.matched_ledger_id]
            if existing is None:
                context.snapshot.append(SnapshotEntry(record))
                continue

            category_name = None
            if existing.category_id is not None:
                if existing.category_id not in categories:
                    categories[existing.category_id] = self.db.get_category(existing.category_id)
                category = categories[existing.category_id]
                category_name = category.name if category else None
            context.snapshot.append(
                SnapshotEntry(
                    record,
                    existing_description=existing.description,
                    existing_category_name=category_name,
                )
            )

    def _sever_references(self, context: CommitContext) -> None:
        context.severed = self.db.sever_ledger_references(context.owner_id)

    def _delete_ledger(self, context: CommitContext) -> None:
        context.deleted = self.db.delete_ledger_transactions(context.owner_id)
        logger.info("Deleted %d existing ledger transactions", context.deleted)

    def _build_rows(self, context: CommitContext) -> None:
        context.new_rows = [build_ledger_row(entry) for entry in context.snapshot]

    def _insert_rows(self, context: CommitContext) -> None:
        context.inserted_ids = self.db.insert_ledger_transactions(
            context.owner_id, context.new_rows
        )
        if len(context.inserted_ids) != len(context.snapshot):
            raise StoreError(
                "insert ledger transactions",
                f"inserted {len(context.inserted_ids)} of {len(context.snapshot)} rows",
            )
        context.final_category_ids = [row.category_id for row in context.new_rows]

    def _restore_categories(self, context: CommitContext) -> None:
        # Categories are read before the staging batch is cleared
        by_name: dict[str, int] = {}
        for category in self.db.list_categories(context.owner_id):
            by_name.setdefault(category.name, category.id)

        failures = 0
        for index, entry in enumerate(context.snapshot):
            if not entry.is_verified or not entry.existing_category_name:
                continue
            category_id = by_name.get(entry.existing_category_name)
            if category_id is None:
                continue
            transaction_id = context.inserted_ids[index]
            try:
                self.db.update_ledger_category(transaction_id, category_id)
            except DomainError as e:
                failures += 1
                logger.warning(
                    "Failed to restore category for transaction %d: %s", transaction_id, e
                )
                continue
            context.final_category_ids[index] = category_id
            context.restored += 1

        if failures:
            context.warnings.append(
                f"restore categories: {failures} categor{'ies' if failures != 1 else 'y'} could not be restored"
            )

    def _clear_staging(self, context: CommitContext) -> None:
        self.db.clear_staged_records(context.owner_id)

    def preview_commit(self, owner_id: str) -> CommitPreview:
        """Report what a commit would do without changing anything."""
        require_owner(owner_id)
        with store_phase("commit preview"):
            to_delete = self.db.count_ledger_transactions(owner_id)
            records = self.db.list_staged_records(owner_id)

        counts = Counter(record.match_status for record in records)
        return CommitPreview(
            to_delete=to_delete,
            staged=len(records),
            breakdown={status: counts.get(status, 0) for status in MatchStatus},
        )
