"""Mapper functions to convert between domain models and SQLAlchemy models.

Enums are stored by value; Numeric columns come back as Decimal.
"""

from decimal import Decimal

from bankrec.domain import entities as domain
from bankrec.database.models import (
    Category as ORMCategory,
    LedgerTransaction as ORMLedgerTransaction,
    StagedImportRecord as ORMStagedImportRecord,
)


def _decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        owner_id=orm_category.owner_id,
        name=orm_category.name,
        category_type=domain.CategoryType(orm_category.category_type),
        color=orm_category.color,
        created_at=orm_category.created_at,
    )


def ledger_transaction_to_domain(orm_txn: ORMLedgerTransaction) -> domain.LedgerTransaction:
    """Convert SQLAlchemy LedgerTransaction model to domain entity."""
    return domain.LedgerTransaction(
        id=orm_txn.id,
        owner_id=orm_txn.owner_id,
        description=orm_txn.description,
        amount=_decimal(orm_txn.amount),
        direction=domain.Direction(orm_txn.direction),
        occurred_on=orm_txn.occurred_on,
        category_id=orm_txn.category_id,
        bank_reference=orm_txn.bank_reference,
        created_at=orm_txn.created_at,
    )


def new_ledger_transaction_to_orm(
    owner_id: str, txn: domain.NewLedgerTransaction
) -> ORMLedgerTransaction:
    """Build an unsaved ORM row from new ledger values."""
    return ORMLedgerTransaction(
        owner_id=owner_id,
        description=txn.description,
        amount=txn.amount,
        direction=txn.direction.value,
        occurred_on=txn.occurred_on,
        category_id=txn.category_id,
        bank_reference=txn.bank_reference,
    )


def bank_record_to_orm(owner_id: str, record: domain.BankTransactionRecord) -> ORMStagedImportRecord:
    """Build an unsaved staging row in its initial unmatched state."""
    return ORMStagedImportRecord(
        owner_id=owner_id,
        kind=record.kind.value,
        product=record.product,
        started_at=record.started_at,
        completed_at=record.completed_at,
        description=record.description,
        amount=record.amount,
        fee=record.fee,
        currency=record.currency,
        state=record.state.value,
        balance=record.balance,
        matched_ledger_id=None,
        match_confidence=None,
        match_status=domain.MatchStatus.UNMATCHED.value,
        match_reasons=[],
        suggested_category_id=None,
        reviewed=False,
        verified=False,
    )


def staged_record_to_domain(orm_record: ORMStagedImportRecord) -> domain.StagedImportRecord:
    """Convert SQLAlchemy StagedImportRecord model to domain entity."""
    return domain.StagedImportRecord(
        id=orm_record.id,
        owner_id=orm_record.owner_id,
        kind=domain.TransactionKind(orm_record.kind),
        product=orm_record.product,
        started_at=orm_record.started_at,
        completed_at=orm_record.completed_at,
        description=orm_record.description,
        amount=_decimal(orm_record.amount),
        fee=_decimal(orm_record.fee),
        currency=orm_record.currency,
        state=domain.TransactionState(orm_record.state),
        balance=_decimal(orm_record.balance),
        matched_ledger_id=orm_record.matched_ledger_id,
        match_confidence=(
            domain.MatchConfidence(orm_record.match_confidence)
            if orm_record.match_confidence
            else None
        ),
        match_status=domain.MatchStatus(orm_record.match_status),
        match_reasons=tuple(orm_record.match_reasons or ()),
        suggested_category_id=orm_record.suggested_category_id,
        verification_note=orm_record.verification_note,
        notes=orm_record.notes,
        reviewed=orm_record.reviewed,
        verified=orm_record.verified,
        created_at=orm_record.created_at,
    )
