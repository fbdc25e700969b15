"""Ledger transaction domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from bankrec.database.base import Database
from bankrec.domain.entities import Direction, LedgerTransaction
from bankrec.domain.errors import NotFoundError, ValidationError, category_not_found


class LedgerService:
    """Service for manually maintained ledger transactions."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        owner_id: str,
        description: str,
        amount: Decimal,
        occurred_on: date,
        direction: Optional[Direction] = None,
        category_id: Optional[int] = None,
    ) -> int:
        """Create a ledger transaction.

        Args:
            owner_id: Owner of the ledger
            description: Transaction description
            amount: Signed amount, or a magnitude when direction is given
            occurred_on: Transaction date
            direction: Explicit direction; derived from the sign when omitted
            category_id: Optional category ID

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the description is empty or the amount is zero
            NotFoundError: If the category doesn't exist for the owner
        """
        if not description or not description.strip():
            raise ValidationError("Description is required")
        if amount == 0:
            raise ValidationError("Amount must be non-zero")

        if category_id is not None:
            category = self.db.get_category(category_id)
            if category is None or category.owner_id != owner_id:
                raise NotFoundError(category_not_found(category_id))

        if direction is None:
            direction = Direction.from_amount(amount)

        return self.db.create_ledger_transaction(
            owner_id=owner_id,
            description=description.strip(),
            amount=abs(amount),
            direction=direction,
            occurred_on=occurred_on,
            category_id=category_id,
        )

    def get_transaction(self, transaction_id: int) -> Optional[LedgerTransaction]:
        return self.db.get_ledger_transaction(transaction_id)

    def list_transactions(self, owner_id: str) -> list[LedgerTransaction]:
        """List the owner's ledger, oldest first."""
        return self.db.list_ledger_transactions(owner_id)
