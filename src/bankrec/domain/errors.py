"""Shared domain error messages and error types."""

from contextlib import contextmanager
from typing import Iterator, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class StatementFormatError(ValidationError):
    """The statement file as a whole cannot be imported."""


class InvalidTransitionError(ValidationError):
    """A staged record cannot move to the requested match status."""


class StoreError(DomainError):
    """A read or write against the persistent store failed."""

    def __init__(self, operation: str, detail: str):
        super().__init__(f"Store failure during {operation}: {detail}")
        self.operation = operation
        self.detail = detail


class CommitError(DomainError):
    """A fatal commit step failed; the ledger was left unmodified."""

    def __init__(self, step: str, detail: str, retryable: bool = True, staged: int = 0):
        message = f"Commit aborted at step '{step}': {detail}"
        if retryable:
            message += f" (ledger unchanged, {staged} staged record{'s' if staged != 1 else ''} kept; safe to retry)"
        super().__init__(message)
        self.step = step
        self.detail = detail
        self.retryable = retryable
        self.staged = staged


@contextmanager
def store_phase(phase: str) -> Iterator[None]:
    """Re-raise store failures with the pipeline phase they happened in."""
    try:
        yield
    except StoreError as e:
        raise StoreError(phase, f"{e.operation}: {e.detail}") from e


def staged_record_not_found(record_id: int) -> str:
    """Return message for missing staged record."""
    return f"Staged record {record_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_name_not_found(name: str) -> str:
    """Return message for missing category by name."""
    return f"Category '{name}' not found"


def duplicate_category_name(name: str, owner_id: str) -> str:
    """Return message for a category name already used by the owner."""
    return f"Category '{name}' already exists for owner '{owner_id}'"


def missing_headers(headers: list[str]) -> str:
    """Return message for a statement lacking required columns."""
    return f"Missing required headers: {', '.join(headers)}"


def invalid_transition(
    record_id: int, current: str, requested: str, reason: Optional[str] = None
) -> str:
    """Return message for a rejected review transition."""
    message = f"Staged record {record_id} cannot move from '{current}' to '{requested}'"
    if reason:
        message += f": {reason}"
    return message
