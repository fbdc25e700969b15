"""Bank statement parsing and normalisation."""

import csv
import io
from collections import Counter
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional

from bankrec.domain.entities import (
    BankTransactionRecord,
    Direction,
    ParsedStatement,
    StatementStats,
    TransactionKind,
    TransactionState,
)
from bankrec.domain.errors import StatementFormatError, missing_headers
from bankrec.utils.amount_parser import parse_statement_amount
from bankrec.utils.date_parser import parse_statement_timestamp
from bankrec.utils.logging_config import get_logger

logger = get_logger(__name__)

REQUIRED_HEADERS = (
    "Type",
    "Product",
    "Started Date",
    "Completed Date",
    "Description",
    "Amount",
    "Fee",
    "Currency",
    "State",
    "Balance",
)

DEFAULT_MAX_FILE_BYTES = 10 * 1024 * 1024


def normalize_kind(value: str) -> TransactionKind:
    """Map a raw Type column ("Card Payment", "card_payment") to its kind."""
    key = "_".join((value or "").strip().upper().split())
    try:
        return TransactionKind(key)
    except ValueError:
        raise ValueError(f"Invalid transaction type: {key or '<empty>'}")


def normalize_state(value: str) -> TransactionState:
    """Map a raw State column to its state."""
    key = (value or "").strip().upper()
    try:
        return TransactionState(key)
    except ValueError:
        raise ValueError(f"Invalid transaction state: {key or '<empty>'}")


def signed_amount(kind: TransactionKind, amount: Decimal) -> Decimal:
    """Force the sign for kinds with a fixed direction; neutral kinds keep theirs."""
    fixed = kind.fixed_direction
    if fixed is Direction.INCOME:
        return abs(amount)
    if fixed is Direction.EXPENDITURE:
        return -abs(amount)
    return amount


class StatementParser:
    """Parser for exported bank statement CSV files."""

    def __init__(self, max_file_bytes: int = DEFAULT_MAX_FILE_BYTES):
        """Initialize statement parser.

        Args:
            max_file_bytes: Largest statement file accepted
        """
        self.max_file_bytes = max_file_bytes

    def read_file(self, file_path: str) -> str:
        """Validate a statement file and return its decoded text.

        The extension and size are checked before any content is read.

        Raises:
            StatementFormatError: Wrong extension, oversized or undecodable file
            FileNotFoundError: If the file doesn't exist
        """
        path = Path(file_path)
        if path.suffix.lower() != ".csv":
            raise StatementFormatError(f"File must be a CSV file: {path.name}")
        if not path.exists():
            raise FileNotFoundError(f"Statement file not found: {file_path}")

        size = path.stat().st_size
        if size > self.max_file_bytes:
            raise StatementFormatError(
                f"File size {size} bytes exceeds the {self.max_file_bytes} byte limit"
            )

        try:
            return path.read_bytes().decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise StatementFormatError(f"Statement is not valid UTF-8 text: {e}")

    def parse_text(self, content: str) -> ParsedStatement:
        """Parse statement text into completed bank records.

        Rows with an unknown type/state or an unparseable date or amount are
        logged and skipped. Reverted and pending rows are validated and
        counted in the statistics but not returned as records.

        Args:
            content: Statement text including the header row

        Returns:
            ParsedStatement with completed records, statistics and row errors

        Raises:
            StatementFormatError: Missing headers, broken structure, or no
                usable rows at all
        """
        content = content.lstrip("\ufeff")
        # Row numbers are the file line a record starts on, blank lines included
        rows: list[tuple[int, list[str]]] = []
        reader = csv.reader(io.StringIO(content))
        last_line = 0
        try:
            for values in reader:
                if any(value.strip() for value in values):
                    rows.append((last_line + 1, values))
                last_line = reader.line_num
        except csv.Error as e:
            raise StatementFormatError(f"Could not read statement structure: {e}")

        if len(rows) < 2:
            raise StatementFormatError(
                "CSV file must contain at least a header row and one data row"
            )

        headers = [header.strip() for header in rows[0][1]]
        missing = [header for header in REQUIRED_HEADERS if header not in headers]
        if missing:
            raise StatementFormatError(missing_headers(missing))

        parsed: list[BankTransactionRecord] = []
        errors: list[str] = []
        for row_num, values in rows[1:]:
            raw = {
                header: (values[index].strip() if index < len(values) else "")
                for index, header in enumerate(headers)
            }
            try:
                parsed.append(self.parse_row(raw))
            except ValueError as e:
                message = f"Row {row_num}: {e}"
                logger.warning("Skipping statement row: %s", message)
                errors.append(message)

        if not parsed:
            raise StatementFormatError(
                f"No valid transactions found ({len(errors)} row{'s' if len(errors) != 1 else ''} could not be parsed)"
            )

        records = [record for record in parsed if record.state is TransactionState.COMPLETED]
        if not records:
            raise StatementFormatError(
                f"Statement contains no completed transactions ({len(parsed)} reverted or pending)"
            )

        stats = self.generate_stats(parsed, rejected_rows=len(errors))
        logger.info(
            "Parsed statement: %d rows, %d completed, %d rejected",
            stats.total_rows,
            stats.completed,
            stats.rejected_rows,
        )
        return ParsedStatement(records=records, stats=stats, errors=errors)

    def parse_row(self, row: dict[str, str]) -> BankTransactionRecord:
        """Convert one header-keyed row into a typed record.

        Raises:
            ValueError: If any field fails validation
        """
        kind = normalize_kind(row.get("Type", ""))
        state = normalize_state(row.get("State", ""))

        started_at = parse_statement_timestamp(row.get("Started Date", ""))
        completed_raw = row.get("Completed Date", "")
        completed_at: Optional[datetime] = (
            parse_statement_timestamp(completed_raw) if completed_raw else None
        )

        amount = parse_statement_amount(row.get("Amount"))
        fee = parse_statement_amount(row.get("Fee"), default=Decimal("0"))
        balance = parse_statement_amount(row.get("Balance"), default=Decimal("0"))

        return BankTransactionRecord(
            kind=kind,
            product=row.get("Product", ""),
            started_at=started_at,
            completed_at=completed_at,
            description=row.get("Description", ""),
            amount=signed_amount(kind, amount),
            fee=fee,
            currency=row.get("Currency", ""),
            state=state,
            balance=balance,
        )

    @staticmethod
    def generate_stats(
        records: list[BankTransactionRecord], rejected_rows: int = 0
    ) -> StatementStats:
        """Aggregate statistics over every parsed record.

        Amount totals only include completed records.
        """
        states = Counter(record.state for record in records)
        by_kind = dict(Counter(record.kind for record in records))

        total = Decimal("0")
        income = Decimal("0")
        expenditure = Decimal("0")
        for record in records:
            if record.state is not TransactionState.COMPLETED:
                continue
            magnitude = abs(record.amount)
            total += magnitude
            if record.is_income:
                income += magnitude
            else:
                expenditure += magnitude

        started = [record.started_at for record in records]
        return StatementStats(
            total_rows=len(records),
            completed=states[TransactionState.COMPLETED],
            reverted=states[TransactionState.REVERTED],
            pending=states[TransactionState.PENDING],
            by_kind=by_kind,
            total_amount=total,
            income_amount=income,
            expenditure_amount=expenditure,
            earliest=min(started) if started else None,
            latest=max(started) if started else None,
            rejected_rows=rejected_rows,
        )
