"""Tests for statement parsing and normalisation."""

from datetime import datetime
from decimal import Decimal

import pytest

from bankrec.domain.entities import Direction, TransactionKind, TransactionState
from bankrec.domain.errors import StatementFormatError
from bankrec.domain.statement import (
    StatementParser,
    normalize_kind,
    normalize_state,
    signed_amount,
)


@pytest.fixture
def parser():
    return StatementParser()


def test_parse_single_card_payment(parser, statement_text):
    """A positive card payment becomes a negative expenditure record."""
    result = parser.parse_text(
        statement_text({"Amount": "12.34", "Started Date": "2024-03-01 00:00:00"})
    )

    assert len(result.records) == 1
    record = result.records[0]
    assert record.amount == Decimal("-12.34")
    assert record.state is TransactionState.COMPLETED
    assert record.kind is TransactionKind.CARD_PAYMENT
    assert record.direction is Direction.EXPENDITURE
    assert record.started_at == datetime(2024, 3, 1)
    assert result.errors == []


def test_parse_sample_statement_stats(parser, fixtures_dir):
    """Statistics count every valid row; amounts only count completed rows."""
    content = parser.read_file(str(fixtures_dir / "sample_statement.csv"))
    result = parser.parse_text(content)

    stats = result.stats
    assert stats.total_rows == 6
    assert stats.completed == 4
    assert stats.reverted == 1
    assert stats.pending == 1
    assert stats.by_kind[TransactionKind.CARD_PAYMENT] == 3
    assert stats.total_amount == Decimal("565.33")
    assert stats.income_amount == Decimal("500.00")
    assert stats.expenditure_amount == Decimal("65.33")
    assert stats.earliest == datetime(2024, 1, 15, 10, 30)
    assert stats.latest == datetime(2024, 1, 20, 9, 0)

    # Only completed rows are handed on
    assert len(result.records) == 4
    assert all(r.state is TransactionState.COMPLETED for r in result.records)


def test_fee_with_positive_amount_is_negated(parser, fixtures_dir):
    content = parser.read_file(str(fixtures_dir / "sample_statement.csv"))
    fee = [r for r in parser.parse_text(content).records if r.kind is TransactionKind.FEE][0]

    assert fee.amount == Decimal("-2.99")
    assert fee.started_at == datetime(2024, 1, 20, 9, 0)


def test_bad_rows_are_skipped_and_reported(parser, fixtures_dir):
    content = parser.read_file(str(fixtures_dir / "bad_rows_statement.csv"))
    result = parser.parse_text(content)

    assert [r.description for r in result.records] == ["Coffee House", "Bookshop"]
    assert len(result.errors) == 3
    assert result.errors[0].startswith("Row 3:")
    assert "Invalid transaction type" in result.errors[0]
    assert result.errors[1].startswith("Row 4:")
    assert result.errors[2].startswith("Row 5:")
    assert result.stats.rejected_rows == 3


def test_row_numbers_count_blank_lines(parser, statement_text):
    header, good, bad = statement_text({}, {"Type": "MYSTERY"}).splitlines()
    content = "\n".join([header, "", good, "   ", "", bad]) + "\n"

    result = parser.parse_text(content)

    assert len(result.records) == 1
    assert result.errors == ["Row 6: Invalid transaction type: MYSTERY"]


def test_empty_balance_defaults_to_zero(parser, fixtures_dir):
    content = parser.read_file(str(fixtures_dir / "bad_rows_statement.csv"))
    bookshop = parser.parse_text(content).records[-1]

    assert bookshop.balance == Decimal("0")


def test_missing_headers(parser, fixtures_dir):
    content = (fixtures_dir / "missing_amount_header.csv").read_text(encoding="utf-8")

    with pytest.raises(StatementFormatError) as excinfo:
        parser.parse_text(content)

    assert "missing required headers" in str(excinfo.value).lower()
    assert "Amount" in str(excinfo.value)


def test_header_only_file_rejected(parser, statement_text):
    with pytest.raises(StatementFormatError, match="at least a header row"):
        parser.parse_text(statement_text())


def test_no_valid_rows_rejected(parser, statement_text):
    content = statement_text({"Type": "MYSTERY"}, {"Amount": ""})

    with pytest.raises(StatementFormatError, match="No valid transactions"):
        parser.parse_text(content)


def test_no_completed_rows_rejected(parser, statement_text):
    content = statement_text({"State": "PENDING"}, {"State": "REVERTED"})

    with pytest.raises(StatementFormatError, match="no completed transactions"):
        parser.parse_text(content)


def test_byte_order_mark_is_ignored(parser, statement_text):
    result = parser.parse_text("\ufeff" + statement_text({}))

    assert len(result.records) == 1


def test_quoted_description_with_comma(parser):
    content = (
        "Type,Product,Started Date,Completed Date,Description,Amount,Fee,Currency,State,Balance\n"
        'CARD_PAYMENT,Current,2024-03-01 10:00:00,,"Smith, Jones & Co",-5.00,0,GBP,COMPLETED,10\n'
    )

    record = parser.parse_text(content).records[0]

    assert record.description == "Smith, Jones & Co"
    assert record.completed_at is None


def test_parsing_is_deterministic(parser, fixtures_dir):
    content = parser.read_file(str(fixtures_dir / "sample_statement.csv"))

    assert parser.parse_text(content) == parser.parse_text(content)


def test_read_file_rejects_non_csv(parser, tmp_path):
    path = tmp_path / "statement.txt"
    path.write_text("whatever", encoding="utf-8")

    with pytest.raises(StatementFormatError, match="must be a CSV"):
        parser.read_file(str(path))


def test_read_file_rejects_oversized_file(tmp_path, statement_text):
    path = tmp_path / "big.csv"
    path.write_text(statement_text({}), encoding="utf-8")

    with pytest.raises(StatementFormatError, match="exceeds"):
        StatementParser(max_file_bytes=10).read_file(str(path))


def test_read_file_missing(parser, tmp_path):
    with pytest.raises(FileNotFoundError):
        parser.read_file(str(tmp_path / "nope.csv"))


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("CARD_PAYMENT", TransactionKind.CARD_PAYMENT),
        ("card payment", TransactionKind.CARD_PAYMENT),
        (" Topup ", TransactionKind.TOPUP),
        ("rev_payment_refund", TransactionKind.REV_PAYMENT_REFUND),
    ],
)
def test_normalize_kind(raw, expected):
    assert normalize_kind(raw) is expected


def test_normalize_kind_invalid():
    with pytest.raises(ValueError, match="Invalid transaction type"):
        normalize_kind("GIFT")


def test_normalize_state():
    assert normalize_state("completed") is TransactionState.COMPLETED
    with pytest.raises(ValueError, match="Invalid transaction state"):
        normalize_state("DECLINED")


@pytest.mark.parametrize(
    "kind,amount,expected",
    [
        (TransactionKind.CARD_PAYMENT, "12.34", "-12.34"),
        (TransactionKind.CARD_PAYMENT, "-12.34", "-12.34"),
        (TransactionKind.CASHBACK, "-1.00", "1.00"),
        (TransactionKind.TRANSFER, "-50.00", "-50.00"),
        (TransactionKind.TRANSFER, "50.00", "50.00"),
    ],
)
def test_signed_amount(kind, amount, expected):
    assert signed_amount(kind, Decimal(amount)) == Decimal(expected)
