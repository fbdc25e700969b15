"""Domain tests for statement import into staging."""

from datetime import date
from decimal import Decimal

import pytest

from bankrec.domain.entities import MatchConfidence, MatchStatus
from bankrec.domain.errors import StatementFormatError, StoreError, ValidationError
from bankrec.domain.statement_import import StatementImportService


def test_import_stages_completed_records(import_service, owner, fixtures_dir):
    result = import_service.import_statement(owner, str(fixtures_dir / "sample_statement.csv"))

    assert len(result.staged) == 4
    assert result.duplicates_skipped == 0
    assert result.rejected_rows == []
    assert not result.all_duplicates
    assert result.stats.total_rows == 6
    assert [r.description for r in result.staged] == [
        "Tesco Stores",
        "Top-Up by *1234",
        "To John Smith",
        "Monthly plan fee",
    ]
    # Empty ledger: nothing to match against
    assert all(r.match_status is MatchStatus.UNMATCHED for r in result.staged)
    assert all(r.owner_id == owner for r in result.staged)


def test_missing_amount_header_stages_nothing(import_service, owner, fixtures_dir):
    with pytest.raises(StatementFormatError, match="Missing required headers"):
        import_service.import_statement(owner, str(fixtures_dir / "missing_amount_header.csv"))

    assert import_service.get_staged_records(owner) == []


def test_reimport_same_file_is_all_duplicates(import_service, owner, fixtures_dir):
    path = str(fixtures_dir / "sample_statement.csv")
    first = import_service.import_statement(owner, path)

    second = import_service.import_statement(owner, path)

    assert second.all_duplicates
    assert second.staged == []
    assert second.duplicates_skipped == 4
    # The earlier batch survives untouched
    assert [r.id for r in import_service.get_staged_records(owner)] == [r.id for r in first.staged]


def test_new_import_replaces_previous_batch(import_service, owner, write_statement):
    import_service.import_statement(owner, str(write_statement({"Description": "Acme Ltd"})))

    second = import_service.import_statement(
        owner,
        str(
            write_statement(
                {"Description": "Acme Ltd"},
                {"Description": "Bakery", "Amount": "3.10"},
                name="second.csv",
            )
        ),
    )

    # Rows shared with the replaced batch are staged again
    assert second.duplicates_skipped == 0
    assert not second.all_duplicates
    staged = import_service.get_staged_records(owner)
    assert [r.description for r in staged] == ["Acme Ltd", "Bakery"]


def test_replacing_batch_still_skips_ledger_duplicates(
    import_service, ledger_service, owner, write_statement
):
    import_service.import_statement(owner, str(write_statement({"Description": "Acme Ltd"})))
    ledger_service.create_transaction(owner, "Bakery", Decimal("-3.10"), date(2024, 3, 1))

    second = import_service.import_statement(
        owner,
        str(
            write_statement(
                {"Description": "Acme Ltd"},
                {"Description": "Bakery", "Amount": "3.10"},
                {"Description": "Cafe", "Amount": "2.50"},
                name="second.csv",
            )
        ),
    )

    assert second.duplicates_skipped == 1
    assert [r.description for r in second.staged] == ["Acme Ltd", "Cafe"]


def test_ledger_duplicates_are_skipped(import_service, ledger_service, owner, write_statement):
    ledger_service.create_transaction(owner, "ACME LTD", Decimal("-12.34"), date(2024, 3, 1))

    result = import_service.import_statement(
        owner,
        str(write_statement({"Description": "Acme Ltd"}, {"Description": "Bakery", "Amount": "3.10"})),
    )

    assert result.duplicates_skipped == 1
    assert [r.description for r in result.staged] == ["Bakery"]


def test_import_scores_against_ledger(import_service, ledger_service, sample_categories, owner, write_statement):
    ledger_id = ledger_service.create_transaction(
        owner,
        "Acme Ltd Payment",
        Decimal("-12.34"),
        date(2024, 3, 10),
        category_id=sample_categories["Office Supplies"],
    )

    result = import_service.import_statement(owner, str(write_statement({})))

    record = result.staged[0]
    assert record.matched_ledger_id == ledger_id
    assert record.match_status is MatchStatus.POTENTIAL
    assert record.match_confidence is MatchConfidence.MEDIUM
    assert record.suggested_category_id == sample_categories["Office Supplies"]
    assert "Exact amount match" in record.match_reasons


def test_import_uses_category_suggester(temp_db, ledger_service, sample_categories, owner, write_statement, make_suggester):
    service = StatementImportService(
        temp_db, suggester=make_suggester((sample_categories["Groceries"], 0.75))
    )

    record = service.import_statement(owner, str(write_statement({}))).staged[0]

    assert record.suggested_category_id == sample_categories["Groceries"]
    assert record.match_reasons == ("Pattern match: 75% confidence",)


def test_import_text_matches_file_import(import_service, owner, statement_text):
    result = import_service.import_statement_text(owner, statement_text({}, {"Description": "Bakery"}))

    assert len(result.staged) == 2


def test_rematch_keeps_human_decisions(import_service, review_service, ledger_service, owner, write_statement):
    staged = import_service.import_statement(
        owner,
        str(write_statement({"Description": "Acme Ltd"}, {"Description": "Bakery", "Amount": "3.10"})),
    ).staged
    review_service.accept(owner, staged[0].id)

    ledger_service.create_transaction(owner, "Acme Ltd", Decimal("-12.34"), date(2024, 3, 1))
    ledger_service.create_transaction(owner, "Bakery", Decimal("-3.10"), date(2024, 3, 1))
    records = import_service.rematch(owner)

    assert records[0].match_status is MatchStatus.REVIEWED
    assert records[0].matched_ledger_id is None
    assert records[1].match_status is MatchStatus.MATCHED
    assert records[1].matched_ledger_id is not None


def test_staged_records_ordered_for_review(import_service, ledger_service, owner, write_statement):
    ledger_service.create_transaction(owner, "Bakery", Decimal("-3.10"), date(2024, 3, 3))
    import_service.import_statement(
        owner,
        str(write_statement({"Description": "Unrelated"}, {"Description": "Bakery", "Amount": "3.10"})),
    )

    ordered = import_service.get_staged_records(owner, for_review=True)

    assert [r.description for r in ordered] == ["Bakery", "Unrelated"]


def test_clear_staging(import_service, owner, fixtures_dir):
    import_service.import_statement(owner, str(fixtures_dir / "sample_statement.csv"))

    assert import_service.clear_staging(owner) == 4
    assert import_service.get_staged_records(owner) == []


def test_batches_are_per_owner(import_service, owner, fixtures_dir):
    path = str(fixtures_dir / "sample_statement.csv")
    import_service.import_statement(owner, path)

    other = import_service.import_statement("bob", path)

    assert len(other.staged) == 4
    assert len(import_service.get_staged_records(owner)) == 4


def test_owner_required(import_service, fixtures_dir):
    with pytest.raises(ValidationError, match="owner"):
        import_service.import_statement("  ", str(fixtures_dir / "sample_statement.csv"))


def test_store_failure_names_phase(import_service, temp_db, owner, fixtures_dir, monkeypatch):
    def broken(owner_id):
        raise StoreError("list staged records", "disk I/O error")

    monkeypatch.setattr(temp_db, "list_staged_records", broken)

    with pytest.raises(StoreError) as excinfo:
        import_service.import_statement(owner, str(fixtures_dir / "sample_statement.csv"))

    assert excinfo.value.operation == "duplicate check"
    assert "disk I/O error" in str(excinfo.value)


def test_import_reports_match_summary(import_service, ledger_service, sample_categories, owner, write_statement):
    ledger_service.create_transaction(
        owner,
        "Acme Ltd Payment",
        Decimal("-12.34"),
        date(2024, 3, 10),
        category_id=sample_categories["Office Supplies"],
    )

    result = import_service.import_statement(
        owner,
        str(write_statement({}, {"Type": "TOPUP", "Description": "Top-Up", "Amount": "50.00"})),
    )

    assert result.match_summary == {
        "total": 2,
        "high_confidence": 0,
        "medium_confidence": 1,
        "low_confidence": 0,
        "matched": 0,
        "potential": 1,
        "unmatched": 1,
        "with_categories": 1,
    }


def test_all_duplicates_reports_empty_match_summary(import_service, owner, fixtures_dir):
    path = str(fixtures_dir / "sample_statement.csv")
    import_service.import_statement(owner, path)

    second = import_service.import_statement(owner, path)

    assert second.match_summary["total"] == 0
