"""Tests for the staged record review workflow."""

from datetime import date
from decimal import Decimal

import pytest

from bankrec.domain.entities import MatchStatus
from bankrec.domain.errors import InvalidTransitionError, NotFoundError
from bankrec.domain.review import can_rescore, check_review_transition


@pytest.fixture
def matched_batch(import_service, ledger_service, owner, write_statement):
    """Stage two records: one potentially matched to the ledger, one unmatched.

    The ledger entry is two days off so the duplicate check keeps the record.
    """
    ledger_id = ledger_service.create_transaction(
        owner, "Acme Ltd Payment", Decimal("-12.34"), date(2024, 3, 3)
    )
    staged = import_service.import_statement(
        owner,
        str(
            write_statement(
                {"Description": "Acme Ltd"},
                {"Type": "TOPUP", "Description": "Salary", "Amount": "2000.00",
                 "Started Date": "2024-01-01 09:00:00"},
            )
        ),
    ).staged
    return {"ledger_id": ledger_id, "matched": staged[0], "unmatched": staged[1]}


def test_accept(review_service, owner, matched_batch):
    record = review_service.accept(owner, matched_batch["matched"].id)

    assert record.match_status is MatchStatus.REVIEWED
    assert record.reviewed is True
    assert record.verified is False
    assert record.notes == "Accepted"


def test_reject_with_note(review_service, owner, matched_batch):
    record = review_service.reject(owner, matched_batch["unmatched"].id, note="Not mine")

    assert record.match_status is MatchStatus.REVIEWED
    assert record.notes == "Not mine"


def test_verify_records_note(review_service, owner, matched_batch):
    assert matched_batch["matched"].match_status is MatchStatus.POTENTIAL

    record = review_service.verify(owner, matched_batch["matched"].id)

    assert record.match_status is MatchStatus.VERIFIED
    assert record.verified is True
    assert record.reviewed is True
    assert record.verification_note == "Verified against manual entry: Acme Ltd Payment"
    assert record.matched_ledger_id == matched_batch["ledger_id"]


def test_verify_requires_match(review_service, owner, matched_batch):
    with pytest.raises(InvalidTransitionError, match="no matched ledger transaction"):
        review_service.verify(owner, matched_batch["unmatched"].id)


def test_decisions_are_final(review_service, owner, matched_batch):
    record_id = matched_batch["matched"].id
    review_service.verify(owner, record_id)

    with pytest.raises(InvalidTransitionError, match="already decided"):
        review_service.accept(owner, record_id)


def test_matching_states_cannot_be_requested(review_service, owner, matched_batch):
    with pytest.raises(InvalidTransitionError, match="set by matching only"):
        review_service.update_record_status(owner, matched_batch["matched"].id, MatchStatus.MATCHED)


def test_unknown_record(review_service, owner):
    with pytest.raises(NotFoundError, match="Staged record 999 not found"):
        review_service.accept(owner, 999)


def test_other_owners_record_is_not_found(review_service, matched_batch):
    with pytest.raises(NotFoundError):
        review_service.accept("bob", matched_batch["matched"].id)


def test_can_rescore(make_staged):
    assert can_rescore(make_staged(match_status=MatchStatus.POTENTIAL))
    assert not can_rescore(make_staged(match_status=MatchStatus.REVIEWED, reviewed=True))
    assert not can_rescore(make_staged(match_status=MatchStatus.VERIFIED, reviewed=True, verified=True))


def test_check_review_transition_allows_potential_to_verified(make_staged):
    record = make_staged(match_status=MatchStatus.POTENTIAL, matched_ledger_id=5)

    check_review_transition(record, MatchStatus.VERIFIED)
