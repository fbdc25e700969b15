"""Confidence-scored matching of staged records against the ledger."""

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from decimal import Decimal
from typing import Optional, Sequence

from bankrec.domain.entities import (
    CategorySuggestion,
    Direction,
    LedgerTransaction,
    MatchConfidence,
    MatchResult,
    MatchStatus,
    StagedImportRecord,
)
from bankrec.utils.logging_config import get_logger
from bankrec.utils.text import jaccard_similarity

logger = get_logger(__name__)

AMOUNT_WEIGHT = 0.4
DATE_WEIGHT = 0.3
DESCRIPTION_WEIGHT = 0.2
DIRECTION_WEIGHT = 0.1

EXACT_AMOUNT_TOLERANCE = Decimal("0.01")
CLOSE_AMOUNT_TOLERANCE = Decimal("1.00")
DATE_TOLERANCE_DAYS = 2
DESCRIPTION_SIMILARITY_THRESHOLD = 0.6

HIGH_CONFIDENCE_THRESHOLD = 0.9
MEDIUM_CONFIDENCE_THRESHOLD = 0.6

_CONFIDENCE_ORDER = {
    MatchConfidence.HIGH: 3,
    MatchConfidence.MEDIUM: 2,
    MatchConfidence.LOW: 1,
    None: 0,
}


class CategorySuggester(ABC):
    """Source of category guesses learned from past descriptions."""

    @abstractmethod
    def suggest(self, description: str) -> list[CategorySuggestion]:
        """Return candidate categories, best first."""
        pass


class NullCategorySuggester(CategorySuggester):
    """Suggester with no opinion."""

    def suggest(self, description: str) -> list[CategorySuggestion]:
        return []


def score_match(
    record: StagedImportRecord, existing: LedgerTransaction
) -> tuple[float, list[str]]:
    """Weighted similarity of a staged record and a ledger transaction.

    Returns:
        Score in [0, 1] and the reasons for each factor that contributed
    """
    score = 0.0
    reasons: list[str] = []

    amount_diff = abs(abs(record.amount) - abs(existing.amount))
    if amount_diff < EXACT_AMOUNT_TOLERANCE:
        score += AMOUNT_WEIGHT
        reasons.append("Exact amount match")
    elif amount_diff < CLOSE_AMOUNT_TOLERANCE:
        score += AMOUNT_WEIGHT / 2
        reasons.append("Similar amount")

    days = abs((record.started_at.date() - existing.occurred_on).days)
    if days == 0:
        score += DATE_WEIGHT
        reasons.append("Same date")
    elif days <= DATE_TOLERANCE_DAYS:
        score += DATE_WEIGHT / 2
        reasons.append(f"Date within {days} day{'s' if days != 1 else ''}")

    similarity = jaccard_similarity(record.description, existing.description)
    if similarity >= DESCRIPTION_SIMILARITY_THRESHOLD:
        score += DESCRIPTION_WEIGHT * similarity
        reasons.append(f"Description similarity: {round(similarity * 100)}%")

    if Direction.from_amount(record.amount) is existing.direction:
        score += DIRECTION_WEIGHT
        reasons.append("Transaction type matches")

    # Float sums like 0.7 + 0.2 land just under the tier thresholds
    return min(round(score, 6), 1.0), reasons


def confidence_for(score: float) -> MatchConfidence:
    if score >= HIGH_CONFIDENCE_THRESHOLD:
        return MatchConfidence.HIGH
    if score >= MEDIUM_CONFIDENCE_THRESHOLD:
        return MatchConfidence.MEDIUM
    return MatchConfidence.LOW


def status_for(score: float) -> MatchStatus:
    if score == 0:
        return MatchStatus.UNMATCHED
    if confidence_for(score) is MatchConfidence.HIGH:
        return MatchStatus.MATCHED
    return MatchStatus.POTENTIAL


class MatchingEngine:
    """Finds the best ledger match for each staged record.

    Scoring is pure, so it may be spread across worker threads. The
    category suggester is consulted afterwards on the calling thread.
    """

    def __init__(
        self,
        suggester: Optional[CategorySuggester] = None,
        max_workers: int = 1,
    ):
        """Initialize matching engine.

        Args:
            suggester: Category suggester consulted for non-HIGH matches
            max_workers: Threads used for scoring; 1 scores inline
        """
        self.suggester = suggester or NullCategorySuggester()
        self.max_workers = max_workers

    def find_best_match(
        self, record: StagedImportRecord, ledger: Sequence[LedgerTransaction]
    ) -> MatchResult:
        """Score a record against every ledger transaction and keep the best.

        Ties keep the first transaction encountered. A record with no
        positive score is unmatched and carries no confidence.
        """
        best: Optional[LedgerTransaction] = None
        best_score = 0.0
        best_reasons: list[str] = []

        for existing in ledger:
            score, reasons = score_match(record, existing)
            if score > best_score:
                best, best_score, best_reasons = existing, score, reasons

        if best is None:
            return MatchResult(score=0.0, confidence=None, status=MatchStatus.UNMATCHED)

        return MatchResult(
            score=best_score,
            confidence=confidence_for(best_score),
            status=status_for(best_score),
            reasons=tuple(best_reasons),
            ledger_id=best.id,
            suggested_category_id=best.category_id,
        )

    def apply_suggestion(self, record: StagedImportRecord, result: MatchResult) -> MatchResult:
        """Prefer the suggester's top category when the match is not HIGH."""
        if result.confidence is MatchConfidence.HIGH:
            return result

        suggestions = self.suggester.suggest(record.description)
        if not suggestions:
            return result

        top = suggestions[0]
        logger.debug(
            "Pattern suggestion for %r: category %s (%.2f)",
            record.description,
            top.category_id,
            top.confidence,
        )
        return replace(
            result,
            suggested_category_id=top.category_id,
            reasons=result.reasons + (f"Pattern match: {round(top.confidence * 100)}% confidence",),
        )

    def match_all(
        self, records: Sequence[StagedImportRecord], ledger: Sequence[LedgerTransaction]
    ) -> list[MatchResult]:
        """Match every record, returning results in record order."""
        ledger = list(ledger)
        if self.max_workers > 1 and len(records) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(lambda r: self.find_best_match(r, ledger), records))
        else:
            results = [self.find_best_match(record, ledger) for record in records]

        return [
            self.apply_suggestion(record, result) for record, result in zip(records, results)
        ]

    @staticmethod
    def summarize(results: Sequence[MatchResult]) -> dict[str, int]:
        """Count results by confidence tier and status."""
        stats = {
            "total": len(results),
            "high_confidence": 0,
            "medium_confidence": 0,
            "low_confidence": 0,
            "matched": 0,
            "potential": 0,
            "unmatched": 0,
            "with_categories": 0,
        }
        for result in results:
            if result.confidence is not None:
                stats[f"{result.confidence.value.lower()}_confidence"] += 1
            if result.status.value in stats:
                stats[result.status.value] += 1
            if result.suggested_category_id is not None:
                stats["with_categories"] += 1
        return stats

    @staticmethod
    def sort_matches(records: Sequence[StagedImportRecord]) -> list[StagedImportRecord]:
        """Order records for review: confidence, then reason count, newest first."""
        return sorted(
            records,
            key=lambda r: (
                -_CONFIDENCE_ORDER[r.match_confidence],
                -len(r.match_reasons),
                -r.started_at.timestamp(),
            ),
        )
