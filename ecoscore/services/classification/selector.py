"""Winner selection with minimum-score and confidence-ratio gates."""
import math
from typing import Sequence

from ecoscore.models.catalog import ValidationThresholds
from ecoscore.models.scoring import (
    ClassificationOutcome,
    ClassificationResult,
    Confidence,
    UnresolvedReason,
)
from ecoscore.services.classification.exclusions import ScoredCategory


def confidence_ratio(first: float, second: float) -> float:
    """first/second, or +inf when the runner-up has no positive score."""
    if second > 0:
        return first / second
    return math.inf


def select_winner(
    scored: Sequence[ScoredCategory],
    thresholds: ValidationThresholds,
) -> ClassificationResult:
    """Pick the winning category.

    Unresolved when there is no category, the top adjusted score is below
    ``minimum_score``, or the top category carries an exclusion match.
    Ties between first and second give ratio 1.0, which is low confidence
    for any ratio threshold above 1.
    """
    # sorted() is stable, so catalog order breaks ties
    ranked = sorted(scored, key=lambda s: s.adjusted_score, reverse=True)
    ranking = [(s.category, s.adjusted_score) for s in ranked]

    if not ranked:
        return ClassificationResult.unresolved(UnresolvedReason.NO_CATEGORIES)

    first = ranked[0]
    if first.adjusted_score < thresholds.minimum_score:
        return ClassificationResult.unresolved(
            UnresolvedReason.INSUFFICIENT_EVIDENCE,
            best_candidate=first.category,
            score=first.adjusted_score,
            ranking=ranking,
        )

    if first.is_excluded:
        return ClassificationResult.unresolved(
            UnresolvedReason.EXCLUDED_WINNER,
            best_candidate=first.category,
            score=first.adjusted_score,
            ranking=ranking,
        )

    second_score = ranked[1].adjusted_score if len(ranked) > 1 else 0.0
    ratio = confidence_ratio(first.adjusted_score, second_score)
    confidence = (
        Confidence.MEDIUM if ratio >= thresholds.confidence_ratio else Confidence.LOW
    )

    return ClassificationResult(
        outcome=ClassificationOutcome.RESOLVED,
        category_id=first.category,
        confidence=confidence,
        score=first.adjusted_score,
        ratio=ratio,
        best_candidate=first.category,
        ranking=ranking,
    )
