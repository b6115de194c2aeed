"""Sustainability score aggregation.

Combines per-criterion evaluations from the fact extractor with the
category's configured criterion weights.

Key Functions:
    - aggregate: Weighted-average final score, breakdown and tier
    - classify_score: Tier for a 0-100 score
    - parse_evaluation: Validate one criterion value

The final score is always normalized by the weight actually accumulated, so
categories whose weights do not sum to 1.0 still yield a 0-100 score. Weights
are summed as exact decimal fractions: scaling every weight of a category by
the same factor never moves a .5 midpoint across the rounding line.
"""
import math
from fractions import Fraction
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from ecoscore.errors import MalformedFacts
from ecoscore.models.catalog import CategoryCatalog
from ecoscore.models.scoring import (
    CriterionBreakdown,
    CriterionEvaluation,
    SustainabilityResult,
    SustainabilityTier,
)

# Tier lower bounds, best first
TIER_THRESHOLDS = (
    (85, SustainabilityTier.EXCELLENT),
    (70, SustainabilityTier.GOOD),
    (50, SustainabilityTier.ACCEPTABLE),
)


def round_half_up(value: Union[float, Fraction]) -> int:
    """Round .5 away from zero for non-negative scores (62.5 -> 63)."""
    return int(math.floor(Fraction(value) + Fraction(1, 2)))


def exact_weight(weight: float) -> Fraction:
    """Weight as written in the catalog (0.35 -> 7/20), not its binary float."""
    return Fraction(str(weight))


def classify_score(score: int) -> SustainabilityTier:
    """Map a final score to its tier."""
    for threshold, tier in TIER_THRESHOLDS:
        if score >= threshold:
            return tier
    return SustainabilityTier.POOR


def parse_evaluation(criterion: str, value: Any) -> CriterionEvaluation:
    """Validate a raw criterion value.

    Raises:
        MalformedFacts: If value is not a {score, evidence} record
    """
    if isinstance(value, CriterionEvaluation):
        return value
    if not isinstance(value, Mapping):
        raise MalformedFacts(criterion, f"expected an object, got {type(value).__name__}")
    score = value.get("score")
    if isinstance(score, bool):
        raise MalformedFacts(criterion, "score must be a number")
    data = dict(value)
    # Fractional scores (72.5) are rounded like the final score
    if isinstance(score, float) and 0 <= score <= 100:
        data["score"] = round_half_up(score)
    try:
        return CriterionEvaluation.model_validate(data)
    except ValidationError as e:
        raise MalformedFacts(criterion, str(e.errors()[0].get("msg", e))) from e


def aggregate(
    facts: Optional[Mapping[str, Any]],
    category_id: str,
    catalog: CategoryCatalog,
) -> SustainabilityResult:
    """Aggregate criterion evaluations into a sustainability result.

    Args:
        facts: criterion name -> evaluation ({score, evidence}); extra keys
            such as certifications or origin are ignored
        category_id: Category whose weights apply
        catalog: Category catalog

    Returns:
        SustainabilityResult. Missing criteria count as 0; malformed ones
        count as 0 and are listed in ``malformed_criteria``.

    Raises:
        CategoryNotFound: If category_id is not in the catalog
    """
    definition = catalog.get(category_id)
    facts = facts or {}

    breakdown: Dict[str, CriterionBreakdown] = {}
    malformed: List[str] = []
    total_weighted = Fraction(0)
    total_weight = Fraction(0)

    for criterion, config in definition.sustainability_criteria.items():
        score = 0
        if criterion in facts and facts[criterion] is not None:
            try:
                score = parse_evaluation(criterion, facts[criterion]).score
            except MalformedFacts:
                malformed.append(criterion)

        weight = exact_weight(config.weight)
        weighted = score * weight
        breakdown[criterion] = CriterionBreakdown(
            score=score,
            weight=config.weight,
            weighted=float(weighted),
        )
        total_weighted += weighted
        total_weight += weight

    final_score = round_half_up(total_weighted / total_weight) if total_weight > 0 else 0

    return SustainabilityResult(
        category_id=category_id,
        final_score=final_score,
        breakdown=breakdown,
        classification=classify_score(final_score),
        malformed_criteria=malformed,
    )
