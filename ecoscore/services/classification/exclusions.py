"""Exclusion filter for category scores.

A category whose exclusion keywords appear in the primary signal (usually
the product name) receives a single configured penalty and records the
matched exclusions. The winner selector additionally vetoes any category
with a recorded exclusion, whatever its numeric score.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ecoscore.models.catalog import CategoryCatalog, CategoryDefinition
from ecoscore.services.classification.keywords import count_occurrences, expand_keyword
from ecoscore.services.classification.normalizer import NormalizerConfig, normalize
from ecoscore.services.classification.scorer import CategoryScore, MatchedTerm


@dataclass
class ScoredCategory:
    """Category score after exclusion filtering."""
    category: str
    raw_score: float
    adjusted_score: float
    matched_terms: List[MatchedTerm] = field(default_factory=list)
    exclusions_found: List[str] = field(default_factory=list)

    @property
    def is_excluded(self) -> bool:
        return len(self.exclusions_found) > 0


def find_exclusions(
    definition: CategoryDefinition,
    normalized_text: str,
    word_boundary: bool = True,
    normalizer: Optional[NormalizerConfig] = None,
) -> List[str]:
    """Configured exclusion keywords of a category found in the text."""
    found = []
    if not normalized_text:
        return found
    for keyword in definition.exclusion_keywords:
        for form in sorted(expand_keyword(keyword)):
            variant = normalize(form, normalizer)
            if variant and count_occurrences(normalized_text, variant, word_boundary):
                found.append(keyword)
                break
    return found


def apply_exclusions(
    scores: Sequence[CategoryScore],
    primary_text: Optional[str],
    catalog: CategoryCatalog,
    penalty: float,
    word_boundary: bool = True,
    normalizer: Optional[NormalizerConfig] = None,
) -> List[ScoredCategory]:
    """Apply exclusion penalties to category scores.

    Args:
        scores: Raw category scores
        primary_text: Text checked for exclusion terms (product name)
        catalog: Category catalog
        penalty: Non-positive constant added once per excluded category
        word_boundary: Match exclusions on word boundaries only
        normalizer: Normalization steps

    Returns:
        ScoredCategory per input score, same order.

    Raises:
        CategoryNotFound: If a score refers to a category not in the catalog
        ValueError: If penalty is positive
    """
    if penalty > 0:
        raise ValueError(f"exclusion penalty must be <= 0, got {penalty}")

    normalized_primary = normalize(primary_text, normalizer)
    filtered = []

    for score in scores:
        definition = catalog.get(score.category)
        exclusions = find_exclusions(definition, normalized_primary, word_boundary, normalizer)
        adjusted = score.raw_score + (penalty if exclusions else 0.0)
        filtered.append(
            ScoredCategory(
                category=score.category,
                raw_score=score.raw_score,
                adjusted_score=adjusted,
                matched_terms=list(score.matched_terms),
                exclusions_found=exclusions,
            )
        )

    return filtered
