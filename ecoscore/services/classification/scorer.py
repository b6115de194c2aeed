"""Weighted keyword scoring of categories.

Each category is scored against several weighted text sources (product name,
page title, description). The score is the sum over sources, keywords and
keyword variants of ``match_count * source.weight``. Pure function of its
inputs: identical sources and catalog always yield identical scores.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ecoscore.models.catalog import CategoryCatalog, CategoryDefinition, SourceWeights
from ecoscore.services.classification.keywords import count_occurrences, expand_keyword
from ecoscore.services.classification.normalizer import NormalizerConfig, normalize

PRODUCT_NAME = "product_name"
PAGE_TITLE = "page_title"
DESCRIPTION = "description"


@dataclass(frozen=True)
class SourceSignal:
    """One weighted text source."""
    name: str
    text: str
    weight: float

    def __post_init__(self):
        if self.weight < 0:
            raise ValueError(f"source weight must be >= 0, got {self.weight}")

    @property
    def is_active(self) -> bool:
        """Zero-weight or empty sources contribute nothing."""
        return self.weight > 0 and bool(self.text and self.text.strip())


@dataclass(frozen=True)
class MatchedTerm:
    """A non-zero contribution to a category score."""
    term: str
    count: int
    points: float
    source: str


@dataclass
class CategoryScore:
    """Raw keyword score of one category."""
    category: str
    raw_score: float = 0.0
    matched_terms: List[MatchedTerm] = field(default_factory=list)


def build_sources(
    product_name: Optional[str],
    page_title: Optional[str] = None,
    description: Optional[str] = None,
    weights: Optional[SourceWeights] = None,
) -> List[SourceSignal]:
    """Build the canonical sources from product signals and a weight table."""
    w = weights or SourceWeights()
    return [
        SourceSignal(PRODUCT_NAME, product_name or "", w.product_name),
        SourceSignal(PAGE_TITLE, page_title or "", w.page_title),
        SourceSignal(DESCRIPTION, description or "", w.description),
    ]


def _category_variants(
    definition: CategoryDefinition,
    normalizer: Optional[NormalizerConfig],
) -> List[str]:
    """Normalized, sorted variants of every keyword of a category.

    Variants are normalized with the same steps as the text so that a
    keyword like "tênis" matches the normalized "tenis".
    """
    variants = set()
    for keyword in definition.keywords:
        for form in expand_keyword(keyword, definition.synonyms_for(keyword)):
            normalized = normalize(form, normalizer)
            if normalized:
                variants.add(normalized)
    return sorted(variants)


def score_category(
    definition: CategoryDefinition,
    normalized_sources: Sequence[Tuple[SourceSignal, str]],
    word_boundary: bool = True,
    normalizer: Optional[NormalizerConfig] = None,
) -> CategoryScore:
    """Score one category against already-normalized sources."""
    score = CategoryScore(category=definition.id)
    variants = _category_variants(definition, normalizer)

    for source, text in normalized_sources:
        for variant in variants:
            count = count_occurrences(text, variant, word_boundary)
            if count == 0:
                continue
            points = count * source.weight
            score.raw_score += points
            score.matched_terms.append(
                MatchedTerm(term=variant, count=count, points=points, source=source.name)
            )

    return score


def score_categories(
    sources: Sequence[SourceSignal],
    catalog: CategoryCatalog,
    word_boundary: bool = True,
    normalizer: Optional[NormalizerConfig] = None,
) -> List[CategoryScore]:
    """Score every catalog category, in catalog order.

    Args:
        sources: Weighted text sources; inactive ones are skipped
        catalog: Category catalog
        word_boundary: Count matches on word boundaries only
        normalizer: Normalization steps (all enabled by default)

    Returns:
        One CategoryScore per category, 0 for categories without hits.
    """
    normalized_sources = [
        (source, normalize(source.text, normalizer))
        for source in sources
        if source.is_active
    ]
    normalized_sources = [(s, text) for s, text in normalized_sources if text]

    return [
        score_category(definition, normalized_sources, word_boundary, normalizer)
        for definition in catalog.definitions()
    ]
