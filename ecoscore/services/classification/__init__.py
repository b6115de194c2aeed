"""Product classification service.

This module maps free-text product signals to one catalog category:
- Text normalization and keyword expansion
- Weighted multi-source keyword scoring
- Exclusion filtering and gated winner selection

Key Components:
    - CategoryClassifier: Catalog-driven classifier
    - normalize / expand_keyword: Matching primitives
"""
from ecoscore.services.classification.normalizer import (
    NormalizerConfig,
    normalize,
)
from ecoscore.services.classification.keywords import (
    expand_keyword,
    count_occurrences,
)
from ecoscore.services.classification.scorer import (
    SourceSignal,
    MatchedTerm,
    CategoryScore,
    build_sources,
    score_categories,
)
from ecoscore.services.classification.exclusions import (
    ScoredCategory,
    apply_exclusions,
)
from ecoscore.services.classification.selector import select_winner
from ecoscore.services.classification.classifier import CategoryClassifier

__all__ = [
    "NormalizerConfig",
    "normalize",
    "expand_keyword",
    "count_occurrences",
    "SourceSignal",
    "MatchedTerm",
    "CategoryScore",
    "build_sources",
    "score_categories",
    "ScoredCategory",
    "apply_exclusions",
    "select_winner",
    "CategoryClassifier",
]
