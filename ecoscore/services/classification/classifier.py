"""Product category classifier driven by the category catalog.

Pipeline:
1. Score every category against weighted sources (name, title, description)
2. Penalize categories whose exclusion terms appear in the product name
3. Select the winner behind minimum-score and confidence-ratio gates

Example:
    classifier = CategoryClassifier(get_catalog())
    result = classifier.classify(
        "Giuseppe Zanotti Slim 2.0 Black",
        page_title="Giuseppe Zanotti Slim 2.0 Black Heels - Amazon.com",
    )
    # result.category_id = "textiles_clothing"
    # result.confidence = Confidence.MEDIUM
"""
from typing import List, Optional

import structlog

from ecoscore.models.catalog import CategoryCatalog, ScoringThresholds
from ecoscore.models.scoring import ClassificationResult
from ecoscore.services.classification.exclusions import ScoredCategory, apply_exclusions
from ecoscore.services.classification.normalizer import NormalizerConfig
from ecoscore.services.classification.scorer import build_sources, score_categories
from ecoscore.services.classification.selector import select_winner

logger = structlog.get_logger(__name__)


class CategoryClassifier:
    """Deterministic keyword-based category classifier.

    Holds only read-only configuration, so one instance can serve
    concurrent requests.

    Attributes:
        catalog: Category catalog
        thresholds: Source weights and validation thresholds
        word_boundary: Count keyword hits on word boundaries only
        normalizer_config: Text normalization steps
    """

    def __init__(
        self,
        catalog: CategoryCatalog,
        thresholds: Optional[ScoringThresholds] = None,
        word_boundary: bool = True,
        normalizer_config: Optional[NormalizerConfig] = None,
    ):
        self.catalog = catalog
        self.thresholds = thresholds or catalog.scoring
        self.word_boundary = word_boundary
        self.normalizer_config = normalizer_config
        self._log = logger.bind(component="CategoryClassifier")

    def rank(
        self,
        product_name: str,
        page_title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> List[ScoredCategory]:
        """Score and exclusion-filter every category, in catalog order."""
        sources = build_sources(
            product_name,
            page_title,
            description,
            self.thresholds.source_weights,
        )
        scores = score_categories(
            sources,
            self.catalog,
            word_boundary=self.word_boundary,
            normalizer=self.normalizer_config,
        )
        return apply_exclusions(
            scores,
            product_name,
            self.catalog,
            penalty=self.thresholds.validation_thresholds.exclusion_penalty,
            word_boundary=self.word_boundary,
            normalizer=self.normalizer_config,
        )

    def classify(
        self,
        product_name: str,
        page_title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ClassificationResult:
        """Classify a product into exactly one category or none.

        Args:
            product_name: Product name (also the exclusion signal)
            page_title: Optional page title
            description: Optional product description

        Returns:
            ClassificationResult; callers must treat low confidence as
            unresolved before using the category to pick weights.
        """
        scored = self.rank(product_name, page_title, description)
        result = select_winner(scored, self.thresholds.validation_thresholds)

        excluded = [s.category for s in scored if s.is_excluded]
        if result.is_resolved:
            self._log.debug(
                "category_classified",
                product=(product_name or "")[:50],
                category=result.category_id,
                confidence=result.confidence.value,
                score=result.score,
                excluded=excluded,
            )
        else:
            self._log.debug(
                "classification_unresolved",
                product=(product_name or "")[:50],
                reason=result.reason.value,
                best_candidate=result.best_candidate,
                score=result.score,
                excluded=excluded,
            )
        return result

    def get_all_categories(self) -> List[str]:
        """Get list of all known category keys."""
        return self.catalog.category_ids()
