"""Sustainability analysis orchestration.

Wires the pure engine to its impure collaborators:

1. Cache lookup (normalized product name + locale)
2. Category classification (retried on the English translation of the name
   when a translator is wired in), with a recovery policy for unresolved or
   low-confidence outcomes: caller hint (fuzzy) -> fallback category
3. Web search for context (failures degrade to empty context)
4. Fact extraction
5. Aggregation into the final score and tier
6. Alternatives search when the product is not sustainable
7. Cache write

Example:
    analyzer = SustainabilityAnalyzer(catalog, extractor, search_client)
    report = await analyzer.analyze(ProductAnalysisRequest(product_name="..."))
"""
from enum import Enum
from typing import List, Optional, Tuple

import structlog
from pydantic import BaseModel, Field, field_validator
from rapidfuzz import fuzz, utils

from ecoscore.config import engine_settings
from ecoscore.errors import SearchProviderError, UnresolvedCategory
from ecoscore.models.catalog import CategoryCatalog, CategoryDefinition
from ecoscore.models.scoring import ClassificationResult, Confidence, SustainabilityResult
from ecoscore.services.aggregation import aggregate
from ecoscore.services.cache import ResultCache, build_cache_key
from ecoscore.services.classification import CategoryClassifier
from ecoscore.services.llm.fact_extractor import FactExtractor
from ecoscore.services.llm.translator import ProductNameTranslator
from ecoscore.services.search import (
    SearchOptions,
    SearchProvider,
    SearchResult,
    build_alternative_queries,
    build_search_context,
    extract_product_type,
    select_alternatives,
)

logger = structlog.get_logger(__name__)


class CategorySource(str, Enum):
    """How the category used for scoring was chosen."""
    CLASSIFIER = "classifier"
    HINT = "hint"
    FALLBACK = "fallback"


class ProductAnalysisRequest(BaseModel):
    """Product signals sent by the browser extension."""
    product_name: str = Field(..., min_length=1, max_length=500)
    page_title: Optional[str] = None
    description: Optional[str] = None
    page_url: Optional[str] = None
    category_hint: Optional[str] = Field(
        default=None,
        description="Breadcrumb or shop category, used only when classification is unresolved"
    )
    locale: str = "en-US"
    country: str = "US"

    @field_validator("product_name")
    @classmethod
    def validate_product_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("product_name must not be blank")
        return v


class AnalysisReport(BaseModel):
    """Full analysis payload returned to the caller and cached."""
    product_name: str
    category_id: str
    category_name: str
    category_source: CategorySource
    confidence: Optional[Confidence] = None
    sustainability: SustainabilityResult
    is_sustainable: bool
    certifications: List[str] = Field(default_factory=list)
    origin: Optional[str] = None
    alternatives: List[SearchResult] = Field(default_factory=list)
    cached: bool = False


def match_category_hint(
    hint: Optional[str],
    catalog: CategoryCatalog,
    threshold: float,
) -> Optional[str]:
    """Fuzzy-match a caller category hint against category ids and names.

    Returns:
        Best category id scoring >= threshold, or None
    """
    if not hint or not hint.strip():
        return None

    best: Optional[Tuple[str, float]] = None
    for definition in catalog.definitions():
        score = max(
            fuzz.token_set_ratio(hint, definition.id.replace("_", " "), processor=utils.default_process),
            fuzz.token_set_ratio(hint, definition.name, processor=utils.default_process),
        )
        if score >= threshold and (best is None or score > best[1]):
            best = (definition.id, score)

    return best[0] if best else None


class SustainabilityAnalyzer:
    """Async orchestrator around the deterministic engine.

    Attributes:
        catalog: Category catalog (shared, read-only)
        classifier: Category classifier built on the catalog
        fact_extractor: FactExtractor collaborator
        search_provider: Optional SearchProvider collaborator
        cache: Optional ResultCache collaborator
        translator: Optional ProductNameTranslator for non-English names
    """

    def __init__(
        self,
        catalog: CategoryCatalog,
        fact_extractor: FactExtractor,
        search_provider: Optional[SearchProvider] = None,
        cache: Optional[ResultCache] = None,
        classifier: Optional[CategoryClassifier] = None,
        settings=None,
        translator: Optional[ProductNameTranslator] = None,
    ):
        self.settings = settings or engine_settings
        self.catalog = catalog
        self.classifier = classifier or CategoryClassifier(
            catalog,
            word_boundary=self.settings.word_boundary_matching,
        )
        self.fact_extractor = fact_extractor
        self.search_provider = search_provider
        self.cache = cache
        self.translator = translator
        self._log = logger.bind(component="SustainabilityAnalyzer")

    def resolve_category(
        self,
        classification: ClassificationResult,
        category_hint: Optional[str] = None,
    ) -> Tuple[CategoryDefinition, CategorySource]:
        """Apply the recovery policy to a classification result.

        Low confidence is handled exactly like an unresolved outcome.

        Raises:
            UnresolvedCategory: If neither hint nor fallback category applies
        """
        try:
            category_id = classification.require_confident()
            return self.catalog.get(category_id), CategorySource.CLASSIFIER
        except UnresolvedCategory as e:
            unresolved = e

        hinted = match_category_hint(
            category_hint,
            self.catalog,
            self.settings.category_hint_threshold,
        )
        if hinted:
            return self.catalog.get(hinted), CategorySource.HINT

        fallback = self.settings.fallback_category
        if fallback and self.catalog.has(fallback):
            return self.catalog.get(fallback), CategorySource.FALLBACK

        raise unresolved

    async def _search_context(self, request: ProductAnalysisRequest, category: CategoryDefinition) -> str:
        if self.search_provider is None:
            return ""
        query = f"{request.product_name} sustainability materials certifications {category.name}"
        try:
            response = await self.search_provider.search(query)
        except SearchProviderError as e:
            self._log.warning("search_failed", product=request.product_name[:50], error=str(e))
            return ""
        return build_search_context(response.results)

    async def _find_alternatives(
        self,
        request: ProductAnalysisRequest,
        category: CategoryDefinition,
        english_name: Optional[str] = None,
    ) -> List[SearchResult]:
        if self.search_provider is None or self.settings.max_alternatives == 0:
            return []

        product_type = extract_product_type(english_name or request.product_name)
        candidates: List[SearchResult] = []
        for query in build_alternative_queries(product_type, category, request.country):
            try:
                response = await self.search_provider.search(query, SearchOptions(max_results=20))
            except SearchProviderError as e:
                self._log.warning("alternatives_query_failed", query=query[:80], error=str(e))
                continue
            candidates.extend(response.results)
            if len(select_alternatives(candidates, self.settings.max_alternatives, request.page_url)) >= 5:
                break

        return select_alternatives(candidates, self.settings.max_alternatives, request.page_url)

    async def analyze(self, request: ProductAnalysisRequest) -> AnalysisReport:
        """Analyze one product end to end.

        Raises:
            UnresolvedCategory: If no category can be chosen
            FactExtractionError: If the fact extractor fails
        """
        log = self._log.bind(product=request.product_name[:50], locale=request.locale)
        cache_key = build_cache_key(request.product_name, request.locale)

        if self.cache is not None:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                log.debug("analysis_cache_hit", key=cache_key)
                return AnalysisReport.model_validate({**cached, "cached": True})

        english_name = request.product_name
        if self.translator is not None:
            english_name = await self.translator.translate(request.product_name)

        classification = self.classifier.classify(
            request.product_name,
            request.page_title,
            request.description,
        )
        if not classification.is_confident and english_name != request.product_name:
            translated = self.classifier.classify(
                english_name,
                request.page_title,
                request.description,
            )
            if translated.is_confident:
                log.debug("classified_by_translation", translated=english_name[:50])
                classification = translated

        category, source = self.resolve_category(classification, request.category_hint)
        log.info(
            "category_resolved",
            category=category.id,
            source=source.value,
            confidence=classification.confidence.value if classification.confidence else None,
        )

        context = await self._search_context(request, category)
        facts = await self.fact_extractor.extract(request.product_name, category, context)

        result = aggregate(facts.criteria, category.id, self.catalog)
        for criterion in result.malformed_criteria:
            log.warning(
                "malformed_criterion",
                category=category.id,
                criterion=criterion,
                value=repr(facts.criteria.get(criterion))[:200],
            )

        is_sustainable = result.final_score >= self.settings.min_sustainable_score
        alternatives = [] if is_sustainable else await self._find_alternatives(request, category, english_name)

        report = AnalysisReport(
            product_name=request.product_name,
            category_id=category.id,
            category_name=category.name,
            category_source=source,
            confidence=classification.confidence if source == CategorySource.CLASSIFIER else None,
            sustainability=result,
            is_sustainable=is_sustainable,
            certifications=facts.certifications,
            origin=facts.origin,
            alternatives=alternatives,
        )
        log.info(
            "analysis_completed",
            category=category.id,
            final_score=result.final_score,
            classification=result.classification.value,
            alternatives=len(alternatives),
        )

        if self.cache is not None:
            await self.cache.set(
                cache_key,
                report.model_dump(mode="json", exclude={"cached"}),
                self.settings.cache_ttl_seconds,
            )

        return report
