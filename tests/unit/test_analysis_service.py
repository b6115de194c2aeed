"""Unit tests for SustainabilityAnalyzer.

Tests cover:
- Classifier path end to end
- Category recovery: caller hint, fallback category, failure
- Search failures degrading to empty context
- Alternatives for non-sustainable products
- Result caching
- Classification retry on the translated product name
"""
from unittest.mock import AsyncMock

import pytest

from ecoscore.config import EngineSettings
from ecoscore.errors import SearchProviderError, UnresolvedCategory
from ecoscore.models.scoring import Confidence, SustainabilityTier
from ecoscore.services.analysis import (
    AnalysisReport,
    CategorySource,
    ProductAnalysisRequest,
    SustainabilityAnalyzer,
    match_category_hint,
)
from ecoscore.services.llm import LLMProductNameTranslator, MockLLMClient, ProductFacts
from ecoscore.services.search import SearchResponse, SearchResult

LISTING = SearchResult(
    title="Organic Cotton Running Shoes",
    url="https://www.amazon.com/dp/B0ECO1",
    snippet="Recycled sole, GOTS cotton upper",
)


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings(
        fallback_category="general",
        min_sustainable_score=70,
        category_hint_threshold=80.0,
        max_alternatives=8,
        cache_ttl_seconds=3600,
    )


@pytest.fixture
def fact_extractor() -> AsyncMock:
    """Fact extractor returning good textile facts."""
    extractor = AsyncMock()
    extractor.extract.return_value = ProductFacts(
        criteria={
            "materials": {"score": 80, "evidence": ["organic cotton"]},
            "durability": {"score": 90, "evidence": ["2 year warranty"]},
        },
        certifications=["GOTS"],
        origin="Portugal",
    )
    return extractor


@pytest.fixture
def search_provider() -> AsyncMock:
    provider = AsyncMock()
    provider.search.return_value = SearchResponse(query="q", results=[LISTING])
    return provider


@pytest.fixture
def cache() -> AsyncMock:
    cache = AsyncMock()
    cache.get.return_value = None
    return cache


@pytest.fixture
def analyzer(catalog, fact_extractor, search_provider, cache, settings) -> SustainabilityAnalyzer:
    return SustainabilityAnalyzer(
        catalog,
        fact_extractor,
        search_provider=search_provider,
        cache=cache,
        settings=settings,
    )


class TestAnalyze:
    """Test the classifier path."""

    @pytest.mark.asyncio
    async def test_classified_product(self, analyzer, fact_extractor, search_provider):
        report = await analyzer.analyze(ProductAnalysisRequest(product_name="Running Shoes"))

        assert report.category_id == "textiles"
        assert report.category_source == CategorySource.CLASSIFIER
        assert report.confidence == Confidence.MEDIUM
        assert report.sustainability.final_score == 85
        assert report.sustainability.classification == SustainabilityTier.EXCELLENT
        assert report.is_sustainable
        assert report.alternatives == []
        assert report.certifications == ["GOTS"]
        assert report.origin == "Portugal"
        assert not report.cached

        search_provider.search.assert_awaited_once()
        product_name, category, context = fact_extractor.extract.await_args.args
        assert product_name == "Running Shoes"
        assert category.id == "textiles"
        assert "[1] Organic Cotton Running Shoes" in context

    @pytest.mark.asyncio
    async def test_report_is_cached(self, analyzer, cache):
        await analyzer.analyze(ProductAnalysisRequest(product_name="Running Shoes", locale="pt-BR"))

        key, payload, ttl = cache.set.await_args.args
        assert key == "analysis:running shoes:pt-br"
        assert ttl == 3600
        assert payload["category_id"] == "textiles"
        assert "cached" not in payload

    @pytest.mark.asyncio
    async def test_cache_hit_skips_analysis(self, analyzer, cache, catalog, settings):
        await analyzer.analyze(ProductAnalysisRequest(product_name="Running Shoes"))
        payload = cache.set.await_args.args[1]

        cached_cache = AsyncMock()
        cached_cache.get.return_value = payload
        extractor = AsyncMock()
        cached_analyzer = SustainabilityAnalyzer(catalog, extractor, cache=cached_cache, settings=settings)

        report = await cached_analyzer.analyze(ProductAnalysisRequest(product_name="running shoes!"))

        assert isinstance(report, AnalysisReport)
        assert report.cached
        assert report.sustainability.final_score == 85
        extractor.extract.assert_not_awaited()
        cached_cache.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_criteria_are_reported(self, analyzer, fact_extractor):
        fact_extractor.extract.return_value = ProductFacts(
            criteria={"materials": {"score": 80}, "durability": "very durable"}
        )

        report = await analyzer.analyze(ProductAnalysisRequest(product_name="Running Shoes"))

        assert report.sustainability.malformed_criteria == ["durability"]
        assert report.sustainability.final_score == 40

    def test_blank_product_name_rejected(self):
        with pytest.raises(ValueError):
            ProductAnalysisRequest(product_name="   ")


class TestCategoryRecovery:
    """Test the recovery policy for unresolved and low-confidence outcomes."""

    @pytest.mark.asyncio
    async def test_category_hint(self, analyzer, fact_extractor):
        request = ProductAnalysisRequest(product_name="Mystery Item", category_hint="Electronics > Wearables")

        report = await analyzer.analyze(request)

        assert report.category_id == "electronics"
        assert report.category_source == CategorySource.HINT
        assert report.confidence is None

    @pytest.mark.asyncio
    async def test_fallback_category(self, analyzer):
        report = await analyzer.analyze(ProductAnalysisRequest(product_name="Mystery Item"))

        assert report.category_id == "general"
        assert report.category_source == CategorySource.FALLBACK

    @pytest.mark.asyncio
    async def test_low_confidence_uses_fallback(self, analyzer):
        """A tie between textiles and electronics is not trusted."""
        report = await analyzer.analyze(ProductAnalysisRequest(product_name="Phone Shirt"))

        assert report.category_id == "general"
        assert report.category_source == CategorySource.FALLBACK

    @pytest.mark.asyncio
    async def test_unresolved_without_fallback(self, catalog, fact_extractor):
        settings = EngineSettings(fallback_category=None)
        analyzer = SustainabilityAnalyzer(catalog, fact_extractor, settings=settings)

        with pytest.raises(UnresolvedCategory) as exc_info:
            await analyzer.analyze(ProductAnalysisRequest(product_name="Mystery Item"))

        assert exc_info.value.reason == "insufficient_evidence"
        fact_extractor.extract.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fallback_not_in_catalog(self, catalog, fact_extractor):
        settings = EngineSettings(fallback_category="missing")
        analyzer = SustainabilityAnalyzer(catalog, fact_extractor, settings=settings)

        with pytest.raises(UnresolvedCategory):
            await analyzer.analyze(ProductAnalysisRequest(product_name="Mystery Item"))


class TestMatchCategoryHint:
    def test_matches_category_name(self, catalog):
        assert match_category_hint("Furniture", catalog, 80.0) == "furniture"

    def test_matches_category_id(self, catalog):
        assert match_category_hint("textiles", catalog, 80.0) == "textiles"

    @pytest.mark.parametrize("hint", [None, "", "   ", "Garden Tools"])
    def test_no_match(self, catalog, hint):
        assert match_category_hint(hint, catalog, 80.0) is None


class TestCollaboratorFailures:
    @pytest.mark.asyncio
    async def test_search_failure_gives_empty_context(self, analyzer, search_provider, fact_extractor):
        search_provider.search.side_effect = SearchProviderError("Search API returned HTTP 500")

        report = await analyzer.analyze(ProductAnalysisRequest(product_name="Running Shoes"))

        assert report.category_id == "textiles"
        assert fact_extractor.extract.await_args.args[2] == ""

    @pytest.mark.asyncio
    async def test_without_search_provider(self, catalog, fact_extractor, settings):
        analyzer = SustainabilityAnalyzer(catalog, fact_extractor, settings=settings)

        report = await analyzer.analyze(ProductAnalysisRequest(product_name="Running Shoes"))

        assert fact_extractor.extract.await_args.args[2] == ""
        assert report.alternatives == []


class TestAlternatives:
    @pytest.mark.asyncio
    async def test_alternatives_for_unsustainable_product(self, analyzer, fact_extractor, search_provider):
        fact_extractor.extract.return_value = ProductFacts(
            criteria={"materials": {"score": 20}, "durability": {"score": 30}}
        )

        report = await analyzer.analyze(ProductAnalysisRequest(product_name="Running Shoes"))

        assert not report.is_sustainable
        assert report.sustainability.final_score == 25
        assert [a.url for a in report.alternatives] == [LISTING.url]
        # context search + three or four alternative queries
        assert search_provider.search.await_count >= 4

    @pytest.mark.asyncio
    async def test_current_page_is_not_an_alternative(self, analyzer, fact_extractor):
        fact_extractor.extract.return_value = ProductFacts(criteria={})
        request = ProductAnalysisRequest(product_name="Running Shoes", page_url=LISTING.url)

        report = await analyzer.analyze(request)

        assert report.alternatives == []


class TestTranslation:
    """Non-English names are retried in English before recovery applies."""

    @pytest.fixture
    def translator(self) -> LLMProductNameTranslator:
        return LLMProductNameTranslator(
            MockLLMClient(responses={"camiseta": "Blue Organic Shirt"})
        )

    @pytest.mark.asyncio
    async def test_translated_name_classifies(
        self, catalog, fact_extractor, search_provider, settings, translator
    ):
        analyzer = SustainabilityAnalyzer(
            catalog, fact_extractor, search_provider=search_provider,
            settings=settings, translator=translator,
        )

        report = await analyzer.analyze(ProductAnalysisRequest(product_name="Camiseta Orgânica Azul"))

        assert report.category_id == "textiles"
        assert report.category_source == CategorySource.CLASSIFIER
        assert report.confidence == Confidence.MEDIUM
        assert report.product_name == "Camiseta Orgânica Azul"
        assert translator.client.calls[0]["prompt"] == 'Translate: "Camiseta Orgânica Azul"'

    @pytest.mark.asyncio
    async def test_alternatives_use_translated_product_type(
        self, catalog, fact_extractor, search_provider, settings, translator
    ):
        fact_extractor.extract.return_value = ProductFacts(criteria={"materials": {"score": 10}})
        analyzer = SustainabilityAnalyzer(
            catalog, fact_extractor, search_provider=search_provider,
            settings=settings, translator=translator,
        )

        await analyzer.analyze(ProductAnalysisRequest(product_name="Camiseta Orgânica Azul"))

        queries = [c.args[0] for c in search_provider.search.await_args_list[1:]]
        assert any("Organic Shirt" in q for q in queries)
        assert not any("Azul" in q for q in queries)

    @pytest.mark.asyncio
    async def test_confident_original_name_is_kept(self, catalog, fact_extractor, settings):
        """A translation that classifies elsewhere never overrides a confident result."""
        translator = AsyncMock()
        translator.translate.return_value = "Smart Watch"
        analyzer = SustainabilityAnalyzer(catalog, fact_extractor, settings=settings, translator=translator)

        report = await analyzer.analyze(ProductAnalysisRequest(product_name="Sapato shoes"))

        assert report.category_id == "textiles"

    @pytest.mark.asyncio
    async def test_unhelpful_translation_falls_back(self, catalog, fact_extractor, settings):
        translator = AsyncMock()
        translator.translate.return_value = "Mystery Gadget"
        analyzer = SustainabilityAnalyzer(catalog, fact_extractor, settings=settings, translator=translator)

        report = await analyzer.analyze(ProductAnalysisRequest(product_name="Objeto Misterioso"))

        assert report.category_source == CategorySource.FALLBACK

    @pytest.mark.asyncio
    async def test_cache_key_uses_original_name(
        self, catalog, fact_extractor, cache, settings, translator
    ):
        analyzer = SustainabilityAnalyzer(
            catalog, fact_extractor, cache=cache, settings=settings, translator=translator,
        )

        await analyzer.analyze(ProductAnalysisRequest(product_name="Camiseta Orgânica Azul"))

        assert cache.set.await_args.args[0] == "analysis:camiseta organica azul:en-us"
