"""Command line entry point for the classification and scoring engine.

Usage:
    ecoscore classify "Giuseppe Zanotti Slim 2.0 Black" --title "... Heels - Amazon.com"
    ecoscore score electronics facts.json
    ecoscore categories [electronics]
    ecoscore analyze "Organic Cotton T-Shirt" --country BR
    ecoscore verify-claims "Organic Cotton T-Shirt" "organic cotton" "carbon neutral"
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ecoscore.config import engine_settings, redis_settings
from ecoscore.errors import CatalogError, CategoryNotFound, CollaboratorError, UnresolvedCategory
from ecoscore.services.aggregation import aggregate
from ecoscore.services.analysis import ProductAnalysisRequest, SustainabilityAnalyzer
from ecoscore.services.cache import RedisResultCache
from ecoscore.services.catalog import get_catalog, load_catalog
from ecoscore.services.classification import CategoryClassifier
from ecoscore.services.llm import LLMFactExtractor, LLMProductNameTranslator, get_llm_client
from ecoscore.services.search import TavilySearchClient, verify_claims

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_UNRESOLVED = 2
EXIT_COLLABORATOR = 3


def _print_json(data: Dict[str, Any]) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _load_facts(source: str) -> Dict[str, Any]:
    """Read facts JSON from a file path or '-' for stdin."""
    raw = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    facts = json.loads(raw)
    if not isinstance(facts, dict):
        raise ValueError("facts document must be a JSON object")
    return facts


def cmd_classify(args: argparse.Namespace) -> int:
    catalog = load_catalog(args.catalog) if args.catalog else get_catalog()
    classifier = CategoryClassifier(catalog, word_boundary=not args.substring)
    result = classifier.classify(args.product_name, args.title, args.description)

    output = result.model_dump(mode="json")
    if args.explain:
        output["candidates"] = [
            {
                "category": s.category,
                "raw_score": s.raw_score,
                "adjusted_score": s.adjusted_score,
                "exclusions_found": s.exclusions_found,
                "matched_terms": [
                    {"term": t.term, "source": t.source, "count": t.count, "points": t.points}
                    for t in s.matched_terms
                ],
            }
            for s in classifier.rank(args.product_name, args.title, args.description)
            if s.matched_terms or s.exclusions_found
        ]
    _print_json(output)

    result.require_confident()
    return EXIT_OK


def cmd_score(args: argparse.Namespace) -> int:
    catalog = load_catalog(args.catalog) if args.catalog else get_catalog()
    facts = _load_facts(args.facts)
    result = aggregate(facts, args.category, catalog)
    _print_json(result.model_dump(mode="json"))
    return EXIT_OK


def cmd_categories(args: argparse.Namespace) -> int:
    catalog = load_catalog(args.catalog) if args.catalog else get_catalog()
    if args.category_id:
        _print_json(catalog.get(args.category_id).model_dump(mode="json"))
        return EXIT_OK

    for definition in catalog.definitions():
        if args.verbose:
            print(f"{definition.id}\t{definition.name}\t{len(definition.keywords)} keywords")
        else:
            print(definition.id)
    return EXIT_OK


async def run_analysis(args: argparse.Namespace) -> Dict[str, Any]:
    """Build the collaborators, analyze one product and release them."""
    catalog = load_catalog(args.catalog) if args.catalog else get_catalog()
    llm_client = get_llm_client()
    search_client = TavilySearchClient()
    cache = None
    if not args.no_cache:
        print(f"📤 Connecting to Redis: {redis_settings.host}:{redis_settings.port}", file=sys.stderr)
        cache = RedisResultCache.from_url(redis_settings.url, engine_settings.cache_ttl_seconds)
    translator = LLMProductNameTranslator(llm_client) if engine_settings.translate_product_names else None

    analyzer = SustainabilityAnalyzer(
        catalog,
        LLMFactExtractor(llm_client),
        search_provider=search_client,
        cache=cache,
        translator=translator,
    )
    request = ProductAnalysisRequest(
        product_name=args.product_name,
        page_title=args.title,
        description=args.description,
        page_url=args.url,
        category_hint=args.category_hint,
        locale=args.locale,
        country=args.country,
    )
    try:
        report = await analyzer.analyze(request)
    finally:
        await search_client.close()
        await llm_client.close()
        if cache is not None:
            await cache.close()
    return report.model_dump(mode="json")


def cmd_analyze(args: argparse.Namespace) -> int:
    _print_json(asyncio.run(run_analysis(args)))
    return EXIT_OK


async def run_claim_verification(args: argparse.Namespace) -> Dict[str, Any]:
    async with TavilySearchClient() as client:
        response = await verify_claims(client, args.product_name, args.claims)
    return response.model_dump(mode="json")


def cmd_verify_claims(args: argparse.Namespace) -> int:
    _print_json(asyncio.run(run_claim_verification(args)))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ecoscore",
        description="Classify products into sustainability categories and aggregate scores",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Classify from product name and page title
  ecoscore classify "Apple Watch Series 9" --title "Apple Watch Series 9 Smart Watch"

  # Aggregate criterion evaluations (JSON object, '-' reads stdin)
  ecoscore score electronics facts.json

  # Full analysis with LLM facts, web search and Redis cache
  ecoscore analyze "Camiseta Algodão Orgânico" --country BR --category-hint "Roupas"

  # Look for evidence behind marketing claims
  ecoscore verify-claims "Allbirds Tree Runners" "carbon neutral" "eucalyptus fiber"

Exit codes:
  0  success
  1  invalid input or catalog
  2  category unresolved, low confidence or unknown
  3  LLM or search service failure
        """
    )
    parser.add_argument(
        "--catalog",
        help="Path to a category catalog JSON (default: ENGINE_CATALOG_PATH or packaged catalog)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    classify = subparsers.add_parser("classify", help="Classify a product")
    classify.add_argument("product_name", help="Product name")
    classify.add_argument("--title", help="Page title")
    classify.add_argument("--description", help="Product description")
    classify.add_argument(
        "--substring",
        action="store_true",
        help="Match keywords as raw substrings instead of whole words"
    )
    classify.add_argument(
        "--explain",
        action="store_true",
        help="Include matched terms of every candidate category"
    )
    classify.set_defaults(func=cmd_classify)

    score = subparsers.add_parser("score", help="Aggregate criterion evaluations")
    score.add_argument("category", help="Category id whose weights apply")
    score.add_argument("facts", help="Facts JSON file, or '-' for stdin")
    score.set_defaults(func=cmd_score)

    categories = subparsers.add_parser("categories", help="List catalog categories or show one")
    categories.add_argument("category_id", nargs="?", help="Show the full definition of this category")
    categories.add_argument("-v", "--verbose", action="store_true", help="Show names and keyword counts")
    categories.set_defaults(func=cmd_categories)

    analyze = subparsers.add_parser(
        "analyze",
        help="Full analysis: classify, search, extract facts, score, find alternatives"
    )
    analyze.add_argument("product_name", help="Product name")
    analyze.add_argument("--title", help="Page title")
    analyze.add_argument("--description", help="Product description")
    analyze.add_argument("--url", help="Product page URL (excluded from alternatives)")
    analyze.add_argument("--category-hint", help="Shop breadcrumb used when classification is unresolved")
    analyze.add_argument("--locale", default="en-US", help="Locale (default: en-US)")
    analyze.add_argument("--country", default="US", help="Country for alternatives (default: US)")
    analyze.add_argument("--no-cache", action="store_true", help="Skip the Redis result cache")
    analyze.set_defaults(func=cmd_analyze)

    claims = subparsers.add_parser("verify-claims", help="Search evidence for sustainability claims")
    claims.add_argument("product_name", help="Product name")
    claims.add_argument("claims", nargs="+", help="Claim phrases, e.g. 'organic cotton'")
    claims.set_defaults(func=cmd_verify_claims)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return args.func(args)
    except (UnresolvedCategory, CategoryNotFound) as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return EXIT_UNRESOLVED
    except CollaboratorError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return EXIT_COLLABORATOR
    except (CatalogError, ValueError, OSError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
