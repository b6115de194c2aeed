"""Web search collaborator and alternatives selection."""
from ecoscore.services.search.client import (
    SearchOptions,
    SearchResult,
    SearchResponse,
    SearchProvider,
    TavilySearchClient,
    build_search_context,
)
from ecoscore.services.search.alternatives import (
    extract_product_type,
    build_alternative_queries,
    is_product_listing,
    select_alternatives,
)
from ecoscore.services.search.claims import build_claim_query, verify_claims

__all__ = [
    "SearchOptions",
    "SearchResult",
    "SearchResponse",
    "SearchProvider",
    "TavilySearchClient",
    "build_search_context",
    "extract_product_type",
    "build_alternative_queries",
    "is_product_listing",
    "select_alternatives",
    "build_claim_query",
    "verify_claims",
]
