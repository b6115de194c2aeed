"""Marketing claim verification search.

Looks up third-party evidence for a product's sustainability claims
("organic cotton", "carbon neutral") so callers can spot greenwashing.
"""
from typing import List, Sequence

from ecoscore.services.search.client import SearchOptions, SearchProvider, SearchResponse

CLAIM_SEARCH_OPTIONS = SearchOptions(max_results=5, search_depth="advanced", include_answer=True)


def build_claim_query(product_name: str, claims: Sequence[str]) -> str:
    return f"{product_name} {' '.join(claims)} verification greenwashing fact check"


async def verify_claims(
    provider: SearchProvider,
    product_name: str,
    claims: Sequence[str],
) -> SearchResponse:
    """Search for evidence backing or refuting the given claims.

    Args:
        provider: SearchProvider collaborator
        product_name: Product the claims are made for
        claims: Claim phrases, blank entries ignored

    Returns:
        SearchResponse with the provider's summary answer when available

    Raises:
        ValueError: If the product name is blank or no claim is given
        SearchProviderError: If the search fails
    """
    product_name = (product_name or "").strip()
    if not product_name:
        raise ValueError("product_name must not be blank")

    cleaned: List[str] = [c.strip() for c in claims if c and c.strip()]
    if not cleaned:
        raise ValueError("at least one claim is required")

    return await provider.search(build_claim_query(product_name, cleaned), CLAIM_SEARCH_OPTIONS)
