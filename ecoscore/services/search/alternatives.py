"""Selection of sustainable alternative listings from search results.

Search results are filtered down to real product pages:
- URL looks like a product page
- URL is not editorial content (blog, review, top-10 lists)
- title or snippet carries a sustainability keyword
- domain is a known e-commerce site
"""
from typing import Dict, List, Optional, Sequence

from ecoscore.models.catalog import CategoryDefinition
from ecoscore.services.search.client import SearchResult

PRODUCT_URL_PATTERNS = (
    "/dp/", "/product/", "/p/", "/item/", "/listing/", "/products/", "-p-", "/buy/", "/shop/",
)

EXCLUDED_URL_PATTERNS = (
    "/blog/", "/article/", "/news/", "/guide/", "/how-to/", "/features/",
    "/best-", "/top-", "/review", "/compare", "/forum/", "/category/",
    "wikipedia.", "youtube.",
)

SUSTAINABLE_KEYWORDS = (
    "sustainable", "eco", "organic", "fair trade", "biodegradable", "recycled",
    "natural", "green", "ethical", "renewable",
    "sustentável", "ecológico", "orgânico", "reciclado",
)

ECOMMERCE_DOMAINS = (
    "amazon", "etsy", "ebay", "walmart", "target", "mercado",
    "shopee", "aliexpress", "magalu", "americanas",
)

# product type -> surface forms, checked in order
PRODUCT_TYPE_PATTERNS: Dict[str, Sequence[str]] = {
    "body wash": ("body wash", "shower gel", "sabonete líquido"),
    "shampoo": ("shampoo", "xampu"),
    "conditioner": ("conditioner", "condicionador"),
    "deodorant": ("deodorant", "desodorante"),
    "soap": ("soap", "sabonete", "sabão"),
    "toothpaste": ("toothpaste", "pasta de dente"),
    "perfume": ("perfume", "fragrance", "cologne"),
    "phone": ("smartphone", "phone", "celular", "iphone"),
    "laptop": ("laptop", "notebook"),
    "headphones": ("headphones", "earbuds", "fone"),
    "shoes": ("shoes", "sneakers", "sapatos", "tênis", "heels"),
    "jacket": ("jacket", "coat", "jaqueta", "casaco"),
    "backpack": ("backpack", "mochila"),
}

COUNTRY_NAMES = {
    "BR": "Brazil", "US": "United States", "UK": "United Kingdom",
    "CA": "Canada", "AU": "Australia", "DE": "Germany",
    "FR": "France", "ES": "Spain", "IT": "Italy",
}

AMAZON_DOMAINS = {"BR": "com.br", "UK": "co.uk", "DE": "de", "FR": "fr", "ES": "es", "IT": "it", "CA": "ca"}


def extract_product_type(product_name: str) -> str:
    """Generic product type of a product name, e.g. "shoes"."""
    lower = (product_name or "").lower()
    for product_type, forms in PRODUCT_TYPE_PATTERNS.items():
        if any(form in lower for form in forms):
            return product_type
    words = [w for w in (product_name or "").split() if len(w) > 2]
    return " ".join(words[-2:])


def build_alternative_queries(
    product_type: str,
    category: CategoryDefinition,
    country: str = "US",
) -> List[str]:
    """Search queries for sustainable alternatives of a product type."""
    code = (country or "US").upper()
    country_name = COUNTRY_NAMES.get(code, "United States")
    amazon_domain = AMAZON_DOMAINS.get(code, "com")
    subject = product_type or category.name.lower()

    queries = [
        f"site:amazon.{amazon_domain} sustainable eco-friendly {subject}",
        f"site:etsy.com eco-friendly natural {subject}",
        f'"sustainable {subject}" {country_name} buy online product -article -blog -guide',
    ]
    if category.certifications:
        queries.append(f"{subject} {' OR '.join(category.certifications[:3])} certified buy")
    return queries


def is_product_listing(result: SearchResult) -> bool:
    """True if a search hit looks like a sustainable product on a shop."""
    url = result.url.lower()
    text = f"{result.title} {result.snippet}".lower()

    if not any(pattern in url for pattern in PRODUCT_URL_PATTERNS):
        return False
    if any(pattern in url for pattern in EXCLUDED_URL_PATTERNS):
        return False
    if not any(keyword in text for keyword in SUSTAINABLE_KEYWORDS):
        return False
    return any(domain in url for domain in ECOMMERCE_DOMAINS)


def select_alternatives(
    results: Sequence[SearchResult],
    limit: int = 8,
    exclude_url: Optional[str] = None,
) -> List[SearchResult]:
    """Product listings from results, de-duplicated by URL, first seen wins."""
    selected: Dict[str, SearchResult] = {}
    for result in results:
        if len(selected) >= limit:
            break
        if result.url in selected or result.url == exclude_url:
            continue
        if is_product_listing(result):
            selected[result.url] = result
    return list(selected.values())
