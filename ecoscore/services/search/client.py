"""
Web Search Client

HTTP client for the Tavily search API, used to gather context for fact
extraction and candidate listings for alternatives.
Uses httpx for async HTTP requests with tenacity retries on connection errors.
"""

from typing import List, Optional, Protocol, Sequence, runtime_checkable

import httpx
import structlog
from pydantic import BaseModel, Field
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ecoscore.config import search_settings
from ecoscore.errors import SearchProviderError

logger = structlog.get_logger(__name__)

RETRYABLE_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout)


class SearchOptions(BaseModel):
    """Per-query search options."""
    max_results: int = Field(default=10, ge=1, le=50)
    search_depth: str = "advanced"
    include_answer: bool = False
    include_domains: List[str] = Field(default_factory=list)
    exclude_domains: List[str] = Field(default_factory=list)


class SearchResult(BaseModel):
    """One search hit."""
    title: str = ""
    url: str
    snippet: str = ""
    score: Optional[float] = None


class SearchResponse(BaseModel):
    """Search results for one query."""
    query: str
    answer: Optional[str] = None
    results: List[SearchResult] = Field(default_factory=list)


@runtime_checkable
class SearchProvider(Protocol):
    """Narrow capability: run a web search."""

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> SearchResponse:
        ...


def build_search_context(results: Sequence[SearchResult], max_chars: int = 6000) -> str:
    """Render search results as plain-text context for the fact extractor."""
    blocks = []
    used = 0
    for i, result in enumerate(results, start=1):
        block = f"[{i}] {result.title}\nURL: {result.url}\n{result.snippet.strip()}"
        if used + len(block) > max_chars:
            break
        blocks.append(block)
        used += len(block)
    return "\n\n".join(blocks)


class TavilySearchClient:
    """
    Async client for the Tavily search API.

    Features:
    - Retries with exponential backoff on connection errors
    - Typed responses

    Usage:
        async with TavilySearchClient() as client:
            response = await client.search("organic cotton t-shirt")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_wait=None,
    ):
        self.api_key = api_key or search_settings.api_key
        self.base_url = (base_url or search_settings.base_url).rstrip("/")
        self.timeout = timeout or search_settings.timeout
        self.max_retries = max_retries or search_settings.max_retries
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=10)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._log = logger.bind(service="tavily", base_url=self.base_url)

    async def __aenter__(self) -> "TavilySearchClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _post_search(self, payload: dict) -> httpx.Response:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=self.retry_wait,
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        ):
            with attempt:
                return await self.client.post("/search", json=payload)
        raise SearchProviderError("Search failed after retries")

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> SearchResponse:
        """
        Run a web search.

        Raises:
            SearchProviderError: On missing API key, HTTP errors or
                connection failures after retries
        """
        if not self.api_key:
            raise SearchProviderError("Search API key not configured")

        opts = options or SearchOptions(
            max_results=search_settings.max_results,
            search_depth=search_settings.search_depth,
        )
        payload = {
            "api_key": self.api_key,
            "query": query,
            "max_results": opts.max_results,
            "search_depth": opts.search_depth,
            "include_answer": opts.include_answer,
        }
        if opts.include_domains:
            payload["include_domains"] = opts.include_domains
        if opts.exclude_domains:
            payload["exclude_domains"] = opts.exclude_domains

        try:
            response = await self._post_search(payload)
        except httpx.HTTPError as e:
            self._log.error("search_connection_failed", query=query[:80], error=str(e))
            raise SearchProviderError(f"Search request failed: {e}") from e

        if response.status_code != 200:
            self._log.warning(
                "search_failed",
                query=query[:80],
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise SearchProviderError(f"Search API returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            self._log.warning("search_invalid_json", query=query[:80], body=response.text[:200])
            raise SearchProviderError("Search API returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise SearchProviderError("Search API returned an unexpected payload")

        results = [
            SearchResult(
                title=item.get("title") or "",
                url=item["url"],
                snippet=item.get("content") or item.get("snippet") or "",
                score=item.get("score"),
            )
            for item in data.get("results", [])
            if item.get("url")
        ]
        self._log.debug("search_completed", query=query[:80], results=len(results))
        return SearchResponse(query=query, answer=data.get("answer"), results=results)
