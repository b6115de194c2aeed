"""LLM Client abstraction for fact extraction.

Supports:
- Any OpenAI-compatible chat completions API (Groq by default)
- Mock client for tests

Example:
    client = OpenAICompatibleClient(LLMConfig(api_key="gsk_..."))
    facts = await client.complete_json("Evaluate this product ...")
"""

import asyncio
import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, List, Dict
from enum import Enum
import structlog
import httpx

from ecoscore.config import llm_settings

logger = structlog.get_logger(__name__)


class LLMBackend(str, Enum):
    """Supported LLM backends."""
    OPENAI = "openai"
    MOCK = "mock"  # For testing


@dataclass
class LLMConfig:
    """Configuration for LLM client."""
    backend: LLMBackend = LLMBackend.OPENAI
    model: str = "llama-3.3-70b-versatile"
    base_url: str = "https://api.groq.com/openai/v1"
    api_key: Optional[str] = None
    timeout: float = 30.0
    max_retries: int = 3
    temperature: float = 0.1  # Low temperature for consistent results
    max_tokens: int = 2048

    @classmethod
    def from_settings(cls, settings) -> "LLMConfig":
        """Build config from LLMSettings."""
        return cls(
            backend=LLMBackend(settings.backend.value),
            model=settings.model,
            base_url=settings.base_url,
            api_key=settings.api_key,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )


@dataclass
class LLMResponse:
    """Response from LLM."""
    content: str
    model: str
    usage: Dict[str, int] = field(default_factory=dict)

    @property
    def tokens_used(self) -> int:
        """Total tokens used in this response."""
        return self.usage.get("total_tokens", 0)


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or LLMConfig()
        self._log = logger.bind(
            component="LLMClient",
            backend=self.config.backend.value,
            model=self.config.model
        )

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate a completion for the given prompt.

        Args:
            prompt: User prompt to complete
            system_prompt: Optional system prompt for context
            temperature: Override default temperature
            max_tokens: Override default max tokens

        Returns:
            LLMResponse with generated content
        """
        pass

    @abstractmethod
    async def complete_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Generate a JSON object completion.

        Returns:
            Parsed JSON response
        """
        pass

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if the LLM backend is available."""
        pass

    async def close(self) -> None:
        """Release client resources."""
        return None


def extract_json_object(content: str) -> Dict[str, Any]:
    """Parse a JSON object, tolerating prose around it.

    Returns an empty dict when no object can be recovered.
    """
    try:
        result = json.loads(content)
        if isinstance(result, dict):
            return result
    except (json.JSONDecodeError, TypeError):
        pass

    # Outermost braces, nested objects included
    match = re.search(r"\{.*\}", content or "", re.DOTALL)
    if match:
        try:
            result = json.loads(match.group())
            if isinstance(result, dict):
                return result
        except json.JSONDecodeError:
            pass

    return {}


class OpenAICompatibleClient(LLMClient):
    """Client for OpenAI-compatible chat completions APIs.

    Groq, OpenAI and most hosted gateways expose the same
    ``POST /chat/completions`` contract.
    """

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(config)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self.config.api_key:
                headers["Authorization"] = f"Bearer {self.config.api_key}"
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def is_available(self) -> bool:
        """Check if the API answers and knows our model."""
        try:
            client = await self._get_client()
            response = await client.get("/models")
            if response.status_code != 200:
                return False
            models = [m.get("id") for m in response.json().get("data", [])]
            available = self.config.model in models
            if not available:
                self._log.warning(
                    "model_not_available",
                    required_model=self.config.model,
                    available_models=models,
                )
            return available
        except (httpx.HTTPError, ValueError) as e:
            self._log.debug("llm_not_available", error=str(e))
            return False

    def _decode(self, response: httpx.Response) -> Dict[str, Any]:
        """Decode a chat completions body; gateways may answer 200 with HTML."""
        try:
            data = response.json()
        except ValueError as e:
            self._log.error("llm_invalid_json", body=response.text[:200])
            raise RuntimeError("LLM API returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise RuntimeError("LLM API returned an unexpected payload")
        return data

    async def _post_chat(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        client = await self._get_client()

        for attempt in range(self.config.max_retries):
            try:
                response = await client.post("/chat/completions", json=payload)
                response.raise_for_status()
                return self._decode(response)

            except httpx.HTTPStatusError as e:
                self._log.warning(
                    "llm_request_failed",
                    attempt=attempt + 1,
                    status=e.response.status_code,
                    error=str(e),
                )
                # Client errors other than rate limiting will not improve on retry
                if e.response.status_code < 500 and e.response.status_code != 429:
                    raise
                if attempt == self.config.max_retries - 1:
                    raise
                await asyncio.sleep(1 * (attempt + 1))

            except httpx.TransportError as e:
                self._log.error(
                    "llm_transport_error",
                    attempt=attempt + 1,
                    error=str(e),
                )
                if attempt == self.config.max_retries - 1:
                    raise
                await asyncio.sleep(1 * (attempt + 1))

        raise RuntimeError("Failed to complete after retries")

    def _build_messages(self, prompt: str, system_prompt: Optional[str]) -> List[Dict[str, str]]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate completion using the chat completions API."""
        payload = {
            "model": self.config.model,
            "messages": self._build_messages(prompt, system_prompt),
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.config.max_tokens,
        }
        data = await self._post_chat(payload)
        choices = data.get("choices") or [{}]
        return LLMResponse(
            content=(choices[0].get("message") or {}).get("content") or "",
            model=data.get("model", self.config.model),
            usage=data.get("usage") or {},
        )

    async def complete_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Generate JSON completion using response_format=json_object."""
        payload = {
            "model": self.config.model,
            "messages": self._build_messages(prompt, system_prompt),
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "response_format": {"type": "json_object"},
        }
        data = await self._post_chat(payload)
        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content") or "{}"

        result = extract_json_object(content)
        if not result:
            self._log.warning("json_parse_failed", content=content[:200])
        return result


class MockLLMClient(LLMClient):
    """Mock LLM client for testing."""

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        responses: Optional[Dict[str, str]] = None,
        json_responses: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        super().__init__(config or LLMConfig(backend=LLMBackend.MOCK))
        self.responses = responses or {}
        self.json_responses = json_responses or {}
        self.calls: List[Dict[str, Any]] = []

    async def is_available(self) -> bool:
        return True

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        self.calls.append({
            "prompt": prompt,
            "system_prompt": system_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })

        # Find matching response
        for key, response in self.responses.items():
            if key.lower() in prompt.lower():
                return LLMResponse(content=response, model="mock", usage={"total_tokens": 100})

        return LLMResponse(content="Mock response", model="mock", usage={"total_tokens": 50})

    async def complete_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        self.calls.append({
            "prompt": prompt,
            "system_prompt": system_prompt,
            "json": True,
        })

        for key, response in self.json_responses.items():
            if key.lower() in prompt.lower():
                return response

        return {}


def get_llm_client(config: Optional[LLMConfig] = None) -> LLMClient:
    """Create an LLM client for the configured backend.

    Args:
        config: Optional configuration (LLM_* settings when not provided)
    """
    if config is None:
        config = LLMConfig.from_settings(llm_settings)

    if config.backend == LLMBackend.MOCK:
        return MockLLMClient(config)
    return OpenAICompatibleClient(config)
