"""Product name translation collaborator.

Non-English product names are translated before product-type extraction and
as a second classification attempt. Names made only of ASCII letters, digits,
spaces, hyphens and underscores are assumed to be English and are returned
unchanged without an LLM call.

Example:
    translator = LLMProductNameTranslator(get_llm_client())
    await translator.translate("Tênis Nike Sustentável")
    # "Nike Sustainable Sneakers"
"""
import re
from typing import Protocol, runtime_checkable

import httpx
import structlog

from ecoscore.services.llm.client import LLMClient

logger = structlog.get_logger(__name__)

ENGLISH_NAME_RE = re.compile(r"^[a-zA-Z0-9\s\-_]+$")

TRANSLATION_SYSTEM_PROMPT = "Translate product names to English. Return ONLY the translated name."


def looks_english(product_name: str) -> bool:
    """True for names that need no translation."""
    return bool(ENGLISH_NAME_RE.match(product_name or ""))


@runtime_checkable
class ProductNameTranslator(Protocol):
    """Narrow capability: translate a product name to English."""

    async def translate(self, product_name: str) -> str:
        ...


class LLMProductNameTranslator:
    """Translator backed by an LLM client.

    Never fails: any LLM error falls back to the original name.
    """

    def __init__(self, client: LLMClient, max_tokens: int = 50, temperature: float = 0.3):
        self.client = client
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._log = logger.bind(component="LLMProductNameTranslator")

    async def translate(self, product_name: str) -> str:
        if not product_name or looks_english(product_name):
            return product_name

        try:
            response = await self.client.complete(
                f'Translate: "{product_name}"',
                system_prompt=TRANSLATION_SYSTEM_PROMPT,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except (httpx.HTTPError, RuntimeError, ValueError) as e:
            self._log.warning("translation_failed", product=product_name[:50], error=str(e))
            return product_name

        translated = response.content.strip().strip('"').strip()
        if not translated:
            return product_name

        self._log.debug("product_translated", product=product_name[:50], translated=translated[:50])
        return translated
