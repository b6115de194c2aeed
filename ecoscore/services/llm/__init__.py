"""LLM service module for fact extraction and name translation.

Supports:
- OpenAI-compatible APIs (Groq by default)
- Mock client for tests

Usage:
    from ecoscore.services.llm import LLMFactExtractor, get_llm_client

    extractor = LLMFactExtractor(get_llm_client())
    facts = await extractor.extract(product_name, category, context)
"""

from .client import LLMClient, LLMConfig, OpenAICompatibleClient, MockLLMClient, get_llm_client
from .fact_extractor import FactExtractor, LLMFactExtractor, ProductFacts, build_fact_prompt
from .translator import LLMProductNameTranslator, ProductNameTranslator, looks_english

__all__ = [
    "LLMClient",
    "LLMConfig",
    "OpenAICompatibleClient",
    "MockLLMClient",
    "get_llm_client",
    "FactExtractor",
    "LLMFactExtractor",
    "ProductFacts",
    "build_fact_prompt",
    "LLMProductNameTranslator",
    "ProductNameTranslator",
    "looks_english",
]
