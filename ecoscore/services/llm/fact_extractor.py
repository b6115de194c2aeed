"""Fact extraction collaborator.

The LLM only evaluates each configured criterion from 0 to 100 with
supporting evidence; it never computes the final score. Aggregation stays in
the deterministic engine.

Example:
    extractor = LLMFactExtractor(get_llm_client())
    facts = await extractor.extract("Apple Watch Series 9", category, context)
    # facts.criteria = {"durability": {"score": 75, "evidence": [...]}, ...}
"""
import json
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import httpx
import structlog
from pydantic import BaseModel, Field

from ecoscore.errors import FactExtractionError
from ecoscore.models.catalog import CategoryDefinition, CriterionWeightConfig
from ecoscore.services.llm.client import LLMClient

logger = structlog.get_logger(__name__)

# Keys of the extractor response that are not criteria
PASSTHROUGH_KEYS = ("certifications", "origin")

FACT_SYSTEM_PROMPT = (
    "You are a sustainability analyst. Evaluate products strictly from the "
    "evidence you are given. Return ONLY valid JSON."
)


class ProductFacts(BaseModel):
    """Facts returned by a fact extractor.

    Attributes:
        criteria: criterion name -> raw evaluation, validated later by the
            aggregator so one bad criterion cannot abort aggregation
        certifications: Certifications mentioned in the evidence
        origin: Country or region of manufacture
    """
    criteria: Dict[str, Any] = Field(default_factory=dict)
    certifications: List[str] = Field(default_factory=list)
    origin: Optional[str] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "ProductFacts":
        """Split an extractor response into criteria and pass-through fields."""
        certifications = data.get("certifications") or []
        if not isinstance(certifications, list):
            certifications = [certifications]
        origin = data.get("origin")
        return cls(
            criteria={k: v for k, v in data.items() if k not in PASSTHROUGH_KEYS},
            certifications=[str(c) for c in certifications if c],
            origin=str(origin) if origin else None,
        )


@runtime_checkable
class FactExtractor(Protocol):
    """Narrow capability: turn search context into per-criterion facts."""

    async def extract(
        self,
        product_name: str,
        category: CategoryDefinition,
        search_context: str,
    ) -> ProductFacts:
        ...


def _render_criterion(name: str, config: CriterionWeightConfig) -> str:
    lines = [f"{name.upper()} (weight: {config.weight}):"]
    if config.guidelines:
        lines.append("Guidelines:")
        lines.extend(f"- {g}" for g in config.guidelines)
    for indicator in config.indicators:
        line = f"Indicator {indicator.id} - {indicator.name}"
        if indicator.description:
            line += f": {indicator.description}"
        lines.append(line)
        if indicator.evaluation:
            for band, rubric in indicator.evaluation.bands():
                lines.append(f"  {band} (>= {rubric.threshold}): {rubric.description}")
    return "\n".join(lines)


def build_fact_prompt(
    product_name: str,
    category: CategoryDefinition,
    search_context: str,
) -> str:
    """Render the fact-extraction prompt for one product."""
    criteria_text = "\n\n".join(
        _render_criterion(name, config)
        for name, config in category.sustainability_criteria.items()
    )
    example = {
        name: {"score": 0, "evidence": ["..."]}
        for name in category.sustainability_criteria
    }
    example["certifications"] = ["..."]
    example["origin"] = "..."

    return f"""Analyze this product and evaluate each criterion from 0-100.

PRODUCT: {product_name}
CATEGORY: {category.id} ({category.name})

CONTEXT FROM WEB SEARCH:
{search_context or "No search context available."}

CRITERIA TO EVALUATE:
{criteria_text}

For each criterion, provide:
1. A score from 0-100 (how well the product meets the guidelines)
2. Evidence from the context that supports your score

Return ONLY a JSON object with this structure:
{json.dumps(example, indent=2)}

IMPORTANT:
- Be objective and base scores on evidence
- If no information is available for a criterion, use score: 0
- Do NOT calculate a final score - just evaluate each criterion"""


class LLMFactExtractor:
    """Fact extractor backed by an LLM client."""

    def __init__(self, client: LLMClient):
        self.client = client
        self._log = logger.bind(component="LLMFactExtractor")

    async def extract(
        self,
        product_name: str,
        category: CategoryDefinition,
        search_context: str,
    ) -> ProductFacts:
        """Extract per-criterion facts.

        Raises:
            FactExtractionError: If the LLM call fails or returns no JSON
        """
        prompt = build_fact_prompt(product_name, category, search_context)
        try:
            data = await self.client.complete_json(prompt, system_prompt=FACT_SYSTEM_PROMPT)
        except (httpx.HTTPError, RuntimeError, ValueError) as e:
            self._log.error("fact_extraction_failed", product=product_name[:50], error=str(e))
            raise FactExtractionError(f"Fact extraction failed: {e}") from e

        if not data:
            raise FactExtractionError("Fact extractor returned no JSON object")

        facts = ProductFacts.from_response(data)
        self._log.debug(
            "facts_extracted",
            product=product_name[:50],
            category=category.id,
            criteria=sorted(facts.criteria),
        )
        return facts
