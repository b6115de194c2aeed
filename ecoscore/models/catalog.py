"""Pydantic models for the category catalog and scoring thresholds.

The catalog is static configuration: it is validated once when loaded and
shared read-only by every classification and aggregation request. All models
here are frozen so no runtime mutation path exists.
"""
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from ecoscore.errors import CategoryNotFound


def _dedupe_terms(values) -> Tuple[str, ...]:
    """Strip terms, drop empties and duplicates, keep first-seen order."""
    if values is None:
        return ()
    seen = []
    for value in values:
        term = str(value).strip()
        if term and term not in seen:
            seen.append(term)
    return tuple(seen)


class RubricBand(BaseModel):
    """One band of an indicator rubric."""
    threshold: float
    description: str = ""

    model_config = {"frozen": True}


class IndicatorRubric(BaseModel):
    """Threshold-banded evaluation rubric for an indicator.

    Only used as prompt context for the fact extractor; the engine never
    evaluates rubrics itself.
    """
    excellent: RubricBand
    good: RubricBand
    acceptable: RubricBand
    poor: RubricBand

    model_config = {"frozen": True}

    def bands(self) -> List[Tuple[str, RubricBand]]:
        """Bands from best to worst."""
        return [
            ("excellent", self.excellent),
            ("good", self.good),
            ("acceptable", self.acceptable),
            ("poor", self.poor),
        ]


class Indicator(BaseModel):
    """Measurable indicator attached to a sustainability criterion."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    evaluation: Optional[IndicatorRubric] = None

    model_config = {"frozen": True}


class CriterionWeightConfig(BaseModel):
    """Weight and prompt context of one criterion within a category.

    Attributes:
        weight: Relative weight in [0, 1]. Weights of a category are expected
            to sum to 1.0 but aggregation never relies on it.
        indicators: Ordered indicators passed through to the fact extractor
        guidelines: Free-text guidelines, also passed through
    """
    weight: float = Field(..., ge=0.0, le=1.0)
    indicators: Tuple[Indicator, ...] = ()
    guidelines: Tuple[str, ...] = ()

    model_config = {"frozen": True}

    @field_validator("guidelines", mode="before")
    @classmethod
    def validate_guidelines(cls, v):
        return _dedupe_terms(v)


class CategoryDefinition(BaseModel):
    """A single category of the taxonomy.

    Attributes:
        id: Unique category key (e.g. "textiles_clothing")
        name: Human readable name
        keywords: Ordered, de-duplicated keywords used for scoring
        keyword_synonyms: keyword -> synonyms mapping
        exclusion_keywords: Terms that veto this category when found in the
            product name
        sustainability_criteria: criterion name -> weight configuration
        certifications: Relevant certifications (pass-through)
        references: Standards and references (pass-through)
    """
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    keywords: Tuple[str, ...] = ()
    keyword_synonyms: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)
    exclusion_keywords: Tuple[str, ...] = ()
    sustainability_criteria: Dict[str, CriterionWeightConfig] = Field(default_factory=dict)
    certifications: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()

    model_config = {"frozen": True}

    @field_validator("keywords", "exclusion_keywords", "certifications", "references", mode="before")
    @classmethod
    def validate_terms(cls, v):
        """Strip whitespace and drop empty or repeated terms."""
        return _dedupe_terms(v)

    @field_validator("keyword_synonyms", mode="before")
    @classmethod
    def validate_synonyms(cls, v):
        if not v:
            return {}
        return {
            str(keyword).strip(): _dedupe_terms(synonyms)
            for keyword, synonyms in v.items()
            if str(keyword).strip()
        }

    def synonyms_for(self, keyword: str) -> Tuple[str, ...]:
        """Configured synonyms of a keyword (case-insensitive lookup)."""
        if keyword in self.keyword_synonyms:
            return self.keyword_synonyms[keyword]
        lowered = keyword.lower()
        for configured, synonyms in self.keyword_synonyms.items():
            if configured.lower() == lowered:
                return synonyms
        return ()

    @property
    def total_weight(self) -> float:
        """Sum of configured criterion weights."""
        return sum(c.weight for c in self.sustainability_criteria.values())


class SourceWeights(BaseModel):
    """Weight of each text source when scoring categories."""
    product_name: float = Field(default=3.0, ge=0.0)
    page_title: float = Field(default=2.0, ge=0.0)
    description: float = Field(default=1.0, ge=0.0)

    model_config = {"frozen": True}


class ValidationThresholds(BaseModel):
    """Gates applied when selecting the winning category.

    Attributes:
        minimum_score: Top score below this leaves the product unresolved
        confidence_ratio: first/second ratio required for "medium" confidence
        exclusion_penalty: Added once to a category whose exclusion terms match
    """
    minimum_score: float = Field(default=2.0, ge=0.0)
    confidence_ratio: float = Field(default=1.5, gt=0.0)
    exclusion_penalty: float = Field(default=-1000.0, le=0.0)

    model_config = {"frozen": True}


class ScoringThresholds(BaseModel):
    """Global scoring configuration shared by all categories."""
    source_weights: SourceWeights = Field(default_factory=SourceWeights)
    validation_thresholds: ValidationThresholds = Field(default_factory=ValidationThresholds)

    model_config = {"frozen": True}


class CategoryCatalog(BaseModel):
    """The full category catalog document.

    Category ids are the keys of ``categories``; a definition may omit its
    ``id`` in the document, in which case the key is used.
    """
    version: str = "1.0"
    description: Optional[str] = None
    categories: Dict[str, CategoryDefinition] = Field(default_factory=dict)
    scoring: ScoringThresholds = Field(default_factory=ScoringThresholds)

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def fill_category_ids(cls, data):
        """Use each mapping key as the category id."""
        if not isinstance(data, dict):
            return data
        categories = data.get("categories")
        if not isinstance(categories, dict):
            return data
        filled = {}
        for key, definition in categories.items():
            if isinstance(definition, dict):
                definition = {**definition}
                if definition.setdefault("id", key) != key:
                    raise ValueError(
                        f"category id {definition['id']!r} does not match key {key!r}"
                    )
            filled[key] = definition
        return {**data, "categories": filled}

    def get(self, category_id: str) -> CategoryDefinition:
        """Look up a category, raising CategoryNotFound when absent."""
        try:
            return self.categories[category_id]
        except KeyError:
            raise CategoryNotFound(category_id) from None

    def has(self, category_id: str) -> bool:
        return category_id in self.categories

    def category_ids(self) -> List[str]:
        """Category ids in document order."""
        return list(self.categories.keys())

    def definitions(self) -> List[CategoryDefinition]:
        return list(self.categories.values())
