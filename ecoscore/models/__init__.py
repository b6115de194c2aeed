"""Pydantic validation models."""

# Catalog configuration
from ecoscore.models.catalog import (
    RubricBand,
    IndicatorRubric,
    Indicator,
    CriterionWeightConfig,
    CategoryDefinition,
    SourceWeights,
    ValidationThresholds,
    ScoringThresholds,
    CategoryCatalog,
)

# Engine outputs
from ecoscore.models.scoring import (
    Confidence,
    ClassificationOutcome,
    UnresolvedReason,
    ClassificationResult,
    SustainabilityTier,
    CriterionEvaluation,
    CriterionBreakdown,
    SustainabilityResult,
)

__all__ = [
    # Catalog
    "RubricBand",
    "IndicatorRubric",
    "Indicator",
    "CriterionWeightConfig",
    "CategoryDefinition",
    "SourceWeights",
    "ValidationThresholds",
    "ScoringThresholds",
    "CategoryCatalog",
    # Outputs
    "Confidence",
    "ClassificationOutcome",
    "UnresolvedReason",
    "ClassificationResult",
    "SustainabilityTier",
    "CriterionEvaluation",
    "CriterionBreakdown",
    "SustainabilityResult",
]
