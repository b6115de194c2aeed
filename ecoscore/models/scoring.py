"""Pydantic models for classification and sustainability outputs.

Every model here is JSON-serializable and carries no timestamps or request
identifiers; callers add those when building a response.
"""
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ecoscore.errors import UnresolvedCategory


class Confidence(str, Enum):
    """Confidence of a resolved classification.

    LOW must be treated like an unresolved outcome by any consumer that
    depends on the category being correct (e.g. picking criterion weights).
    """
    MEDIUM = "medium"
    LOW = "low"


class ClassificationOutcome(str, Enum):
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


class UnresolvedReason(str, Enum):
    """Why no category was selected."""
    NO_CATEGORIES = "no_categories"
    INSUFFICIENT_EVIDENCE = "insufficient_evidence"
    EXCLUDED_WINNER = "excluded_winner"


class ClassificationResult(BaseModel):
    """Result of product category classification.

    Attributes:
        outcome: Whether a category was selected
        category_id: Winning category (None when unresolved)
        confidence: medium or low (None when unresolved)
        reason: Why the product is unresolved
        score: Adjusted score of the top ranked category
        ratio: first/second score ratio (inf when second scored 0)
        best_candidate: Top ranked category even when unresolved
        ranking: (category_id, adjusted score) pairs, best first
    """
    outcome: ClassificationOutcome
    category_id: Optional[str] = None
    confidence: Optional[Confidence] = None
    reason: Optional[UnresolvedReason] = None
    score: float = 0.0
    ratio: Optional[float] = None
    best_candidate: Optional[str] = None
    ranking: List[Tuple[str, float]] = Field(default_factory=list)

    @classmethod
    def unresolved(
        cls,
        reason: UnresolvedReason,
        best_candidate: Optional[str] = None,
        score: float = 0.0,
        ranking: Optional[List[Tuple[str, float]]] = None,
    ) -> "ClassificationResult":
        return cls(
            outcome=ClassificationOutcome.UNRESOLVED,
            reason=reason,
            best_candidate=best_candidate,
            score=score,
            ranking=ranking or [],
        )

    @property
    def is_resolved(self) -> bool:
        return self.outcome == ClassificationOutcome.RESOLVED

    @property
    def is_confident(self) -> bool:
        """Returns True if the category may be used to pick weights."""
        return self.is_resolved and self.confidence == Confidence.MEDIUM

    def require_confident(self) -> str:
        """Return the category id or raise UnresolvedCategory.

        Low confidence is rejected the same way as an unresolved outcome.
        """
        if not self.is_resolved:
            raise UnresolvedCategory(self.reason.value, self.best_candidate)
        if self.confidence != Confidence.MEDIUM:
            raise UnresolvedCategory("low_confidence", self.category_id)
        return self.category_id


class SustainabilityTier(str, Enum):
    """Classification tier of a final sustainability score."""
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"


class CriterionEvaluation(BaseModel):
    """Per-criterion evaluation produced by the fact extractor."""
    score: int = Field(..., ge=0, le=100)
    evidence: List[str] = Field(default_factory=list)


class CriterionBreakdown(BaseModel):
    """Contribution of one criterion to the final score."""
    score: int = Field(..., ge=0, le=100)
    weight: float = Field(..., ge=0.0)
    weighted: float


class SustainabilityResult(BaseModel):
    """Aggregated sustainability score for a product.

    Attributes:
        category_id: Category whose weights were applied
        final_score: Weighted average of criterion scores, 0-100
        breakdown: criterion name -> contribution
        classification: Tier derived from final_score
        malformed_criteria: Criteria whose evaluation was malformed and
            counted as 0; callers should log these
    """
    category_id: str
    final_score: int = Field(..., ge=0, le=100)
    breakdown: Dict[str, CriterionBreakdown] = Field(default_factory=dict)
    classification: SustainabilityTier
    malformed_criteria: List[str] = Field(default_factory=list)

    @property
    def has_malformed_criteria(self) -> bool:
        return len(self.malformed_criteria) > 0
