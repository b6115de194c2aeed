"""Custom exception hierarchy for classification and scoring errors.

Engine errors are deterministic functions of their inputs and are never
retried. Only collaborator errors (LLM, search) may come from transient
network failures; retries for those live in the HTTP clients.
"""
from typing import Optional


class EngineError(Exception):
    """Base exception for all engine errors."""
    
    def __init__(self, message: str, *args, **kwargs):
        """Initialize error with message."""
        self.message = message
        super().__init__(message, *args, **kwargs)


class UnresolvedCategory(EngineError):
    """Raised when no category can be selected with enough confidence.
    
    Attributes:
        reason: Machine-readable reason (insufficient_evidence, excluded_winner,
            no_categories, low_confidence)
        best_category: Top ranked category, if any, for diagnostics
    """
    
    def __init__(self, reason: str, best_category: Optional[str] = None):
        self.reason = reason
        self.best_category = best_category
        message = f"Could not resolve product category: {reason}"
        if best_category:
            message += f" (best candidate: {best_category})"
        super().__init__(message)


class CategoryNotFound(EngineError):
    """Raised when a category id is absent from the catalog."""
    
    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Category {category_id!r} not found in catalog")


class MalformedFacts(EngineError):
    """Raised when a criterion value is not a well-formed evaluation record."""
    
    def __init__(self, criterion: str, detail: str = ""):
        self.criterion = criterion
        self.detail = detail
        message = f"Malformed evaluation for criterion {criterion!r}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class CatalogError(EngineError):
    """Raised when the category catalog document cannot be loaded."""
    pass


class CollaboratorError(EngineError):
    """Base exception for failures of external collaborators."""
    pass


class FactExtractionError(CollaboratorError):
    """Raised when the fact extractor cannot produce facts."""
    pass


class SearchProviderError(CollaboratorError):
    """Raised when the web search provider fails after retries."""
    pass
