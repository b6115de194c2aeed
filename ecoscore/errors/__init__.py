"""Error handling module."""
from ecoscore.errors.exceptions import (
    EngineError,
    UnresolvedCategory,
    CategoryNotFound,
    MalformedFacts,
    CatalogError,
    CollaboratorError,
    FactExtractionError,
    SearchProviderError,
)

__all__ = [
    "EngineError",
    "UnresolvedCategory",
    "CategoryNotFound",
    "MalformedFacts",
    "CatalogError",
    "CollaboratorError",
    "FactExtractionError",
    "SearchProviderError",
]
