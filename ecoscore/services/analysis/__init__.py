"""Sustainability analysis orchestration."""
from ecoscore.services.analysis.service import (
    CategorySource,
    ProductAnalysisRequest,
    AnalysisReport,
    SustainabilityAnalyzer,
    match_category_hint,
)

__all__ = [
    "CategorySource",
    "ProductAnalysisRequest",
    "AnalysisReport",
    "SustainabilityAnalyzer",
    "match_category_hint",
]
