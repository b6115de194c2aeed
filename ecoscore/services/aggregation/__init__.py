"""Sustainability aggregation service."""
from ecoscore.services.aggregation.service import (
    aggregate,
    classify_score,
    parse_evaluation,
    round_half_up,
)

__all__ = [
    "aggregate",
    "classify_score",
    "parse_evaluation",
    "round_half_up",
]
