"""Keyword expansion and occurrence counting.

Expansion covers common English/Portuguese morphology without a stemmer:
the keyword, its configured synonyms, a naive plural and a naive singular.
"""
import re
from functools import lru_cache
from typing import FrozenSet, Iterable, Optional, Pattern


def expand_keyword(keyword: str, synonyms: Optional[Iterable[str]] = None) -> FrozenSet[str]:
    """Return every matchable surface form of a configured keyword.

    Args:
        keyword: Configured keyword
        synonyms: Configured synonyms of the keyword

    Returns:
        Lowercased, de-duplicated forms; never contains empty strings.
    """
    forms = set()
    base = (keyword or "").strip().lower()
    if base:
        forms.add(base)
        forms.add(base if base.endswith("s") else base + "s")
        forms.add(base[:-1] if base.endswith("s") else base)

    for synonym in synonyms or ():
        term = (synonym or "").strip().lower()
        if term:
            forms.add(term)

    forms.discard("")
    return frozenset(forms)


@lru_cache(maxsize=4096)
def _boundary_pattern(term: str) -> Pattern[str]:
    # [^\W_] is "alphanumeric": a match may not touch letters or digits
    return re.compile(r"(?<![^\W_])" + re.escape(term) + r"(?![^\W_])")


def count_occurrences(text: str, term: str, word_boundary: bool = True) -> int:
    """Count non-overlapping occurrences of term in text.

    With word_boundary, "car" matches "my car" but not "card".
    """
    if not text or not term:
        return 0
    if word_boundary:
        return len(_boundary_pattern(term).findall(text))
    return text.count(term)
