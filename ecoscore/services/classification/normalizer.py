"""Text normalization for keyword matching.

Steps, applied in order and each switchable through NormalizerConfig:
1. lowercase
2. accent stripping (NFD decomposition, combining marks removed)
3. punctuation to space (anything outside [a-z0-9\\s])
4. whitespace collapsing and trimming

Example:
    normalize("Tênis Nike - Sustentável!")
    # "tenis nike sustentavel"
"""
import re
import unicodedata
from dataclasses import dataclass
from typing import Optional

# ASCII: under Unicode IGNORECASE [a-z] would also match "ſ" and "ı"
_PUNCTUATION_RE = re.compile(r"[^a-z0-9\s]", re.IGNORECASE | re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class NormalizerConfig:
    """Which normalization steps are enabled."""
    lowercase: bool = True
    strip_accents: bool = True
    replace_punctuation: bool = True
    collapse_whitespace: bool = True


DEFAULT_NORMALIZER_CONFIG = NormalizerConfig()


def strip_accents(text: str) -> str:
    """Remove diacritics: 'ação' -> 'acao'."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: Optional[str], config: Optional[NormalizerConfig] = None) -> str:
    """Canonicalize raw text for matching.

    Never raises: None or empty input yields an empty string.
    """
    if not text:
        return ""
    cfg = config or DEFAULT_NORMALIZER_CONFIG
    result = str(text)

    if cfg.lowercase:
        result = result.lower()
    if cfg.strip_accents:
        result = strip_accents(result)
    if cfg.replace_punctuation:
        result = _PUNCTUATION_RE.sub(" ", result)
    if cfg.collapse_whitespace:
        result = _WHITESPACE_RE.sub(" ", result).strip()

    return result
