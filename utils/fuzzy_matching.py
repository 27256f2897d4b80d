"""
Shared text matching utilities for game title reconciliation.
Used by the matcher service.
"""
import re
from typing import Optional

from rapidfuzz.distance import Levenshtein

from utils.constants import STOPWORDS

_NON_WORD_RE = re.compile(r'[^\w\s]|_')


def normalize(title: Optional[str]) -> str:
    """
    Normalize a game title into a canonical comparison key.

    Args:
        title: Raw title as provided by a storefront or the catalog

    Returns:
        Lowercased title with punctuation replaced by spaces, standalone
        stopwords removed and whitespace collapsed. Empty for empty input.
    """
    if not title:
        return ""

    text = title.lower()

    # Anything that is not a letter, digit or whitespace becomes a separator
    text = _NON_WORD_RE.sub(' ', text)

    # Splitting also collapses runs of whitespace and trims the ends
    words = [word for word in text.split() if word not in STOPWORDS]

    return ' '.join(words)


def strip_whitespace(text: str) -> str:
    """Remove every whitespace character from text."""
    return ''.join(text.split())


def levenshtein_distance(text1: str, text2: str) -> int:
    """Edit distance where insertions, deletions and substitutions each cost 1."""
    return Levenshtein.distance(text1, text2)


def calculate_similarity(text1: str, text2: str) -> float:
    """
    Calculate edit-distance similarity between two strings.

    Args:
        text1: First text to compare
        text2: Second text to compare

    Returns:
        1 - distance / length of the longer string, from 0.0 to 1.0
    """
    longest = max(len(text1), len(text2))
    if longest == 0:
        return 1.0

    return 1 - levenshtein_distance(text1, text2) / longest


def similarity_percent(similarity: float) -> int:
    """Round a 0.0-1.0 similarity to a whole percentage, halves rounding up."""
    return int(similarity * 100 + 0.5)
