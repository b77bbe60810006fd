"""
Similarity service: fuzzy matching for album and song names

Pure computation, no state. Number tokens never go through here: short
numeric strings produce too many false positives, so they are matched exactly.
"""
from collections import Counter
from typing import Iterable

DEFAULT_THRESHOLD = 0.80


def _bigrams(text: str) -> Counter:
    return Counter(text[i:i + 2] for i in range(len(text) - 1))


def similarity(first: str, second: str) -> float:
    """
    Dice coefficient over the character bigrams of two strings

    Rules:
    - whitespace is ignored
    - identical strings score 1.0
    - a string shorter than two characters scores 0.0 against anything else

    Args:
        first: first string
        second: second string

    Returns:
        score between 0.0 and 1.0 (symmetric)

    Examples:
        similarity("love story", "lovestory") -> 1.0
        similarity("love storry", "love story") -> 0.9411...
        similarity("red", "reputation") -> 0.1818...
    """
    first = "".join(first.split())
    second = "".join(second.split())

    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0

    first_bigrams = _bigrams(first)
    second_bigrams = _bigrams(second)
    overlap = sum((first_bigrams & second_bigrams).values())

    return (2.0 * overlap) / (len(first) + len(second) - 2)


def are_strings_similar_enough(first: str, second: str, threshold: float = DEFAULT_THRESHOLD) -> bool:
    """True when the similarity reaches the threshold (0.8 is natural, 1 is exact)"""
    return similarity(first, second) >= threshold


def matches_any(text: str, variants: Iterable[str], threshold: float = DEFAULT_THRESHOLD) -> bool:
    """True when text is similar enough to at least one accepted variant"""
    return any(are_strings_similar_enough(text, variant, threshold) for variant in variants)
