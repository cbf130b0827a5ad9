"""
Text helpers shared by the classifier and the fact extractors.

Matching is whole-keyword: "bar" matches "un bar sympa" but not "barbecue".
Keywords may span several words ("accessible en fauteuil").
"""
import re
from functools import lru_cache
from typing import Iterable, List, Optional


@lru_cache(maxsize=2048)
def _keyword_pattern(keyword: str) -> "re.Pattern":
    # \w is unicode-aware, so accented letters count as word characters
    return re.compile(r"(?<!\w)" + re.escape(keyword.lower()) + r"(?!\w)")


def contains_keyword(text: str, keyword: str) -> bool:
    """Case-insensitive whole-keyword match."""
    if not text or not keyword:
        return False
    return _keyword_pattern(keyword).search(text.lower()) is not None


def first_keyword(text: str, keywords: Iterable[str]) -> Optional[str]:
    """Return the first keyword found in text, or None."""
    for keyword in keywords:
        if contains_keyword(text, keyword):
            return keyword
    return None


def matching_keywords(text: str, keywords: Iterable[str]) -> List[str]:
    """Return every keyword found in text, in keyword order."""
    return [keyword for keyword in keywords if contains_keyword(text, keyword)]


def scrub(text: str, phrases: Iterable[str]) -> str:
    """Blank out phrases so their words cannot trigger a shorter keyword."""
    cleaned = text.lower()
    for phrase in phrases:
        cleaned = _keyword_pattern(phrase).sub(" ", cleaned)
    return cleaned


def dedupe(values: Iterable[str]) -> List[str]:
    """Remove case-insensitive duplicates, keeping first-seen order and casing."""
    seen = set()
    result = []
    for value in values:
        key = value.casefold()
        if key in seen:
            continue
        seen.add(key)
        result.append(value)
    return result
