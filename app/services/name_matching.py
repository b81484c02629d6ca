"""
Guest name matching.

Visitors type their own name; we compare it against the guest list after
normalizing both sides, first exactly and then by Levenshtein similarity.
This is a convenience for finding an invitation, not an identity check:
two similar names can collide and the hosts sort that out by hand.
"""

import re
from typing import Iterable, Optional

from app.schemas.guest import Guest

DEFAULT_THRESHOLD = 90.0

_NON_WORD = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(raw: Optional[str]) -> str:
    """Lower-case, drop punctuation and collapse whitespace."""
    if not raw:
        return ""
    text = _NON_WORD.sub("", raw.lower())
    return _WHITESPACE.sub(" ", text).strip()


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character edits turning ``a`` into ``b``."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(
                    previous[j - 1] + 1,  # substitution
                    current[j - 1] + 1,   # insertion
                    previous[j] + 1,      # deletion
                ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Similarity of two names in ``[0, 100]``, computed on normalized forms."""
    left = normalize_name(a)
    right = normalize_name(b)
    max_len = max(len(left), len(right))
    if max_len == 0:
        return 100.0
    distance = levenshtein_distance(left, right)
    return 100.0 * (max_len - distance) / max_len


def find_match(
    query: str,
    guests: Iterable[Guest],
    threshold: float = DEFAULT_THRESHOLD,
) -> Optional[Guest]:
    """
    Resolve a typed name to at most one guest.

    An exact match on the normalized name wins outright (first one in
    iteration order). Otherwise the guest with the highest similarity at or
    above ``threshold`` is returned; ties keep the earliest candidate.
    """
    guests = list(guests)
    normalized_query = normalize_name(query)

    for guest in guests:
        if normalize_name(guest.name) == normalized_query:
            return guest

    best_match = None
    best_score = 0.0
    for guest in guests:
        score = similarity(normalized_query, guest.name)
        if score >= threshold and score > best_score:
            best_score = score
            best_match = guest

    return best_match
