"""Fuzzy matching for typo-tolerant search.

This module provides edit distance calculation, a memoizing distance cache
shared by the index and the scorer, and fuzzy term lookup against an index
vocabulary.

A term matches when its edit distance to the query term is strictly below the
match threshold (3 by default), so up to two typos are tolerated regardless of
term length.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable


DEFAULT_MATCH_THRESHOLD = 3


def levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    Uses the standard dynamic programming table with unit cost for every
    insertion, deletion and substitution, keeping only two rows at a time.

    Args:
        s1: First string.
        s2: Second string.

    Returns:
        The minimum number of single-character edits needed to change s1
        into s2.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("hello", "hallo")
        1
        >>> levenshtein_distance("", "abc")
        3
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    # Use shorter string as columns for space efficiency
    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)
    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,  # deletion
                curr_row[i - 1] + 1,  # insertion
                prev_row[i - 1] + cost,  # substitution
            )
        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


class EditDistanceCache:
    """Memoizes edit distances by string pair.

    Entries are never evicted. Since the distance is symmetric the pair is
    stored in sorted order, so ``distance(a, b)`` and ``distance(b, a)`` share
    one entry.
    """

    def __init__(self) -> None:
        self._distances: dict[tuple[str, str], int] = {}
        self.hits = 0
        self.misses = 0

    def distance(self, a: str, b: str) -> int:
        key = (a, b) if a <= b else (b, a)
        cached = self._distances.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        result = levenshtein_distance(a, b)
        self._distances[key] = result
        return result

    def __len__(self) -> int:
        return len(self._distances)

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        a, b = pair
        return ((a, b) if a <= b else (b, a)) in self._distances

    def clear(self) -> None:
        self._distances.clear()
        self.hits = 0
        self.misses = 0


def find_fuzzy_matches(
    query_term: str,
    vocabulary: Iterable[str],
    threshold: int = DEFAULT_MATCH_THRESHOLD,
    distance: Callable[[str, str], int] = levenshtein_distance,
) -> list[tuple[str, int]]:
    """Find terms in vocabulary that fuzzy-match the query term.

    Args:
        query_term: The stemmed term to match (may contain typos).
        vocabulary: Indexed terms to match against.
        threshold: Terms match when their distance is strictly below this.
        distance: Distance function, usually ``EditDistanceCache.distance``.

    Returns:
        List of (matching_term, edit_distance) tuples in vocabulary order.
        Exact matches have distance 0.
    """
    matches: list[tuple[str, int]] = []
    for term in vocabulary:
        # Length difference is a lower bound on the distance
        if abs(len(query_term) - len(term)) >= threshold:
            continue
        term_distance = distance(query_term, term)
        if term_distance < threshold:
            matches.append((term, term_distance))
    return matches
