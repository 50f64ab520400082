"""Relevance scoring for a (document, query) pair.

Scores are built from edit-distance heuristics and field weights only:

- string fields earn a phrase bonus for contiguous multi-word matches and a
  smaller bonus for every fuzzy word match
- number fields earn the field weight when a query word equals the value
- boolean fields earn the field weight when a query word is the literal
  ``true`` / ``false`` equal to the value

A total score of zero means the document does not match.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import math
from typing import Any

from memsearch.search.analyzers import AnalyzedQuery, analyze_text, normalize_text
from memsearch.search.fuzzy import DEFAULT_MATCH_THRESHOLD, EditDistanceCache
from memsearch.search.schema import Field, FieldType


DEFAULT_PHRASE_WEIGHT_FACTOR = 5.0

_BOOLEAN_WORDS = {"true": True, "false": False}


class Scorer:
    """Weighted multi-field scorer sharing the engine's distance cache."""

    def __init__(
        self,
        distances: EditDistanceCache | None = None,
        *,
        match_distance_threshold: int = DEFAULT_MATCH_THRESHOLD,
        phrase_weight_factor: float = DEFAULT_PHRASE_WEIGHT_FACTOR,
    ) -> None:
        self._distances = distances if distances is not None else EditDistanceCache()
        self.match_distance_threshold = match_distance_threshold
        self.phrase_weight_factor = phrase_weight_factor

    def score(self, document: Mapping[str, Any], query: AnalyzedQuery, fields: Sequence[Field]) -> float:
        """Return the summed contribution of every field present on ``document``."""
        total = 0.0
        for field in fields:
            if field.name not in document:
                continue
            value = document[field.name]
            weight = field.weight

            if field.field_type is FieldType.STRING:
                text = normalize_text(value)
                if len(query.stems) > 1:
                    total += self.phrase_score(text, query.phrase, weight)
                total += self.word_score(text, query.stems, weight)
            elif field.field_type is FieldType.NUMBER:
                total += self.number_score(value, query.words, weight)
            elif field.field_type is FieldType.BOOLEAN:
                total += self.boolean_score(value, query.words, weight)
        return total

    def phrase_score(self, text: str, phrase: str, weight: float) -> float:
        """Slide a phrase-sized window over ``text`` and reward close windows.

        A matching window scores ``weight * factor / (distance + 1)`` and the
        scan skips past it; otherwise the window advances one character.
        """
        score = 0.0
        width = len(phrase)
        if width == 0:
            return score

        position = 0
        last_start = len(text) - width
        while position <= last_start:
            window = text[position : position + width]
            distance = self._distances.distance(phrase, window)
            if distance < self.match_distance_threshold:
                score += weight * self.phrase_weight_factor / (distance + 1)
                position += width
            else:
                position += 1
        return score

    def word_score(self, text: str, stems: Sequence[str], weight: float) -> float:
        """Reward every (query stem, field stem) pair within the match threshold."""
        score = 0.0
        field_stems = analyze_text(text)
        for query_stem in stems:
            for field_stem in field_stems:
                distance = self._distances.distance(query_stem, field_stem)
                if distance < self.match_distance_threshold:
                    score += weight / (distance + 1)
        return score

    def number_score(self, value: float, words: Sequence[str], weight: float) -> float:
        score = 0.0
        for word in words:
            number = _parse_number(word)
            if number is not None and number == value:
                score += weight
        return score

    def boolean_score(self, value: bool, words: Sequence[str], weight: float) -> float:
        score = 0.0
        for word in words:
            if word in _BOOLEAN_WORDS and _BOOLEAN_WORDS[word] is value:
                score += weight
        return score


def _parse_number(word: str) -> float | None:
    try:
        number = float(word)
    except ValueError:
        return None
    return number if math.isfinite(number) else None
