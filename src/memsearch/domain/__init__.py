"""Domain layer - request and response value objects with no engine dependencies."""

from memsearch.domain.search import (
    EngineStats,
    FieldParameters,
    ScoreConditions,
    SearchHit,
    SearchParameters,
    SearchResponse,
)


__all__ = [
    "EngineStats",
    "FieldParameters",
    "ScoreConditions",
    "SearchHit",
    "SearchParameters",
    "SearchResponse",
]
