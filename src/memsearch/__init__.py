"""
memsearch: embeddable, schema-typed, in-memory full-text search.

Register typed fields, insert documents that match them, and run free-text
queries that return ranked, fuzzy-matched documents.
"""

from memsearch.config import EngineSettings
from memsearch.domain.search import EngineStats, SearchHit, SearchParameters, SearchResponse
from memsearch.engine import SearchEngine
from memsearch.exceptions import (
    ConfigurationError,
    ParameterError,
    SearchEngineError,
    TypeMismatchError,
    ValidationError,
)
from memsearch.search.filters import filter_hits_by_score


__all__ = [
    "ConfigurationError",
    "EngineSettings",
    "EngineStats",
    "ParameterError",
    "SearchEngine",
    "SearchEngineError",
    "SearchHit",
    "SearchParameters",
    "SearchResponse",
    "TypeMismatchError",
    "ValidationError",
    "filter_hits_by_score",
]
