"""Domain models for search requests and responses.

Following Cosmic Python principles:
- Value Objects are immutable (frozen=True)
- Parameter models reject unknown keys (extra="forbid")
- No infrastructure dependencies
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from memsearch.exceptions import ParameterError


class FieldParameters(BaseModel):
    """Per-field overrides supplied with a search."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    weight: float | None = Field(default=None, allow_inf_nan=False)


class ScoreConditions(BaseModel):
    """Score thresholds applied after ranking.

    Every threshold must lie strictly inside the open interval (0, 1).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    gt: float | None = Field(default=None, gt=0, lt=1)
    lt: float | None = Field(default=None, gt=0, lt=1)
    eq: float | None = Field(default=None, gt=0, lt=1)

    def accepts(self, score: float) -> bool:
        if self.gt is not None and score <= self.gt:
            return False
        if self.lt is not None and score >= self.lt:
            return False
        if self.eq is not None and score != self.eq:
            return False
        return True


class SearchParameters(BaseModel):
    """Value object for the optional parameters of a search.

    ``where`` is kept as raw data here; it is compiled against the schema by
    ``memsearch.search.filters.compile_where_clause``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    fields: dict[str, FieldParameters] | None = None
    where: dict[str, Any] | None = None
    score: ScoreConditions | None = None


class SearchHit(BaseModel):
    """Value object for a single ranked document."""

    model_config = ConfigDict(frozen=True)

    score: float
    document: dict[str, Any]


class SearchResponse(BaseModel):
    """Result of a search: timing, hit count and ranked hits.

    ``count`` is the number of hits after the score post-filter.
    """

    elapsed: float = Field(description="Wall time spent in the search, in milliseconds")
    count: int
    hits: list[SearchHit] = Field(default_factory=list)

    _sortable_fields: frozenset[str] = PrivateAttr(default_factory=frozenset)

    @classmethod
    def build(cls, *, elapsed: float, hits: list[SearchHit], sortable_fields: frozenset[str]) -> "SearchResponse":
        response = cls(elapsed=elapsed, count=len(hits), hits=hits)
        response._sortable_fields = sortable_fields
        return response

    def sort_by(self, field_name: str) -> list[SearchHit]:
        """Return the hits ordered lexicographically by a string field.

        Raises:
            ParameterError: If ``field_name`` is not a string field of the schema.
        """
        if field_name not in self._sortable_fields:
            msg = f"Invalid field '{field_name}'. Only string fields can be sorted."
            raise ParameterError(msg)
        return sorted(self.hits, key=lambda hit: hit.document[field_name])


class EngineStats(BaseModel):
    """Snapshot of engine sizes and cache effectiveness."""

    model_config = ConfigDict(frozen=True)

    document_count: int
    term_count: int
    distance_cache_size: int
    distance_cache_hits: int
    distance_cache_misses: int
    query_cache_size: int
    query_cache_hits: int
    query_cache_misses: int
