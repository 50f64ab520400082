"""Search Engine - public entry point.

Wires the document store, inverted index, scorer, filters and caches into a
single object with a small interface:

- add_doc / add_docs: validate and index documents
- remove_doc / remove_docs: remove documents by structural equality
- search(query, parameters) -> SearchResponse
- filter_hits_by_score(hits, conditions) -> list[SearchHit]

A search moves through a fixed pipeline: validate parameters, look up the
query cache, fetch fuzzy candidates from the index, apply the ``where``
clause, score, drop zero scores, sort, deduplicate, cache the ranked list,
then apply the ``score`` post-filter. Any validation failure ends the search
before state is touched.

The engine is synchronous and not thread-safe. Confine an instance to one
thread or serialize access to it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
import dataclasses
import logging
import math
import time
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from memsearch.config import EngineSettings
from memsearch.domain.search import EngineStats, ScoreConditions, SearchHit, SearchParameters, SearchResponse
from memsearch.exceptions import ParameterError, SearchEngineError, ValidationError
from memsearch.observability.metrics import (
    ERROR_COUNT,
    INDEX_DOC_COUNT,
    INDEX_TERM_COUNT,
    SEARCH_COUNT,
    SEARCH_LATENCY,
    track_latency,
)
from memsearch.observability.tracing import create_span
from memsearch.search.analyzers import analyze_query
from memsearch.search.document_store import DocumentStore
from memsearch.search.filters import (
    FieldCondition,
    apply_where_clause,
    compile_where_clause,
    describe_validation_error,
    filter_hits_by_score,
)
from memsearch.search.fuzzy import EditDistanceCache
from memsearch.search.inverted_index import InvertedIndex
from memsearch.search.query_cache import QueryCache, RankedHits, make_cache_key
from memsearch.search.schema import Field, Schema
from memsearch.search.scorer import Scorer


logger = logging.getLogger(__name__)


def _batched(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class SearchEngine:
    """Schema-typed, in-memory full-text search engine.

    Example:
        engine = SearchEngine({"schema": {"title": "string", "year": "number"}})
        engine.add_docs([
            {"title": "The Great Gatsby", "year": 1925},
            {"title": "Great Expectations", "year": 1861},
        ])
        response = engine.search("great", {"where": {"year": {"gte": 1900}}})
    """

    def __init__(self, config: Mapping[str, Any], settings: EngineSettings | None = None):
        """Initialize the engine.

        Args:
            config: Mapping with exactly one key, ``schema``, mapping field
                names to ``"string"``, ``"number"`` or ``"boolean"``.
            settings: Engine tuning; defaults to ``EngineSettings()``.

        Raises:
            ConfigurationError: If ``config`` or its schema is malformed.
        """
        self.settings = settings or EngineSettings()
        self._schema = Schema.from_config(config)
        self._fields = self._schema.create_fields()
        self._fields_by_name = {field.name: field for field in self._fields}
        self._sortable_fields = frozenset(self._schema.string_fields)

        self._distances = EditDistanceCache()
        self._store = DocumentStore()
        self._index = InvertedIndex(
            self._schema,
            self._distances,
            match_distance_threshold=self.settings.match_distance_threshold,
        )
        self._scorer = Scorer(
            self._distances,
            match_distance_threshold=self.settings.match_distance_threshold,
            phrase_weight_factor=self.settings.phrase_weight_factor,
        )
        self._query_cache = QueryCache(max_entries=self.settings.query_cache_max_entries)

        logger.info(
            "Initialized SearchEngine '%s' with fields: %s",
            self.settings.engine_name,
            ", ".join(f"{name}:{kind.value}" for name, kind in self._schema.types.items()),
        )

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def fields(self) -> list[Field]:
        """Copies of the engine's fields with their current weights."""
        return [dataclasses.replace(field) for field in self._fields]

    @property
    def documents(self) -> list[dict[str, Any]]:
        """Copies of the stored documents in insertion order."""
        return [dict(stored.document) for stored in self._store]

    def __len__(self) -> int:
        return len(self._store)

    def stats(self) -> EngineStats:
        return EngineStats(
            document_count=len(self._store),
            term_count=len(self._index),
            distance_cache_size=len(self._distances),
            distance_cache_hits=self._distances.hits,
            distance_cache_misses=self._distances.misses,
            query_cache_size=len(self._query_cache),
            query_cache_hits=self._query_cache.hits,
            query_cache_misses=self._query_cache.misses,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_doc(self, document: Mapping[str, Any]) -> None:
        """Validate and insert one document.

        Raises:
            ValidationError: If the document does not match the schema.
        """
        self._add(document)
        self._after_mutation()

    def add_docs(self, documents: Iterable[Mapping[str, Any]]) -> None:
        """Insert documents in batches of ``settings.batch_size``.

        Documents are processed in order exactly as if ``add_doc`` were called
        for each one: an invalid document raises ``ValidationError`` and the
        documents before it stay committed.
        """
        items = list(documents)
        with create_span(
            "memsearch.add_docs",
            attributes={"memsearch.engine": self.settings.engine_name, "memsearch.documents": len(items)},
        ):
            try:
                for batch in _batched(items, self.settings.batch_size):
                    for document in batch:
                        self._add(document)
            finally:
                self._after_mutation()
        logger.debug("Added %d documents to '%s'", len(items), self.settings.engine_name)

    def remove_doc(self, document: Mapping[str, Any]) -> None:
        """Remove every stored document structurally equal to ``document``.

        Removing a document that is not present is a no-op.
        """
        if self._remove(document):
            self._after_mutation()

    def remove_docs(self, documents: Iterable[Mapping[str, Any]]) -> None:
        """Remove documents in batches of ``settings.batch_size``."""
        items = list(documents)
        removed = 0
        with create_span(
            "memsearch.remove_docs",
            attributes={"memsearch.engine": self.settings.engine_name, "memsearch.documents": len(items)},
        ):
            try:
                for batch in _batched(items, self.settings.batch_size):
                    for document in batch:
                        removed += self._remove(document)
            finally:
                if removed:
                    self._after_mutation()
        logger.debug("Removed %d stored documents from '%s'", removed, self.settings.engine_name)

    def set_field_weight(self, field_name: str, weight: float) -> float:
        """Set a field weight, clamped into the configured bounds.

        Returns:
            The weight actually applied.

        Raises:
            ParameterError: Unknown field, or a weight that is not a finite number.
        """
        field = self._fields_by_name.get(field_name)
        if field is None:
            msg = f"Field '{field_name}' is not in the schema."
            raise ParameterError(msg)
        if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not math.isfinite(weight):
            msg = f"Weight for field '{field_name}' must be a finite number, got {weight!r}"
            raise ParameterError(msg)
        self._apply_weight(field, weight)
        return field.weight

    def clear_cache(self) -> None:
        """Drop the query cache and the edit distance cache."""
        self._query_cache.clear()
        self._distances.clear()

    def _add(self, document: Mapping[str, Any]) -> None:
        self._schema.validate_document(document)
        stored = self._store.add(document)
        self._index.index(stored)

    def _remove(self, document: Mapping[str, Any]) -> int:
        if not isinstance(document, Mapping):
            msg = f"Document must be a mapping, got {type(document).__name__}"
            raise ValidationError(msg)
        removed = self._store.remove(document)
        if removed:
            self._index.deindex(removed[0])
        return len(removed)

    def _after_mutation(self) -> None:
        self._query_cache.clear()
        engine = self.settings.engine_name
        INDEX_DOC_COUNT.labels(engine=engine).set(len(self._store))
        INDEX_TERM_COUNT.labels(engine=engine).set(len(self._index))

    def _apply_weight(self, field: Field, weight: float) -> None:
        changed = field.set_weight(
            weight,
            min_weight=self.settings.min_field_weight,
            max_weight=self.settings.max_field_weight,
        )
        if changed:
            # Cached rankings were computed with the old weight
            self._query_cache.clear()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, query: str, parameters: Mapping[str, Any] | SearchParameters | None = None) -> SearchResponse:
        """Search documents with fuzzy, weighted scoring.

        Args:
            query: Free-text query
            parameters: Optional mapping with ``fields`` (per-field
                ``weight``), ``where`` (pre-scoring filters) and ``score``
                (post-ranking thresholds in (0, 1))

        Returns:
            SearchResponse with elapsed milliseconds, hit count and ranked hits

        Raises:
            ParameterError: Malformed parameters
            TypeMismatchError: A ``where`` operand of the wrong type
        """
        start = time.perf_counter()
        engine = self.settings.engine_name

        with (
            track_latency(SEARCH_LATENCY, engine=engine),
            create_span("memsearch.search", attributes={"memsearch.engine": engine}) as span,
        ):
            try:
                if not isinstance(query, str):
                    msg = f"Query must be a string, got {type(query).__name__}"
                    raise ParameterError(msg)

                params = self._parse_parameters(parameters)
                where = compile_where_clause(params.where, self._schema)
                self._apply_field_parameters(params)

                cache_key = make_cache_key(query, params)
                ranked = self._query_cache.get(cache_key) if self.settings.query_cache_enabled else None
                cache_status = "hit" if ranked is not None else "miss"
                if ranked is None:
                    ranked = self._rank(query, where)
                    if self.settings.query_cache_enabled:
                        self._query_cache.put(cache_key, ranked)

                hits = [SearchHit(score=score, document=dict(stored.document)) for score, stored in ranked]
                if params.score is not None:
                    hits = filter_hits_by_score(hits, params.score)
            except SearchEngineError as exc:
                ERROR_COUNT.labels(engine=engine, error_type=type(exc).__name__).inc()
                raise

            elapsed = time.perf_counter() - start
            span.set_attribute("memsearch.cache", cache_status)
            span.set_attribute("memsearch.hits", len(hits))

        SEARCH_COUNT.labels(engine=engine, cache=cache_status).inc()
        logger.debug("Search %r returned %d hits (cache %s)", query, len(hits), cache_status)

        return SearchResponse.build(elapsed=elapsed * 1000, hits=hits, sortable_fields=self._sortable_fields)

    def filter_hits_by_score(
        self,
        hits: Iterable[SearchHit],
        conditions: Mapping[str, Any] | ScoreConditions | None,
    ) -> list[SearchHit]:
        """Filter any previously obtained hit list by score thresholds."""
        return filter_hits_by_score(hits, conditions)

    def _parse_parameters(self, parameters: Mapping[str, Any] | SearchParameters | None) -> SearchParameters:
        if parameters is None:
            return SearchParameters()
        if isinstance(parameters, SearchParameters):
            params = parameters
        else:
            if not isinstance(parameters, Mapping):
                msg = f"Search parameters must be a mapping, got {type(parameters).__name__}"
                raise ParameterError(msg)
            for key in parameters:
                if key not in SearchParameters.model_fields:
                    msg = f"Unexpected parameter key '{key}'. Expected keys are 'fields', 'where', and 'score'"
                    raise ParameterError(msg)
            try:
                params = SearchParameters.model_validate(dict(parameters))
            except PydanticValidationError as exc:
                msg = f"Invalid search parameters: {describe_validation_error(exc)}"
                raise ParameterError(msg) from exc

        for field_name in params.fields or {}:
            if field_name not in self._schema:
                msg = f"Field '{field_name}' is not in the schema."
                raise ParameterError(msg)
        return params

    def _apply_field_parameters(self, params: SearchParameters) -> None:
        for field_name, field_params in (params.fields or {}).items():
            if field_params.weight is not None:
                self._apply_weight(self._fields_by_name[field_name], field_params.weight)

    def _rank(self, query: str, where: tuple[FieldCondition, ...]) -> RankedHits:
        analyzed = analyze_query(query)
        if not analyzed:
            return ()

        candidates = self._index.candidates(analyzed.stems)
        candidates = apply_where_clause(candidates, where, document_getter=lambda stored: stored.document)

        scored = [(self._scorer.score(stored.document, analyzed, self._fields), stored) for stored in candidates]
        scored = [item for item in scored if item[0] > 0]
        # Stable: equal scores keep insertion order
        scored.sort(key=lambda item: item[0], reverse=True)

        seen: set[bytes] = set()
        ranked = []
        for score, stored in scored:
            if stored.key in seen:
                continue
            seen.add(stored.key)
            ranked.append((score, stored))
        return tuple(ranked)
