"""Inverted index from stemmed terms to stored documents.

Only string fields are indexed. Each bucket holds references to the store's
entries; the store owns the documents and the index only points at them.
A term exists in the index iff its bucket is non-empty.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
from typing import Any

from memsearch.search.analyzers import analyze_text
from memsearch.search.document_store import StoredDocument, document_key
from memsearch.search.fuzzy import DEFAULT_MATCH_THRESHOLD, EditDistanceCache, find_fuzzy_matches
from memsearch.search.schema import Schema


logger = logging.getLogger(__name__)


class InvertedIndex:
    """Maps stemmed terms to the set of documents containing them."""

    def __init__(
        self,
        schema: Schema,
        distances: EditDistanceCache | None = None,
        *,
        match_distance_threshold: int = DEFAULT_MATCH_THRESHOLD,
    ) -> None:
        self._string_fields = schema.string_fields
        self._distances = distances if distances is not None else EditDistanceCache()
        self.match_distance_threshold = match_distance_threshold
        self._postings: dict[str, set[StoredDocument]] = {}

    def index(self, stored: StoredDocument) -> None:
        """Add ``stored`` to the bucket of every stem found in its string fields."""
        for field_name in self._string_fields:
            value = stored.document.get(field_name)
            if not isinstance(value, str):
                continue
            for term in analyze_text(value):
                self._postings.setdefault(term, set()).add(stored)

    def deindex(self, document: Mapping[str, Any] | StoredDocument) -> int:
        """Remove every entry structurally equal to ``document`` from all buckets.

        Empty buckets are deleted. Returns the number of buckets touched.
        """
        target = document.key if isinstance(document, StoredDocument) else document_key(document)
        touched = 0
        for term in list(self._postings):
            bucket = self._postings[term]
            matches = [stored for stored in bucket if stored.key == target]
            if not matches:
                continue
            touched += 1
            bucket.difference_update(matches)
            if not bucket:
                del self._postings[term]
        return touched

    def candidates(self, stems: Iterable[str]) -> list[StoredDocument]:
        """Return documents reachable from any stem within the match threshold.

        Results are ordered by insertion into the store so that ranking ties
        resolve deterministically.
        """
        found: set[StoredDocument] = set()
        vocabulary = list(self._postings)
        for query_term in stems:
            matches = find_fuzzy_matches(
                query_term,
                vocabulary,
                threshold=self.match_distance_threshold,
                distance=self._distances.distance,
            )
            for term, _distance in matches:
                found.update(self._postings[term])
        logger.debug("Fuzzy lookup matched %d candidate documents", len(found))
        return sorted(found, key=lambda stored: stored.doc_id)

    def postings(self, term: str) -> frozenset[StoredDocument]:
        """Return the documents indexed under ``term`` (empty when absent)."""
        return frozenset(self._postings.get(term, ()))

    def terms(self) -> list[str]:
        return list(self._postings)

    def __contains__(self, term: object) -> bool:
        return term in self._postings

    def __len__(self) -> int:
        return len(self._postings)

    def clear(self) -> None:
        self._postings.clear()
