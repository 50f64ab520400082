"""Cache of ranked hit lists keyed by the canonical form of a query.

Entries are written after scoring, dedup and sort but before the ``score``
post-filter, so a repeated query with a different score threshold is served
from the cache.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import TYPE_CHECKING, Any

import orjson

from memsearch.search.document_store import StoredDocument, canonical_value


if TYPE_CHECKING:
    from memsearch.domain.search import SearchParameters

RankedHits = tuple[tuple[float, StoredDocument], ...]


def make_cache_key(query: str, parameters: SearchParameters) -> bytes:
    """Serialize the parts of a search that determine its ranked list."""
    payload: dict[str, Any] = {
        "query": query,
        "fields": parameters.model_dump(mode="json")["fields"],
        "where": parameters.where,
    }
    return orjson.dumps(
        canonical_value(payload),
        option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS,
        default=str,
    )


class QueryCache:
    """Optionally bounded LRU mapping of cache key to ranked hits."""

    def __init__(self, max_entries: int | None = None) -> None:
        self.max_entries = max_entries
        self._entries: OrderedDict[bytes, RankedHits] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: bytes) -> RankedHits | None:
        ranked = self._entries.get(key)
        if ranked is None:
            self.misses += 1
            return None
        self.hits += 1
        self._entries.move_to_end(key)
        return ranked

    def put(self, key: bytes, ranked: RankedHits) -> None:
        self._entries[key] = ranked
        self._entries.move_to_end(key)
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
