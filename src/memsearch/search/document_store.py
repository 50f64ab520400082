"""In-memory document store with structural document identity.

Documents carry no id field. Two documents are the same document when they
have the same keys and the same value under every key, which is decided by
comparing canonical sorted-key serializations. Values are compared the way
Python compares them: ``1925`` and ``1925.0`` are equal, ``True`` and ``1`` are
not.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
import math
from typing import Any

import orjson


# orjson serializes integers only within this range
_MIN_NATIVE_INT = -(2**63)
_MAX_NATIVE_INT = 2**64 - 1


def canonical_value(value: Any) -> Any:
    """Rewrite ``value`` so that equal values serialize to identical bytes.

    Integral floats become ints. Ints orjson cannot encode and non-finite
    floats become tagged strings. Booleans are left alone, so they never
    collide with ``0`` or ``1``.

    Examples:
        >>> canonical_value({"year": 1925.0})
        {'year': 1925}
        >>> canonical_value(10**20)
        {'$int': '100000000000000000000'}
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return {"$float": repr(value)}
        if not value.is_integer():
            return value
        value = int(value)
    if isinstance(value, int):
        if _MIN_NATIVE_INT <= value <= _MAX_NATIVE_INT:
            return int(value)
        return {"$int": str(value)}
    if isinstance(value, Mapping):
        return {key: canonical_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [canonical_value(item) for item in value]
    return value


def document_key(document: Mapping[str, Any]) -> bytes:
    """Return the canonical serialization used for structural equality.

    Examples:
        >>> document_key({"b": 1, "a": "x"}) == document_key({"a": "x", "b": 1})
        True
    """
    return orjson.dumps(
        canonical_value(document),
        option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS,
        default=str,
    )


def documents_equal(first: Mapping[str, Any], second: Mapping[str, Any]) -> bool:
    """Compare two documents structurally, ignoring key order."""
    return document_key(first) == document_key(second)


@dataclass(frozen=True)
class StoredDocument:
    """A document copy held by the store.

    ``doc_id`` is assigned in insertion order and is the tie-break for equal
    scores. Equal documents added twice get distinct ids and the same key.
    """

    doc_id: int
    key: bytes
    document: Mapping[str, Any] = field(compare=False, repr=False)


class DocumentStore:
    """Holds validated documents in insertion order."""

    def __init__(self) -> None:
        self._documents: dict[int, StoredDocument] = {}
        self._ids_by_key: dict[bytes, list[int]] = {}
        self._next_id = 0

    def add(self, document: Mapping[str, Any]) -> StoredDocument:
        """Store a shallow copy of ``document`` and return its stored entry."""
        copy = dict(document)
        stored = StoredDocument(doc_id=self._next_id, key=document_key(copy), document=copy)
        self._next_id += 1
        self._documents[stored.doc_id] = stored
        self._ids_by_key.setdefault(stored.key, []).append(stored.doc_id)
        return stored

    def find(self, document: Mapping[str, Any]) -> list[StoredDocument]:
        """Return every stored entry structurally equal to ``document``."""
        ids = self._ids_by_key.get(document_key(document), [])
        return [self._documents[doc_id] for doc_id in ids]

    def remove(self, document: Mapping[str, Any]) -> list[StoredDocument]:
        """Remove every entry equal to ``document``; absent documents are a no-op."""
        ids = self._ids_by_key.pop(document_key(document), [])
        return [self._documents.pop(doc_id) for doc_id in ids]

    def get(self, doc_id: int) -> StoredDocument | None:
        return self._documents.get(doc_id)

    def __contains__(self, document: object) -> bool:
        if isinstance(document, StoredDocument):
            return self._documents.get(document.doc_id) is document
        if isinstance(document, Mapping):
            return document_key(document) in self._ids_by_key
        return False

    def __iter__(self) -> Iterator[StoredDocument]:
        return iter(list(self._documents.values()))

    def __len__(self) -> int:
        return len(self._documents)

    def clear(self) -> None:
        self._documents.clear()
        self._ids_by_key.clear()
