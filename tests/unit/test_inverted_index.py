"""Unit tests for the fuzzy inverted index."""

import pytest

from memsearch.search.document_store import DocumentStore
from memsearch.search.fuzzy import EditDistanceCache
from memsearch.search.inverted_index import InvertedIndex
from memsearch.search.schema import Schema


@pytest.fixture
def schema():
    return Schema.from_mapping({"title": "string", "author": "string", "year": "number"})


@pytest.fixture
def store():
    return DocumentStore()


@pytest.fixture
def index(schema):
    return InvertedIndex(schema)


@pytest.mark.unit
class TestIndexing:
    def test_indexes_stems_of_string_fields_only(self, index, store):
        stored = store.add({"title": "The Great Gatsby", "author": "Fitzgerald", "year": 1925})

        index.index(stored)

        assert sorted(index.terms()) == ["fitzgerald", "gatsbi", "great", "th"]
        assert index.postings("great") == frozenset({stored})
        assert "1925" not in index

    def test_shared_terms_share_a_bucket(self, index, store):
        gatsby = store.add({"title": "The Great Gatsby", "author": "Fitzgerald", "year": 1925})
        expectations = store.add({"title": "Great Expectations", "author": "Dickens", "year": 1861})

        index.index(gatsby)
        index.index(expectations)

        assert index.postings("great") == frozenset({gatsby, expectations})
        assert index.postings("missing") == frozenset()

    def test_repeated_term_in_one_document_indexed_once(self, index, store):
        stored = store.add({"title": "Dune Dune", "author": "dune", "year": 1965})

        index.index(stored)

        assert index.postings("dun") == frozenset({stored})
        assert len(index) == 1


@pytest.mark.unit
class TestDeindexing:
    def test_removes_document_and_empty_buckets(self, index, store):
        gatsby = store.add({"title": "The Great Gatsby", "author": "Fitzgerald", "year": 1925})
        expectations = store.add({"title": "Great Expectations", "author": "Dickens", "year": 1861})
        index.index(gatsby)
        index.index(expectations)

        touched = index.deindex(gatsby.document)

        assert touched == 4
        assert "gatsbi" not in index
        assert "th" not in index
        assert index.postings("great") == frozenset({expectations})

    def test_removes_structural_duplicates_together(self, index, store):
        first = store.add({"title": "Dune", "author": "Herbert", "year": 1965})
        second = store.add({"title": "Dune", "author": "Herbert", "year": 1965})
        index.index(first)
        index.index(second)

        index.deindex(first)

        assert len(index) == 0

    def test_absent_document_touches_nothing(self, index, store):
        index.index(store.add({"title": "Dune", "author": "Herbert", "year": 1965}))

        assert index.deindex({"title": "Emma", "author": "Austen", "year": 1815}) == 0
        assert len(index) == 2


@pytest.mark.unit
class TestCandidates:
    def test_fuzzy_lookup_ordered_by_insertion(self, index, store):
        gatsby = store.add({"title": "The Great Gatsby", "author": "Fitzgerald", "year": 1925})
        expectations = store.add({"title": "Great Expectations", "author": "Dickens", "year": 1861})
        index.index(expectations)
        index.index(gatsby)

        assert index.candidates(["graet"]) == [gatsby, expectations]

    def test_no_match_beyond_threshold(self, index, store):
        index.index(store.add({"title": "Dune", "author": "Herbert", "year": 1965}))

        assert index.candidates(["zzzzzz"]) == []

    def test_any_stem_contributes(self, index, store):
        dune = store.add({"title": "Dune", "author": "Herbert", "year": 1965})
        emma = store.add({"title": "Emma", "author": "Austen", "year": 1815})
        index.index(dune)
        index.index(emma)

        assert index.candidates(["austen", "herbert"]) == [dune, emma]

    def test_shares_distance_cache(self, schema, store):
        distances = EditDistanceCache()
        index = InvertedIndex(schema, distances)
        index.index(store.add({"title": "Dune", "author": "Herbert", "year": 1965}))

        index.candidates(["dun"])

        assert ("dun", "dun") in distances
        assert ("dun", "herbert") not in distances

    def test_custom_threshold(self, schema, store):
        index = InvertedIndex(schema, match_distance_threshold=1)
        index.index(store.add({"title": "Dune", "author": "Herbert", "year": 1965}))

        assert index.candidates(["don"]) == []
        assert len(index.candidates(["dun"])) == 1

    def test_clear(self, index, store):
        index.index(store.add({"title": "Dune", "author": "Herbert", "year": 1965}))

        index.clear()

        assert len(index) == 0
        assert index.candidates(["dun"]) == []
