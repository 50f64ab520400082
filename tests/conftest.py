"""Shared test fixtures and configuration."""

import os

import pytest

from memsearch import SearchEngine


BOOKS_SCHEMA = {"title": "string", "year": "number"}

GATSBY = {"title": "The Great Gatsby", "year": 1925}
EXPECTATIONS = {"title": "Great Expectations", "year": 1861}


@pytest.fixture(autouse=True)
def clean_memsearch_env(monkeypatch):
    """Keep MEMSEARCH_* variables from the developer's shell out of every test."""
    for key in list(os.environ):
        if key.upper().startswith("MEMSEARCH_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def books_engine():
    """Engine holding the two 'great' novels in insertion order."""
    engine = SearchEngine({"schema": dict(BOOKS_SCHEMA)})
    engine.add_docs([dict(GATSBY), dict(EXPECTATIONS)])
    return engine


@pytest.fixture
def catalog_engine():
    """Engine with string, number and boolean fields."""
    engine = SearchEngine(
        {
            "schema": {
                "title": "string",
                "author": "string",
                "year": "number",
                "available": "boolean",
            }
        }
    )
    engine.add_docs(
        [
            {"title": "Dune", "author": "Frank Herbert", "year": 1965, "available": True},
            {"title": "Dune Messiah", "author": "Frank Herbert", "year": 1969, "available": False},
            {"title": "The Great Gatsby", "author": "F. Scott Fitzgerald", "year": 1925, "available": True},
            {"title": "Great Expectations", "author": "Charles Dickens", "year": 1861, "available": False},
        ]
    )
    return engine
