"""Prometheus metrics for engine operations."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


SEARCH_COUNT = Counter(
    "memsearch_searches_total",
    "Total searches by query cache outcome",
    ["engine", "cache"],
)

SEARCH_LATENCY = Histogram(
    "memsearch_search_latency_seconds",
    "Search latency in seconds",
    ["engine"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

ERROR_COUNT = Counter(
    "memsearch_errors_total",
    "Total errors raised by engine operations",
    ["engine", "error_type"],
)

INDEX_DOC_COUNT = Gauge(
    "memsearch_documents",
    "Documents held in the store",
    ["engine"],
)

INDEX_TERM_COUNT = Gauge(
    "memsearch_index_terms",
    "Distinct stemmed terms in the inverted index",
    ["engine"],
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()

