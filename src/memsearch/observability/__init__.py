"""Observability module for logging, tracing, and metrics."""

from memsearch.observability.logging import JsonFormatter, configure_logging
from memsearch.observability.metrics import (
    ERROR_COUNT,
    INDEX_DOC_COUNT,
    INDEX_TERM_COUNT,
    SEARCH_COUNT,
    SEARCH_LATENCY,
    get_metrics,
    track_latency,
)
from memsearch.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "ERROR_COUNT",
    "INDEX_DOC_COUNT",
    "INDEX_TERM_COUNT",
    "SEARCH_COUNT",
    "SEARCH_LATENCY",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_tracer",
    "init_tracing",
    "track_latency",
]
