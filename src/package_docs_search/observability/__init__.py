"""Observability module for tracing, metrics, and logging."""

from .context import get_trace_context, start_trace, trace_context
from .logging import JsonFormatter, configure_logging
from .metrics import (
    CATALOG_FETCHES,
    DOCS_FETCHES,
    INDEXED_CHUNKS,
    INDEXED_PACKAGES,
    SEARCH_LATENCY,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from .tracing import TraceContextMiddleware, create_span, get_tracer, init_tracing


__all__ = [
    "CATALOG_FETCHES",
    "DOCS_FETCHES",
    "INDEXED_CHUNKS",
    "INDEXED_PACKAGES",
    "SEARCH_LATENCY",
    "JsonFormatter",
    "TraceContextMiddleware",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "start_trace",
    "trace_context",
    "track_latency",
]
