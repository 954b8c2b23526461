"""Prometheus metrics for index loading and search."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


DOCS_FETCHES = Counter(
    "package_docs_fetches_total",
    "Per-package documentation fetches by outcome",
    ["outcome"],
)

CATALOG_FETCHES = Counter(
    "package_catalog_fetches_total",
    "Catalog fetches by outcome",
    ["outcome"],
)

INDEXED_CHUNKS = Gauge(
    "package_docs_indexed_chunks",
    "Number of chunks currently in the search index",
)

INDEXED_PACKAGES = Gauge(
    "package_docs_indexed_packages",
    "Number of packages currently in the search index",
)

SEARCH_LATENCY = Histogram(
    "package_docs_search_latency_seconds",
    "Time spent ranking chunks for a query",
    ["query_kind"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Observe the wall-clock duration of the block."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if labels:
            histogram.labels(**labels).observe(elapsed)
        else:
            histogram.observe(elapsed)


def get_metrics() -> bytes:
    """Render all metrics in the Prometheus text format."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
