"""Service layer - fetch orchestration and the indexing session."""

from .fetch_orchestrator import FetchOrchestrator, derive_version_context
from .index_service import IndexService, IndexStatus


__all__ = [
    "FetchOrchestrator",
    "IndexService",
    "IndexStatus",
    "derive_version_context",
]
