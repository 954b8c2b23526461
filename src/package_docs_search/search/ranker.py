"""Rank index chunks against a free-text query.

A query that parses to a structured type signature is matched by type
distance; anything else (typically a bare word) is matched by name.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
import logging

from ..domain.model import Chunk
from .engine import DEFAULT_TYPE_ENGINE, TypeEngine
from .types import Type, Var


logger = logging.getLogger(__name__)


class QueryKind(str, Enum):
    NAME = "name"
    TYPE = "type"


@dataclass(slots=True, frozen=True)
class RankedChunk:
    score: float
    chunk: Chunk


def classify_query(query: str, engine: TypeEngine = DEFAULT_TYPE_ENGINE) -> tuple[QueryKind, Type]:
    """Parse and normalize a query, deciding whether it is a name or type query."""
    query_type = engine.normalize(engine.parse_type(query))
    if isinstance(query_type, Var):
        return QueryKind.NAME, query_type
    return QueryKind.TYPE, query_type


def rank(
    query: str,
    chunks: Sequence[Chunk],
    engine: TypeEngine = DEFAULT_TYPE_ENGINE,
    classified: tuple[QueryKind, Type] | None = None,
) -> list[RankedChunk]:
    """Score every chunk, keep those within the low penalty and sort best first.

    ``classified`` is a result of :func:`classify_query` for ``query``, passed
    by callers that already needed it. The sort is stable, so equally scored
    chunks keep their index order.
    """
    kind, query_type = classified or classify_query(query, engine)
    if kind is QueryKind.NAME:
        scored = (RankedChunk(engine.name_distance(query, chunk.raw_entry.name), chunk) for chunk in chunks)
    else:
        scored = (
            RankedChunk(engine.type_distance(query_type, chunk.normalized_entry.type), chunk) for chunk in chunks
        )

    results = sorted(
        (ranked for ranked in scored if ranked.score <= engine.low_penalty),
        key=lambda ranked: ranked.score,
    )
    logger.debug("Ranked %s query %r: %d of %d chunks kept", kind.value, query, len(results), len(chunks))
    return results
