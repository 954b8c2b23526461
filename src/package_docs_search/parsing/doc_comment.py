"""Extract documented identifiers from module comments.

A module comment is prose interleaved with ``@docs`` directives::

    Helpers for decoding JSON.

    # Primitives
    @docs string, int, float

    # Mapping
    @docs map, map2 and a few more

Each directive lists names separated by commas. The comma split is naive: the
last name on a line is glued to whatever prose follows it, so when a piece is
not a clean identifier only its first word is kept and the rest of that
directive is ignored.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
import logging
import re

from ..domain.model import Chunk, IndexedEntry, Module
from ..domain.name import Name
from ..search.engine import DEFAULT_TYPE_ENGINE, TypeEngine


logger = logging.getLogger(__name__)

DOCS_MARKER = "\n@docs "

_IDENTIFIER_RE = re.compile(r"^(?:[A-Za-z][A-Za-z0-9_']*|\([^A-Za-z0-9_\s(),]+\))$")


def is_valid_identifier(text: str) -> bool:
    """Whether ``text`` is a value name like ``map2`` or an operator like ``(<|)``."""
    return bool(_IDENTIFIER_RE.match(text))


def _directive_names(directive: str, is_valid: Callable[[str], bool]) -> Iterator[str]:
    for raw_piece in directive.split(","):
        piece = raw_piece.strip()
        if is_valid(piece):
            yield piece
            continue

        words = raw_piece.lstrip().split()
        if words and is_valid(words[0]):
            yield words[0]
        return


def documented_names(comment: str, is_valid: Callable[[str], bool] = is_valid_identifier) -> list[str]:
    """List the names mentioned by ``@docs`` directives, in order, duplicates kept."""
    _, *directives = comment.split(DOCS_MARKER)
    names: list[str] = []
    for directive in directives:
        names.extend(_directive_names(directive, is_valid))
    return names


def build_chunks(
    package_identifier: str,
    module: Module,
    engine: TypeEngine = DEFAULT_TYPE_ENGINE,
    is_valid: Callable[[str], bool] = is_valid_identifier,
) -> list[Chunk]:
    """Resolve a module's documented names against its entries into index chunks.

    Names without a matching entry are dropped.
    """
    chunks: list[Chunk] = []
    for local in documented_names(module.comment, is_valid):
        entry = module.entries.get(local)
        if entry is None:
            logger.debug("Skipping undocumented name %s.%s in %s", module.name, local, package_identifier)
            continue
        raw_type = engine.parse_type(entry.signature)
        chunks.append(
            Chunk(
                package_identifier=package_identifier,
                name=Name(home=module.name, local=local),
                raw_entry=IndexedEntry(name=entry.name, comment=entry.comment, type=raw_type),
                normalized_entry=IndexedEntry(
                    name=entry.name, comment=entry.comment, type=engine.normalize(raw_type)
                ),
            )
        )
    return chunks
