"""Domain layer - names, catalog and documentation model, and the index state machine.

No HTTP clients or servers live here; everything is pure data and rules. The
state machine lives in ``domain.index_state`` and is imported from there
directly since it depends on the comment parser.
"""

from .model import Chunk, Entry, IndexedEntry, Module, PackageInfo, Summary, VersionContext
from .name import Name, anchor_path, format_name, parse


__all__ = [
    "Chunk",
    "Entry",
    "IndexedEntry",
    "Module",
    "Name",
    "PackageInfo",
    "Summary",
    "VersionContext",
    "anchor_path",
    "format_name",
    "parse",
]
