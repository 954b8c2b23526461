"""Parsers for package documentation text."""

from .doc_comment import build_chunks, documented_names, is_valid_identifier


__all__ = ["build_chunks", "documented_names", "is_valid_identifier"]
