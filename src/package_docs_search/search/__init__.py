"""Type-directed and name-based search over indexed chunks.

- types / type_parser / normalize: signature trees, parsing, variable renaming
- distance / fuzzy: scoring of names and types
- engine: the bundle used by the comment parser and the ranker
- ranker: filtering and ordering chunks for a query
"""
