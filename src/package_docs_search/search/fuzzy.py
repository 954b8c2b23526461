"""Typo-tolerant matching of query words against documented names.

Smart defaults:
- No fuzzy matching for very short terms (1-2 chars)
- Max edit distance of 1 for terms of 3-5 chars
- Max edit distance of 2 for longer terms
"""

from __future__ import annotations

from collections.abc import Iterable


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    When ``max_distance`` is given the computation stops early and returns
    ``max_distance + 1`` once the distance is known to exceed it.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("", "abc")
        3
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    # Shorter string indexes the columns
    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)
    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,
                curr_row[i - 1] + 1,
                prev_row[i - 1] + cost,
            )
            row_min = min(row_min, curr_row[i])

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def get_max_edit_distance(term_length: int) -> int:
    """Maximum number of typos tolerated for a term of the given length."""
    if term_length <= 2:
        return 0
    if term_length <= 5:
        return 1
    return 2


def is_typo_of(query: str, name: str) -> bool:
    """Whether ``query`` is within the tolerated edit distance of ``name`` (case-insensitive)."""
    max_distance = get_max_edit_distance(len(query))
    if max_distance == 0:
        return False
    return levenshtein_distance(query.lower(), name.lower(), max_distance) <= max_distance


def find_fuzzy_matches(
    query_term: str,
    vocabulary: Iterable[str],
    max_distance: int | None = None,
    limit: int = 5,
) -> list[tuple[str, int]]:
    """Find vocabulary terms that fuzzy-match the query term.

    ``max_distance`` defaults to the smart default for the term length.
    Returns ``(term, distance)`` pairs, closest first then alphabetical,
    with duplicates collapsed.
    """
    if not query_term:
        return []

    query_lower = query_term.lower()
    if max_distance is None:
        max_distance = get_max_edit_distance(len(query_term))

    matches: dict[str, int] = {}
    for term in vocabulary:
        if term in matches:
            continue
        term_lower = term.lower()
        if abs(len(query_lower) - len(term_lower)) > max_distance:
            continue
        distance = levenshtein_distance(query_lower, term_lower, max_distance)
        if distance <= max_distance:
            matches[term] = distance

    ranked = sorted(matches.items(), key=lambda item: (item[1], item[0].lower()))
    return ranked[:limit]
