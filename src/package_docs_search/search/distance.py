"""Distance scoring between queries and documented entries.

Scores live in ``[NO_PENALTY, MAX_PENALTY]``; lower is a better match. Only
results scoring at most ``LOW_PENALTY`` are shown to users.
"""

from __future__ import annotations

from statistics import fmean

from .fuzzy import is_typo_of
from .types import Apply, Function, Record, Tuple, Type, Var


NO_PENALTY = 0.0
LOW_PENALTY = 0.25
MEDIUM_PENALTY = 0.5
HIGH_PENALTY = 0.75
MAX_PENALTY = 1.0

PREFIX_PENALTY = 0.1


def name_distance(query: str, name: str) -> float:
    """Score how well a free-text query matches a documented name."""
    query = query.strip()
    if not query:
        return MAX_PENALTY
    if query == name:
        return NO_PENALTY

    query_lower = query.lower()
    name_lower = name.lower()
    if name_lower.startswith(query_lower):
        return PREFIX_PENALTY
    if query_lower in name_lower or is_typo_of(query, name):
        return LOW_PENALTY
    return MAX_PENALTY


def type_distance(query: Type, candidate: Type) -> float:
    """Structural distance between two normalized types."""
    match query, candidate:
        case Var(name=left), Var(name=right):
            return NO_PENALTY if left == right else LOW_PENALTY
        case Var(), _:
            return MEDIUM_PENALTY
        case _, Var():
            return MEDIUM_PENALTY
        case Apply(), Apply():
            if query.short_name != candidate.short_name or len(query.args) != len(candidate.args):
                return MAX_PENALTY
            return _mean_distance(query.args, candidate.args)
        case Function(), Function():
            if len(query.args) != len(candidate.args):
                return MAX_PENALTY
            return _mean_distance((*query.args, query.result), (*candidate.args, candidate.result))
        case Tuple(), Tuple():
            if len(query.items) != len(candidate.items):
                return MAX_PENALTY
            return _mean_distance(query.items, candidate.items)
        case Record(), Record():
            return _record_distance(query, candidate)
    return MAX_PENALTY


def _mean_distance(left: tuple[Type, ...], right: tuple[Type, ...]) -> float:
    if not left:
        return NO_PENALTY
    return fmean(type_distance(a, b) for a, b in zip(left, right, strict=True))


def _record_distance(query: Record, candidate: Record) -> float:
    query_fields = query.field_map()
    candidate_fields = candidate.field_map()
    names = query_fields.keys() | candidate_fields.keys()
    if not names:
        return NO_PENALTY
    scores = []
    for name in names:
        if name in query_fields and name in candidate_fields:
            scores.append(type_distance(query_fields[name], candidate_fields[name]))
        else:
            scores.append(MAX_PENALTY)
    return fmean(scores)
