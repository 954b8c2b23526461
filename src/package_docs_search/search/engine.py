"""Pluggable type engine used by the comment parser and the ranker."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from . import distance
from .normalize import normalize
from .type_parser import parse_type
from .types import Type


@dataclass(frozen=True, slots=True)
class TypeEngine:
    """Bundle of the type parsing, normalization and scoring functions."""

    parse_type: Callable[[str], Type] = parse_type
    normalize: Callable[[Type], Type] = normalize
    type_distance: Callable[[Type, Type], float] = distance.type_distance
    name_distance: Callable[[str, str], float] = distance.name_distance
    low_penalty: float = distance.LOW_PENALTY


DEFAULT_TYPE_ENGINE = TypeEngine()
