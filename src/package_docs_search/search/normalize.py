"""Rename type variables to a canonical sequence.

Structurally identical signatures compare equal after normalization, e.g.
``x -> List x`` and ``item -> List item`` both become ``a -> List a``.
Constrained variables (``number``, ``comparable``, ``appendable``,
``compappend``) keep their class prefix since the constraint is meaningful.
"""

from __future__ import annotations

from string import ascii_lowercase

from .types import Apply, Function, Record, Tuple, Type, Var


CONSTRAINED_PREFIXES = ("compappend", "comparable", "appendable", "number")


def _constraint_of(name: str) -> str | None:
    for prefix in CONSTRAINED_PREFIXES:
        if name.startswith(prefix):
            return prefix
    return None


class _Renamer:
    def __init__(self) -> None:
        self.mapping: dict[str, str] = {}
        self.plain_count = 0
        self.constrained_counts: dict[str, int] = {}

    def rename(self, name: str) -> str:
        if name in self.mapping:
            return self.mapping[name]
        constraint = _constraint_of(name)
        if constraint is not None:
            count = self.constrained_counts.get(constraint, 0)
            self.constrained_counts[constraint] = count + 1
            fresh = constraint if count == 0 else f"{constraint}{count}"
        else:
            index = self.plain_count
            self.plain_count += 1
            fresh = ascii_lowercase[index % 26]
            if index >= 26:
                fresh += str(index // 26)
        self.mapping[name] = fresh
        return fresh

    def walk(self, tipe: Type) -> Type:
        match tipe:
            case Var(name=name):
                return Var(self.rename(name))
            case Apply(name=name, args=args):
                return Apply(name, tuple(self.walk(arg) for arg in args))
            case Function(args=args, result=result):
                new_args = tuple(self.walk(arg) for arg in args)
                return Function(new_args, self.walk(result))
            case Tuple(items=items):
                return Tuple(tuple(self.walk(item) for item in items))
            case Record(fields=fields, extends=extends):
                new_extends = self.rename(extends) if extends else None
                return Record(tuple((name, self.walk(field)) for name, field in fields), new_extends)
        raise TypeError(f"Unsupported type node: {tipe!r}")


def normalize(tipe: Type) -> Type:
    """Return ``tipe`` with its variables renamed in order of first appearance."""
    return _Renamer().walk(tipe)
