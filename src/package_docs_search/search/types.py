"""Type signature AST used for type-directed search."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Var:
    """A type variable such as ``a`` or ``comparable``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(slots=True, frozen=True)
class Apply:
    """A (possibly qualified) type constructor applied to arguments, e.g. ``List a``."""

    name: str
    args: tuple[Type, ...] = ()

    @property
    def short_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def __str__(self) -> str:
        if not self.args:
            return self.name
        rendered = " ".join(_wrap(arg) for arg in self.args)
        return f"{self.name} {rendered}"


@dataclass(slots=True, frozen=True)
class Function:
    """A curried function type flattened into its arguments and result."""

    args: tuple[Type, ...]
    result: Type

    def __str__(self) -> str:
        parts = [f"({arg})" if isinstance(arg, Function) else str(arg) for arg in self.args]
        return " -> ".join([*parts, str(self.result)])


@dataclass(slots=True, frozen=True)
class Tuple:
    """A tuple type; the empty tuple is the unit type ``()``."""

    items: tuple[Type, ...] = ()

    def __str__(self) -> str:
        return "(" + ", ".join(str(item) for item in self.items) + ")"


@dataclass(slots=True, frozen=True)
class Record:
    """A record type, optionally extending a type variable (``{ a | x : Int }``)."""

    fields: tuple[tuple[str, Type], ...] = ()
    extends: str | None = None

    def field_map(self) -> dict[str, Type]:
        return dict(self.fields)

    def __str__(self) -> str:
        body = ", ".join(f"{name} : {tipe}" for name, tipe in self.fields)
        if self.extends:
            return f"{{ {self.extends} | {body} }}"
        return f"{{ {body} }}" if body else "{}"


Type = Var | Apply | Function | Tuple | Record


def _wrap(tipe: Type) -> str:
    if isinstance(tipe, Function) or (isinstance(tipe, Apply) and tipe.args):
        return f"({tipe})"
    return str(tipe)
