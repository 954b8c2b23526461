"""Parser for Elm-style type signatures.

Grammar (informal)::

    type   := app ("->" app)*
    app    := UPPER atom* | atom
    atom   := LOWER | UPPER | "(" ")" | "(" type ("," type)* ")" | record
    record := "{" "}" | "{" [LOWER "|"] field ("," field)* "}"
    field  := LOWER ":" type

``parse_signature`` is strict and raises :class:`TypeParseError`.
``parse_type`` is lenient: text that is not a signature becomes a single
type variable holding the stripped text, which is how bare-word queries are
told apart from structured type queries.
"""

from __future__ import annotations

import re

from ..errors import PackageDocsSearchError
from .types import Apply, Function, Record, Tuple, Type, Var


class TypeParseError(PackageDocsSearchError):
    """Raised when text is not a well-formed type signature."""


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<arrow>->)
    |(?P<upper>[A-Z][\w']*(?:\.[A-Z][\w']*)*)
    |(?P<lower>[a-z_][\w']*)
    |(?P<punct>[(),{}:|])
    """,
    re.VERBOSE,
)

_ATOM_STARTS = frozenset({"lower", "upper", "(", "{"})


def tokenize(text: str) -> list[tuple[str, str]]:
    """Split text into ``(kind, value)`` tokens, dropping whitespace."""
    tokens: list[tuple[str, str]] = []
    position = 0
    while position < len(text):
        match = _TOKEN_RE.match(text, position)
        if match is None:
            raise TypeParseError(f"Unexpected character {text[position]!r} at offset {position}")
        kind = match.lastgroup
        value = match.group()
        position = match.end()
        if kind == "ws":
            continue
        if kind == "punct":
            kind = value
        tokens.append((kind, value))
    return tokens


class _Parser:
    def __init__(self, tokens: list[tuple[str, str]]):
        self.tokens = tokens
        self.index = 0

    def peek(self) -> str | None:
        if self.index < len(self.tokens):
            return self.tokens[self.index][0]
        return None

    def accept(self, kind: str) -> str | None:
        if self.peek() == kind:
            value = self.tokens[self.index][1]
            self.index += 1
            return value
        return None

    def expect(self, kind: str) -> str:
        value = self.accept(kind)
        if value is None:
            found = self.peek() or "end of input"
            raise TypeParseError(f"Expected {kind!r} but found {found!r}")
        return value

    def parse(self) -> Type:
        tipe = self.parse_type()
        if self.peek() is not None:
            raise TypeParseError(f"Unexpected trailing token {self.tokens[self.index][1]!r}")
        return tipe

    def parse_type(self) -> Type:
        parts = [self.parse_app()]
        while self.accept("arrow") is not None:
            parts.append(self.parse_app())
        if len(parts) == 1:
            return parts[0]
        result = parts[-1]
        args = tuple(parts[:-1])
        if isinstance(result, Function):
            return Function(args + result.args, result.result)
        return Function(args, result)

    def parse_app(self) -> Type:
        name = self.accept("upper")
        if name is None:
            return self.parse_atom()
        args: list[Type] = []
        while self.peek() in _ATOM_STARTS:
            args.append(self.parse_atom())
        return Apply(name, tuple(args))

    def parse_atom(self) -> Type:
        kind = self.peek()
        if kind == "lower":
            return Var(self.expect("lower"))
        if kind == "upper":
            return Apply(self.expect("upper"))
        if kind == "(":
            return self.parse_parenthesized()
        if kind == "{":
            return self.parse_record()
        raise TypeParseError(f"Expected a type but found {kind or 'end of input'!r}")

    def parse_parenthesized(self) -> Type:
        self.expect("(")
        if self.accept(")") is not None:
            return Tuple()
        items = [self.parse_type()]
        while self.accept(",") is not None:
            items.append(self.parse_type())
        self.expect(")")
        if len(items) == 1:
            return items[0]
        return Tuple(tuple(items))

    def parse_record(self) -> Type:
        self.expect("{")
        if self.accept("}") is not None:
            return Record()
        extends = None
        first = self.expect("lower")
        if self.accept("|") is not None:
            extends = first
            first = self.expect("lower")
        fields = [self.parse_field(first)]
        while self.accept(",") is not None:
            fields.append(self.parse_field(self.expect("lower")))
        self.expect("}")
        return Record(tuple(fields), extends)

    def parse_field(self, name: str) -> tuple[str, Type]:
        self.expect(":")
        return name, self.parse_type()


def parse_signature(text: str) -> Type:
    """Strictly parse a type signature."""
    tokens = tokenize(text)
    if not tokens:
        raise TypeParseError("Empty type signature")
    return _Parser(tokens).parse()


def parse_type(text: str) -> Type:
    """Parse a type signature, falling back to a bare variable for free text."""
    try:
        return parse_signature(text)
    except (TypeParseError, RecursionError):
        # Nesting too deep for the recursive parser is treated as free text too
        return Var(text.strip())
