"""Qualified names: dotted identifiers split into a home path and a local name."""

from typing import Self

from pydantic.dataclasses import dataclass

from ..errors import InvalidNameError


@dataclass(frozen=True)
class Name:
    """Value object for a value living in a module path.

    ``home`` is the dot-joined module path (empty for a bare top-level
    identifier) and ``local`` is the terminal identifier.
    """

    home: str
    local: str

    @classmethod
    def parse(cls, text: str) -> Self:
        return parse(text)

    def __str__(self) -> str:
        return format_name(self)


def parse(text: str) -> Name:
    """Split ``text`` on dots into ``Name(home, local)``.

    An empty string yields ``Name(home="", local="")``; only a split that
    produces no segments at all is rejected.
    """
    segments = text.split(".")
    if not segments:
        raise InvalidNameError(f"Cannot parse qualified name from {text!r}")
    *home, local = segments
    return Name(home=".".join(home), local=local)


def format_name(name: Name) -> str:
    """Join the non-empty parts of a name with a dot."""
    return ".".join(part for part in (name.home, name.local) if part)


def anchor_path(name: Name) -> str:
    """Build the documentation anchor path, e.g. ``Json-Decode#map``."""
    return f"{name.home.replace('.', '-')}#{name.local}"
