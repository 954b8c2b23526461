"""Domain model - package catalog entries, documentation modules and index chunks.

Value objects coming off the wire (``Summary``, ``VersionContext``, ``Entry``,
``Module``) are Pydantic dataclasses so they are validated at construction.
Index records (``IndexedEntry``, ``Chunk``, ``PackageInfo``) carry parsed
type trees and are plain frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass as plain_dataclass
from typing import TYPE_CHECKING

from pydantic import Field
from pydantic.dataclasses import dataclass

from .name import Name


if TYPE_CHECKING:
    from ..search.types import Type


@dataclass(frozen=True)
class Summary:
    """Catalog entry for one package.

    ``identifier`` is conventionally ``user/project`` and ``versions`` is
    ordered newest-first.
    """

    identifier: str
    versions: tuple[str, ...] = ()
    summary: str = ""


@dataclass(frozen=True)
class VersionContext:
    """Resolved ``(user, project, version)`` triple addressing one release."""

    user: str = Field(min_length=1)
    project: str = Field(min_length=1)
    version: str = Field(min_length=1)

    @property
    def package_identifier(self) -> str:
        return f"{self.user}/{self.project}/{self.version}"

    def __str__(self) -> str:
        return self.package_identifier


@dataclass(frozen=True)
class Entry:
    """A documented value with its raw type signature text."""

    name: str
    comment: str = ""
    signature: str = ""


@dataclass(frozen=True)
class Module:
    """One module's documentation: free-text comment plus its entries by local name."""

    name: str
    comment: str = ""
    entries: dict[str, Entry] = Field(default_factory=dict)


# A package's documentation keyed by module name
Package = dict[str, Module]


@plain_dataclass(frozen=True, slots=True)
class IndexedEntry:
    """An entry whose signature has been parsed into a type tree."""

    name: str
    comment: str
    type: Type


@plain_dataclass(frozen=True, slots=True)
class Chunk:
    """One documented identifier indexed for search."""

    package_identifier: str
    name: Name
    raw_entry: IndexedEntry
    normalized_entry: IndexedEntry


@plain_dataclass(frozen=True, slots=True)
class PackageInfo:
    """A successfully loaded package; replaced wholesale when reloaded."""

    package: Package
    context: VersionContext
    name_dictionary: dict[str, str]
