"""Pydantic models for the package site's JSON payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from ..domain.model import Entry, Module, Package, Summary


class SummaryPayload(BaseModel):
    """One element of the ``/all-packages`` list."""

    model_config = ConfigDict(extra="ignore")

    name: str
    summary: str = ""
    versions: list[str] = Field(default_factory=list)

    def to_domain(self) -> Summary:
        return Summary(identifier=self.name, versions=tuple(self.versions), summary=self.summary)


class ValuePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    comment: str = ""
    type: str = ""


class ModulePayload(BaseModel):
    """One element of a release's ``docs.json`` list."""

    model_config = ConfigDict(extra="ignore")

    name: str
    comment: str = ""
    values: list[ValuePayload] = Field(default_factory=list)
    binops: list[ValuePayload] = Field(default_factory=list)

    def to_domain(self) -> Module:
        entries = {
            value.name: Entry(name=value.name, comment=value.comment, signature=value.type) for value in self.values
        }
        # @docs lines refer to operators in parentheses, e.g. ``(<|)``
        for binop in self.binops:
            key = f"({binop.name})"
            entries[key] = Entry(name=key, comment=binop.comment, signature=binop.type)
        return Module(name=self.name, comment=self.comment, entries=entries)


CATALOG_ADAPTER = TypeAdapter(list[SummaryPayload])
UPDATED_ADAPTER = TypeAdapter(list[str])
DOCS_ADAPTER = TypeAdapter(list[ModulePayload])


def decode_catalog(content: bytes) -> tuple[Summary, ...]:
    return tuple(payload.to_domain() for payload in CATALOG_ADAPTER.validate_json(content))


def decode_updated(content: bytes) -> tuple[str, ...]:
    return tuple(UPDATED_ADAPTER.validate_json(content))


def decode_package(content: bytes) -> Package:
    return {payload.name: payload.to_domain() for payload in DOCS_ADAPTER.validate_json(content)}
