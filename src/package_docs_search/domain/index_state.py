"""Index merge state machine.

The session moves through ``Loading -> Catalog -> Docs`` (or ``Loading ->
Failed``) as messages arrive from the catalog fetch and the per-package
fetches. Package fetches complete in any order; each completion is applied to
whatever state exists when its message is processed. Once in ``Docs``, the
``Info`` aggregate is mutated in place: ``chunks`` and ``failed`` only grow and
``packages`` is overwritten by key.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging

from ..parsing.doc_comment import build_chunks
from ..search.engine import DEFAULT_TYPE_ENGINE, TypeEngine
from .model import Chunk, Package, PackageInfo, Summary, VersionContext
from .name_dictionary import build_name_dictionary


logger = logging.getLogger(__name__)


# --- Messages ---


@dataclass(slots=True, frozen=True)
class CatalogLoaded:
    summaries: tuple[Summary, ...]
    recently_updated: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class CatalogFetchFailed:
    error: Exception


@dataclass(slots=True, frozen=True)
class DocsLoaded:
    context: VersionContext
    package: Package


@dataclass(slots=True, frozen=True)
class DocsFetchFailed:
    summary: Summary


@dataclass(slots=True, frozen=True)
class QueryChanged:
    text: str


Message = CatalogLoaded | CatalogFetchFailed | DocsLoaded | DocsFetchFailed | QueryChanged


# --- States ---


@dataclass
class Info:
    """Aggregate root for the searchable index."""

    packages: dict[str, PackageInfo] = field(default_factory=dict)
    chunks: list[Chunk] = field(default_factory=list)
    failed: list[Summary] = field(default_factory=list)
    query: str = ""


@dataclass(slots=True, frozen=True)
class Loading:
    pass


@dataclass(slots=True, frozen=True)
class Failed:
    error: Exception


@dataclass(slots=True, frozen=True)
class Catalog:
    summaries: tuple[Summary, ...]


@dataclass(slots=True, frozen=True)
class Docs:
    info: Info


IndexState = Loading | Failed | Catalog | Docs


def partition_updated(
    summaries: tuple[Summary, ...], recently_updated: tuple[str, ...]
) -> tuple[tuple[Summary, ...], tuple[Summary, ...]]:
    """Split summaries into ``(updated, remainder)`` preserving catalog order."""
    wanted = set(recently_updated)
    updated = tuple(summary for summary in summaries if summary.identifier in wanted)
    remainder = tuple(summary for summary in summaries if summary.identifier not in wanted)
    return updated, remainder


class IndexStateMachine:
    """Serialized reducer folding fetch results into the index.

    ``apply`` must be called with one message at a time. It returns the
    summaries whose documentation should now be fetched.
    """

    def __init__(
        self,
        engine: TypeEngine = DEFAULT_TYPE_ENGINE,
        name_dictionary_builder: Callable[[Package], dict[str, str]] = build_name_dictionary,
    ):
        self.engine = engine
        self.name_dictionary_builder = name_dictionary_builder
        self.state: IndexState = Loading()

    @property
    def info(self) -> Info | None:
        match self.state:
            case Docs(info=info):
                return info
            case _:
                return None

    def apply(self, message: Message) -> list[Summary]:
        match message:
            case CatalogFetchFailed(error=error):
                logger.error("Catalog fetch failed: %s", error)
                self.state = Failed(error)
                return []
            case CatalogLoaded():
                return self._on_catalog_loaded(message)
            case DocsLoaded():
                self._on_docs_loaded(message)
                return []
            case DocsFetchFailed(summary=summary):
                self._on_docs_failed(summary)
                return []
            case QueryChanged(text=text):
                self._on_query_changed(text)
                return []
        raise TypeError(f"Unknown message: {message!r}")

    def _on_catalog_loaded(self, message: CatalogLoaded) -> list[Summary]:
        match self.state:
            case Loading() | Catalog():
                updated, remainder = partition_updated(message.summaries, message.recently_updated)
                logger.info(
                    "Catalog loaded: %d packages, fetching docs for %d recently updated (%d not fetched)",
                    len(message.summaries),
                    len(updated),
                    len(remainder),
                )
                self.state = Catalog(updated)
                return list(updated)
            case Failed() | Docs():
                logger.warning("Ignoring catalog reload in %s state", type(self.state).__name__)
                return []
        raise TypeError(f"Unknown state: {self.state!r}")

    def _on_docs_loaded(self, message: DocsLoaded) -> None:
        package_identifier = message.context.package_identifier
        package_info = PackageInfo(
            package=message.package,
            context=message.context,
            name_dictionary=self.name_dictionary_builder(message.package),
        )
        chunks: list[Chunk] = []
        for module in message.package.values():
            chunks.extend(build_chunks(package_identifier, module, self.engine))

        match self.state:
            case Docs(info=info):
                if package_identifier in info.packages:
                    logger.info("Reloaded %s; previous chunks are kept", package_identifier)
                info.packages[package_identifier] = package_info
                info.chunks.extend(chunks)
            case Loading() | Catalog():
                self.state = Docs(Info(packages={package_identifier: package_info}, chunks=chunks))
            case Failed():
                logger.warning("Dropping docs for %s: catalog already failed", package_identifier)
                return
        logger.debug("Indexed %d chunks from %s", len(chunks), package_identifier)

    def _on_docs_failed(self, summary: Summary) -> None:
        match self.state:
            case Docs(info=info):
                info.failed.append(summary)
            case Loading() | Catalog():
                self.state = Docs(Info(failed=[summary]))
            case Failed():
                logger.warning("Dropping failure for %s: catalog already failed", summary.identifier)
                return
        logger.warning("Docs fetch failed for %s", summary.identifier)

    def _on_query_changed(self, text: str) -> None:
        match self.state:
            case Docs(info=info):
                info.query = text
            case Loading() | Failed() | Catalog():
                pass
