"""Indexing session: catalog load, fetch fan-out and the serialized reducer.

All index mutations go through one ``asyncio.Queue`` drained by a single
reducer task, so fetch completions are applied one at a time in arrival
order. Fetch tasks share nothing with each other; they only post messages.
"""

from __future__ import annotations

import asyncio
from contextlib import suppress
from dataclasses import asdict, dataclass
import logging

from ..clients.package_site import PackageSiteClient
from ..config import Settings
from ..domain.index_state import (
    Catalog,
    CatalogFetchFailed,
    CatalogLoaded,
    Docs,
    DocsFetchFailed,
    DocsLoaded,
    Failed,
    IndexStateMachine,
    Loading,
    Message,
    QueryChanged,
)
from ..domain.model import Summary
from ..domain.name import anchor_path, format_name
from ..domain.search import SearchHit, SearchResponse
from ..errors import CatalogFetchError
from ..observability.metrics import (
    CATALOG_FETCHES,
    INDEXED_CHUNKS,
    INDEXED_PACKAGES,
    SEARCH_LATENCY,
    track_latency,
)
from ..search.engine import DEFAULT_TYPE_ENGINE, TypeEngine
from ..search.fuzzy import find_fuzzy_matches, get_max_edit_distance
from ..search.ranker import QueryKind, RankedChunk, classify_query, rank
from .fetch_orchestrator import FetchOrchestrator


logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class IndexStatus:
    """Progress snapshot; completeness is inferred from issued vs settled fetches."""

    state: str
    packages: int
    chunks: int
    failed: int
    issued: int
    settled: int
    in_flight: int
    error: str | None = None

    @property
    def complete(self) -> bool:
        return self.state == "docs" and self.settled >= self.issued

    def to_dict(self) -> dict:
        return {**asdict(self), "complete": self.complete}


class IndexService:
    """Owns the index state machine for one session."""

    def __init__(
        self,
        settings: Settings,
        client: PackageSiteClient,
        engine: TypeEngine = DEFAULT_TYPE_ENGINE,
    ):
        self.settings = settings
        self.client = client
        self.engine = engine
        self.state_machine = IndexStateMachine(engine)
        self.orchestrator = FetchOrchestrator(client.fetch_package_docs, self.post)
        self._inbox: asyncio.Queue[Message] = asyncio.Queue()
        self._fetchable: dict[str, Summary] = {}
        self._settled = 0
        self._reducer_task: asyncio.Task | None = None
        self._catalog_task: asyncio.Task | None = None

    async def start(self) -> None:
        """Start the reducer and kick off the catalog fetch."""
        if self._reducer_task is not None:
            return
        self._reducer_task = asyncio.create_task(self._run_reducer(), name="index-reducer")
        self._catalog_task = asyncio.create_task(self._load_catalog(), name="catalog-fetch")

    async def stop(self) -> None:
        for task in (self._catalog_task, self._reducer_task):
            if task is not None and not task.done():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
        await self.orchestrator.shutdown()
        self._reducer_task = None
        self._catalog_task = None

    def post(self, message: Message) -> None:
        """Deliver a message to the reducer."""
        self._inbox.put_nowait(message)

    async def _load_catalog(self) -> None:
        try:
            summaries, updated = await self.client.fetch_catalog()
        except CatalogFetchError as exc:
            CATALOG_FETCHES.labels(outcome="failed").inc()
            self.post(CatalogFetchFailed(exc))
            return
        except Exception as exc:
            logger.error("Unexpected error fetching the catalog: %s", exc, exc_info=True)
            CATALOG_FETCHES.labels(outcome="failed").inc()
            self.post(CatalogFetchFailed(exc))
            return
        CATALOG_FETCHES.labels(outcome="loaded").inc()
        self.post(CatalogLoaded(summaries=summaries, recently_updated=updated))

    async def _run_reducer(self) -> None:
        while True:
            message = await self._inbox.get()
            try:
                self._process(message)
            except Exception as exc:
                logger.error("Failed to apply %s: %s", type(message).__name__, exc, exc_info=True)
            finally:
                self._inbox.task_done()

    def _process(self, message: Message) -> None:
        to_fetch = self.state_machine.apply(message)
        match message:
            case CatalogLoaded():
                self._fetchable.update((summary.identifier, summary) for summary in to_fetch)
            case DocsLoaded() | DocsFetchFailed():
                self._settled += 1
        info = self.state_machine.info
        if info is not None:
            INDEXED_CHUNKS.set(len(info.chunks))
            INDEXED_PACKAGES.set(len(info.packages))
        if to_fetch:
            self.orchestrator.dispatch(to_fetch)

    def retry(self, identifier: str) -> bool:
        """Re-issue the docs fetch for a catalog package, e.g. after a failure.

        Returns False when the identifier was never scheduled for fetching.
        """
        summary = self._fetchable.get(identifier)
        if summary is None:
            return False
        logger.info("Retrying docs fetch for %s", identifier)
        self.orchestrator.dispatch([summary])
        return True

    async def wait_until_settled(self) -> None:
        """Wait until the catalog and every issued fetch have been applied.

        Never returns while a fetch hangs, since fetches have no timeout.
        """
        if self._catalog_task is not None:
            await self._catalog_task
        while True:
            await self._inbox.join()
            if self.orchestrator.in_flight == 0 and self._inbox.empty():
                return
            await self.orchestrator.drain()

    def status(self) -> IndexStatus:
        issued = self.orchestrator.issued
        in_flight = self.orchestrator.in_flight
        match self.state_machine.state:
            case Loading():
                return IndexStatus("loading", 0, 0, 0, issued, self._settled, in_flight)
            case Failed(error=error):
                return IndexStatus("failed", 0, 0, 0, issued, self._settled, in_flight, error=str(error))
            case Catalog():
                return IndexStatus("catalog", 0, 0, 0, issued, self._settled, in_flight)
            case Docs(info=info):
                return IndexStatus(
                    "docs", len(info.packages), len(info.chunks), len(info.failed), issued, self._settled, in_flight
                )
        raise TypeError(f"Unknown state: {self.state_machine.state!r}")

    async def query(self, text: str) -> SearchResponse:
        """Replace the current query and rank the index against it."""
        self.post(QueryChanged(text))
        await self._inbox.join()
        # Concurrent callers may have replaced the session query meanwhile
        return self.search(text)

    def search(self, text: str | None = None) -> SearchResponse:
        """Rank the index against ``text``, or the current session query when omitted."""
        match self.state_machine.state:
            case Loading() | Catalog():
                return SearchResponse(status="loading")
            case Failed(error=error):
                return SearchResponse(status="failed", error=str(error))
            case Docs(info=info):
                query = info.query if text is None else text
                if not query:
                    return SearchResponse(status="intro")
                classified = classify_query(query, self.engine)
                kind = classified[0]
                with track_latency(SEARCH_LATENCY, query_kind=kind.value):
                    ranked = rank(query, info.chunks, self.engine, classified=classified)
                if not ranked:
                    return SearchResponse(
                        status="no_matches",
                        query=query,
                        query_kind=kind.value,
                        suggestions=self._suggestions(query, kind),
                    )
                hits = [self._to_hit(item) for item in ranked[: self.settings.search_result_limit]]
                return SearchResponse(
                    status="results", query=query, query_kind=kind.value, total=len(ranked), results=hits
                )
        raise TypeError(f"Unknown state: {self.state_machine.state!r}")

    def _suggestions(self, query: str, kind: QueryKind) -> list[str]:
        info = self.state_machine.info
        if kind is not QueryKind.NAME or info is None:
            return []
        term = query.strip()
        vocabulary = (chunk.raw_entry.name for chunk in info.chunks)
        # One edit looser than name matching, which already accepts closer typos
        max_distance = get_max_edit_distance(len(term)) + 1
        return [match for match, _ in find_fuzzy_matches(term, vocabulary, max_distance=max_distance)]

    def _to_hit(self, ranked: RankedChunk) -> SearchHit:
        chunk = ranked.chunk
        info = self.state_machine.info
        package_info = info.packages.get(chunk.package_identifier) if info is not None else None
        anchor = None
        if package_info is not None:
            anchor = package_info.name_dictionary.get(format_name(chunk.name))
        anchor = anchor or anchor_path(chunk.name)
        return SearchHit(
            package=chunk.package_identifier,
            module=chunk.name.home,
            name=chunk.name.local,
            signature=str(chunk.raw_entry.type),
            comment=chunk.raw_entry.comment,
            score=ranked.score,
            url=f"{self.settings.package_page_url(chunk.package_identifier)}/{anchor}",
        )
