"""Fan-out of per-package documentation fetches.

Every summary handed to :meth:`FetchOrchestrator.fetch_docs` resolves to
exactly one message, ``DocsLoaded`` or ``DocsFetchFailed``. Fetches run as
independent tasks with no concurrency limit, no deduplication and no
cancellation; a retry for a summary already in flight simply produces a
second result.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
import logging

from pydantic import ValidationError

from ..domain.index_state import DocsFetchFailed, DocsLoaded, Message
from ..domain.model import Package, Summary, VersionContext
from ..errors import DocsFetchError, MalformedSummaryError
from ..observability.context import start_trace
from ..observability.metrics import DOCS_FETCHES


logger = logging.getLogger(__name__)


def derive_version_context(summary: Summary) -> VersionContext:
    """Resolve ``user/project`` and the newest version of a summary.

    Raises:
        MalformedSummaryError: identifier is not exactly ``user/project`` or
            there are no versions.
    """
    segments = summary.identifier.split("/")
    if len(segments) != 2 or not summary.versions:
        raise MalformedSummaryError(
            f"Cannot derive version context from {summary.identifier!r} with {len(summary.versions)} versions"
        )
    user, project = segments
    try:
        return VersionContext(user=user, project=project, version=str(summary.versions[0]))
    except ValidationError as exc:
        raise MalformedSummaryError(f"Cannot derive version context from {summary.identifier!r}: {exc}") from exc


class FetchOrchestrator:
    """Issues one asynchronous docs fetch per summary and posts each outcome."""

    def __init__(
        self,
        fetch_package_docs: Callable[[VersionContext], Awaitable[Package]],
        post: Callable[[Message], None],
    ):
        """
        Args:
            fetch_package_docs: Transport call returning a release's modules
            post: Delivers a result message into the serialized inbox
        """
        self._fetch_package_docs = fetch_package_docs
        self._post = post
        self._tasks: set[asyncio.Task] = set()
        self.issued = 0

    async def fetch_docs(self, summary: Summary) -> DocsLoaded | DocsFetchFailed:
        try:
            context = derive_version_context(summary)
        except MalformedSummaryError as exc:
            logger.warning("Skipping fetch: %s", exc)
            DOCS_FETCHES.labels(outcome="malformed").inc()
            return DocsFetchFailed(summary)

        try:
            package = await self._fetch_package_docs(context)
        except DocsFetchError as exc:
            logger.warning("Docs fetch for %s failed: %s", context.package_identifier, exc)
            DOCS_FETCHES.labels(outcome="failed").inc()
            return DocsFetchFailed(summary)
        except Exception as exc:
            logger.error("Unexpected error fetching %s: %s", context.package_identifier, exc, exc_info=True)
            DOCS_FETCHES.labels(outcome="failed").inc()
            return DocsFetchFailed(summary)

        DOCS_FETCHES.labels(outcome="loaded").inc()
        return DocsLoaded(context=context, package=package)

    async def _fetch_and_post(self, summary: Summary) -> None:
        # Each task runs in its own context copy, so logs carry their package
        start_trace(package=summary.identifier)
        self._post(await self.fetch_docs(summary))

    def dispatch(self, summaries: Iterable[Summary]) -> list[asyncio.Task]:
        """Start one fetch task per summary; must be called from a running event loop."""
        tasks = []
        for summary in summaries:
            task = asyncio.create_task(self._fetch_and_post(summary), name=f"fetch-docs:{summary.identifier}")
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)
        self.issued += len(tasks)
        if tasks:
            logger.info("Dispatched %d docs fetches (%d issued in total)", len(tasks), self.issued)
        return tasks

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every fetch task started so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def shutdown(self) -> None:
        """Cancel outstanding fetches when the session is torn down."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
