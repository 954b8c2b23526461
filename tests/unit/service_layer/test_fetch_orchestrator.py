"""Unit tests for version-context derivation and fetch fan-out."""

import asyncio

import pytest

from package_docs_search.domain.index_state import DocsFetchFailed, DocsLoaded
from package_docs_search.domain.model import Summary, VersionContext
from package_docs_search.errors import DocsFetchError, MalformedSummaryError
from package_docs_search.service_layer.fetch_orchestrator import FetchOrchestrator, derive_version_context
from tests.fixtures.docs_payloads import make_module, make_summary


class TestDeriveVersionContext:
    def test_uses_newest_version(self):
        context = derive_version_context(make_summary("a/b", "2.0.0", "1.0.0"))

        assert context == VersionContext(user="a", project="b", version="2.0.0")
        assert context.package_identifier == "a/b/2.0.0"

    @pytest.mark.parametrize(
        "summary",
        [
            Summary(identifier="a/b", versions=()),
            Summary(identifier="just-a-name", versions=("1.0.0",)),
            Summary(identifier="a/b/c", versions=("1.0.0",)),
            Summary(identifier="a/", versions=("1.0.0",)),
        ],
    )
    def test_malformed(self, summary):
        with pytest.raises(MalformedSummaryError):
            derive_version_context(summary)


class RecordingTransport:
    """Fake docs transport keyed by package identifier."""

    def __init__(self, outcomes: dict):
        self.outcomes = outcomes
        self.calls: list[str] = []

    async def __call__(self, context: VersionContext):
        self.calls.append(context.package_identifier)
        await asyncio.sleep(0)
        outcome = self.outcomes[context.package_identifier]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


PACKAGE = {"M": make_module("M", "x\n@docs f", f="Int")}


@pytest.mark.asyncio
async def test_fetch_docs_success():
    transport = RecordingTransport({"a/b/2.0.0": PACKAGE})
    orchestrator = FetchOrchestrator(transport, lambda message: None)

    result = await orchestrator.fetch_docs(make_summary("a/b", "2.0.0", "1.0.0"))

    assert result == DocsLoaded(VersionContext(user="a", project="b", version="2.0.0"), PACKAGE)


@pytest.mark.asyncio
async def test_fetch_docs_transport_failure_becomes_message():
    summary = make_summary("a/b", "1.0.0")
    transport = RecordingTransport({"a/b/1.0.0": DocsFetchError("https://x", "503")})
    orchestrator = FetchOrchestrator(transport, lambda message: None)

    assert await orchestrator.fetch_docs(summary) == DocsFetchFailed(summary)


@pytest.mark.asyncio
async def test_fetch_docs_unexpected_error_becomes_message():
    summary = make_summary("a/b", "1.0.0")
    transport = RecordingTransport({"a/b/1.0.0": RuntimeError("bug")})
    orchestrator = FetchOrchestrator(transport, lambda message: None)

    assert await orchestrator.fetch_docs(summary) == DocsFetchFailed(summary)


@pytest.mark.asyncio
async def test_fetch_docs_malformed_summary_skips_transport():
    summary = make_summary("broken")
    transport = RecordingTransport({})
    orchestrator = FetchOrchestrator(transport, lambda message: None)

    assert await orchestrator.fetch_docs(summary) == DocsFetchFailed(summary)
    assert transport.calls == []


@pytest.mark.asyncio
async def test_dispatch_posts_exactly_one_message_per_summary():
    summaries = [make_summary("a/ok", "1.0.0"), make_summary("a/bad", "1.0.0"), make_summary("malformed")]
    transport = RecordingTransport({"a/ok/1.0.0": PACKAGE, "a/bad/1.0.0": DocsFetchError("u", "404")})
    posted = []
    orchestrator = FetchOrchestrator(transport, posted.append)

    tasks = orchestrator.dispatch(summaries)
    await orchestrator.drain()

    assert len(tasks) == 3
    assert orchestrator.issued == 3
    assert orchestrator.in_flight == 0
    assert len(posted) == 3
    assert sum(isinstance(message, DocsLoaded) for message in posted) == 1
    assert {message.summary.identifier for message in posted if isinstance(message, DocsFetchFailed)} == {
        "a/bad",
        "malformed",
    }


@pytest.mark.asyncio
async def test_duplicate_dispatch_is_not_deduplicated():
    summary = make_summary("a/ok", "1.0.0")
    transport = RecordingTransport({"a/ok/1.0.0": PACKAGE})
    posted = []
    orchestrator = FetchOrchestrator(transport, posted.append)

    orchestrator.dispatch([summary])
    orchestrator.dispatch([summary])
    await orchestrator.drain()

    assert transport.calls == ["a/ok/1.0.0", "a/ok/1.0.0"]
    assert len(posted) == 2
    assert orchestrator.issued == 2


@pytest.mark.asyncio
async def test_shutdown_cancels_hung_fetches():
    never = asyncio.Event()

    async def hang(context):
        await never.wait()

    posted = []
    orchestrator = FetchOrchestrator(hang, posted.append)
    orchestrator.dispatch([make_summary("a/slow", "1.0.0")])
    await asyncio.sleep(0)

    await orchestrator.shutdown()

    assert posted == []
    assert orchestrator.in_flight == 0
