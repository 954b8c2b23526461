"""Unit tests for the package site client using httpx.MockTransport."""

import json

import httpx
import pytest

from package_docs_search.clients.package_site import PackageSiteClient
from package_docs_search.domain.model import Summary, VersionContext
from package_docs_search.errors import CatalogFetchError, DocsFetchError
from tests.fixtures.docs_payloads import (
    CATALOG_PAYLOAD,
    DECODE_MODULE_PAYLOAD,
    UPDATED_PAYLOAD,
    docs_json,
)


JSON_CONTEXT = VersionContext(user="elm", project="json", version="1.1.3")


def _client(settings, handler) -> PackageSiteClient:
    return PackageSiteClient(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def _routes(routes: dict[str, httpx.Response]):
    def handler(request: httpx.Request) -> httpx.Response:
        return routes.get(request.url.path, httpx.Response(404))

    return handler


@pytest.mark.asyncio
async def test_fetch_catalog(settings):
    handler = _routes(
        {
            "/all-packages": httpx.Response(200, json=CATALOG_PAYLOAD),
            "/new-packages": httpx.Response(200, json=UPDATED_PAYLOAD),
        }
    )

    async with _client(settings, handler) as client:
        summaries, updated = await client.fetch_catalog()

    assert summaries[0] == Summary(
        identifier="elm/json", versions=("1.1.3", "1.1.2", "1.0.0"), summary="Encode and decode JSON"
    )
    assert len(summaries) == 3
    assert updated == ("elm/json", "elm-community/list-extra")


@pytest.mark.asyncio
async def test_fetch_catalog_http_error(settings):
    handler = _routes({"/all-packages": httpx.Response(500), "/new-packages": httpx.Response(200, json=[])})

    async with _client(settings, handler) as client:
        with pytest.raises(CatalogFetchError):
            await client.fetch_catalog()


@pytest.mark.asyncio
async def test_fetch_catalog_malformed_payload(settings):
    handler = _routes(
        {
            "/all-packages": httpx.Response(200, json=[{"summary": "no name"}]),
            "/new-packages": httpx.Response(200, json=[]),
        }
    )

    async with _client(settings, handler) as client:
        with pytest.raises(CatalogFetchError):
            await client.fetch_catalog()


@pytest.mark.asyncio
async def test_fetch_package_docs(settings):
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=docs_json(DECODE_MODULE_PAYLOAD))

    async with _client(settings, handler) as client:
        package = await client.fetch_package_docs(JSON_CONTEXT)

    assert requested == ["https://packages.test/packages/elm/json/1.1.3/docs.json"]
    module = package["Json.Decode"]
    assert module.comment.startswith(" Turn JSON values")
    assert module.entries["map"].signature.startswith("(a -> value)")
    assert module.entries["(|=)"].name == "(|=)"


@pytest.mark.asyncio
async def test_fetch_package_docs_not_found(settings):
    async with _client(settings, _routes({})) as client:
        with pytest.raises(DocsFetchError) as excinfo:
            await client.fetch_package_docs(JSON_CONTEXT)

    assert excinfo.value.url.endswith("/elm/json/1.1.3/docs.json")


@pytest.mark.asyncio
async def test_fetch_package_docs_transport_error(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(settings, handler) as client:
        with pytest.raises(DocsFetchError):
            await client.fetch_package_docs(JSON_CONTEXT)


@pytest.mark.asyncio
async def test_fetch_package_docs_malformed(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=json.dumps({"not": "a list"}).encode())

    async with _client(settings, handler) as client:
        with pytest.raises(DocsFetchError):
            await client.fetch_package_docs(JSON_CONTEXT)


@pytest.mark.asyncio
async def test_injected_client_is_not_closed(settings):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(_routes({})))

    async with PackageSiteClient(settings, client=http_client):
        pass

    assert not http_client.is_closed
    await http_client.aclose()
