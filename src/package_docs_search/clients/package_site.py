"""Async client for the package documentation site.

Hides HTTP and JSON decoding behind two calls:
- ``fetch_catalog()`` -> (all summaries, recently updated identifiers)
- ``fetch_package_docs(context)`` -> module name -> Module
"""

from __future__ import annotations

import asyncio
import logging

import httpx
from opentelemetry.trace import SpanKind
from pydantic import ValidationError

from ..config import Settings
from ..domain.model import Package, Summary, VersionContext
from ..errors import CatalogFetchError, DocsFetchError
from ..observability.tracing import create_span
from .wire import decode_catalog, decode_package, decode_updated


logger = logging.getLogger(__name__)


class PackageSiteClient:
    """Fetches the package catalog and per-release documentation over HTTP."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        """Initialize client with configuration.

        Args:
            settings: Settings instance with site URLs and timeout
            client: Optional pre-built ``httpx.AsyncClient`` (used by tests)
        """
        self.settings = settings
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> PackageSiteClient:
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.http_timeout),
                follow_redirects=True,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _get(self, url: str) -> bytes:
        response = await self._ensure_client().get(url)
        response.raise_for_status()
        return response.content

    async def fetch_catalog(self) -> tuple[tuple[Summary, ...], tuple[str, ...]]:
        """Fetch all package summaries and the recently updated identifiers concurrently."""
        catalog_url = self.settings.catalog_url()
        updated_url = self.settings.updated_url()
        with create_span("catalog.fetch", kind=SpanKind.CLIENT, attributes={"http.url": catalog_url}):
            try:
                catalog_body, updated_body = await asyncio.gather(self._get(catalog_url), self._get(updated_url))
                summaries = decode_catalog(catalog_body)
                updated = decode_updated(updated_body)
            except httpx.HTTPError as exc:
                raise CatalogFetchError(f"Failed to fetch catalog: {exc}") from exc
            except ValidationError as exc:
                raise CatalogFetchError(f"Malformed catalog payload: {exc}") from exc

        logger.info("Fetched catalog: %d summaries, %d recently updated", len(summaries), len(updated))
        return summaries, updated

    async def fetch_package_docs(self, context: VersionContext) -> Package:
        """Fetch and decode one release's documentation."""
        url = self.settings.docs_url(context)
        with create_span(
            "package_docs.fetch",
            kind=SpanKind.CLIENT,
            attributes={"http.url": url, "package.identifier": context.package_identifier},
        ):
            try:
                package = decode_package(await self._get(url))
            except httpx.HTTPError as exc:
                raise DocsFetchError(url, str(exc) or type(exc).__name__) from exc
            except ValidationError as exc:
                raise DocsFetchError(url, f"malformed docs payload: {exc.error_count()} errors") from exc

        logger.debug("Fetched %d modules for %s", len(package), context.package_identifier)
        return package
