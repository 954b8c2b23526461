"""Tests for the Starlette application routes."""

import pytest
from starlette.testclient import TestClient

from package_docs_search.app import create_app
from package_docs_search.errors import CatalogFetchError
from package_docs_search.service_layer.index_service import IndexService
from tests.fixtures.fake_site import FakeSiteClient, sample_docs


@pytest.fixture
def site():
    return FakeSiteClient(docs=sample_docs())


@pytest.fixture
def client(settings, site):
    service = IndexService(settings, site)
    app = create_app(settings, service=service)
    with TestClient(app) as test_client:
        test_client.portal.call(service.wait_until_settled)
        yield test_client


@pytest.mark.unit
class TestRoutes:
    def test_health_when_fully_loaded(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["index"]["packages"] == 2
        assert body["index"]["complete"] is True

    def test_status_counts(self, client):
        body = client.get("/status").json()

        assert body["state"] == "docs"
        assert body["issued"] == body["settled"] == 2
        assert body["failed"] == 0

    def test_search_by_name(self, client):
        body = client.get("/search", params={"q": "map2"}).json()

        assert body["status"] == "results"
        assert body["results"][0]["name"] == "map2"
        assert body["results"][0]["module"] == "Json.Decode"
        assert body["results"][0]["url"].endswith("/packages/elm/json/1.1.3/Json-Decode#map2")

    def test_search_without_query_is_intro(self, client):
        body = client.get("/search").json()

        assert body["status"] == "intro"
        assert body["results"] == []

    def test_retry_known_package(self, client, site):
        response = client.post("/packages/elm/json/retry")

        assert response.status_code == 202
        assert response.json() == {"success": True, "package": "elm/json"}
        assert site.docs_calls.count("elm/json/1.1.3") >= 1

    def test_retry_unknown_package(self, client):
        response = client.post("/packages/nobody/nothing/retry")

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_metrics_exposed(self, client):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "package_docs_fetches_total" in response.text

    def test_client_closed_on_shutdown(self, settings, site):
        app = create_app(settings, service=IndexService(settings, site))
        with TestClient(app):
            pass

        assert site.closed


@pytest.mark.unit
def test_health_reports_catalog_failure(settings):
    service = IndexService(settings, FakeSiteClient(catalog_error=CatalogFetchError("catalog unavailable")))
    app = create_app(settings, service=service)
    with TestClient(app) as test_client:
        test_client.portal.call(service.wait_until_settled)
        body = test_client.get("/health").json()

    assert body["status"] == "unhealthy"
    assert body["index"]["error"] == "catalog unavailable"
