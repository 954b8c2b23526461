"""Shared test fixtures and configuration."""

from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


TEST_ENV = {
    "PACKAGE_SITE_URL": "https://packages.test",
    "CATALOG_PATH": "/all-packages",
    "UPDATED_PATH": "/new-packages",
    "DOCS_PATH_TEMPLATE": "/packages/{user}/{project}/{version}/docs.json",
    "LOG_LEVEL": "info",
    "JSON_LOGS": "false",
    "SEARCH_RESULT_LIMIT": "50",
    # Proxy settings - ensure they're cleared for tests
    "http_proxy": "",
    "https_proxy": "",
    "all_proxy": "",
}

from package_docs_search.config import Settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Pin every setting so a developer's .env never leaks into tests."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("HTTP_TIMEOUT", raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings()
