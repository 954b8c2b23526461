"""Centralized configuration for package-docs-search using Pydantic Settings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.model import VersionContext


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Package site
    package_site_url: str = Field(
        default="https://package.elm-lang.org", description="Base URL of the package documentation site"
    )
    catalog_path: str = Field(default="/all-packages", description="Path of the full package catalog")
    updated_path: str = Field(default="/new-packages", description="Path of the recently updated package list")
    docs_path_template: str = Field(
        default="/packages/{user}/{project}/{version}/docs.json",
        description="Path template of a package release's documentation",
    )

    # HTTP settings
    http_timeout: float | None = Field(
        default=None, gt=0, description="HTTP timeout in seconds; unset waits indefinitely"
    )

    # Server settings
    search_host: str = Field(default="127.0.0.1", description="HTTP server host")
    search_port: int = Field(default=15010, ge=1, le=65535, description="HTTP server port")
    search_result_limit: int = Field(default=50, ge=1, description="Maximum results returned per query")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    json_logs: bool = Field(default=True, description="Emit structured JSON logs")

    @field_validator("package_site_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def catalog_url(self) -> str:
        return f"{self.package_site_url}{self.catalog_path}"

    def updated_url(self) -> str:
        return f"{self.package_site_url}{self.updated_path}"

    def docs_url(self, context: VersionContext) -> str:
        """Documentation URL for a package release."""
        path = self.docs_path_template.format(user=context.user, project=context.project, version=context.version)
        return f"{self.package_site_url}{path}"

    def package_page_url(self, package_identifier: str) -> str:
        return f"{self.package_site_url}/packages/{package_identifier}"
