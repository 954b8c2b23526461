"""Exception hierarchy for package-docs-search."""


class PackageDocsSearchError(Exception):
    """Base error for the package docs search domain."""


class InvalidNameError(PackageDocsSearchError):
    """Raised when a dotted identifier cannot be split into home and local parts."""


class MalformedSummaryError(PackageDocsSearchError):
    """Raised when a catalog summary cannot be resolved to a version context."""


class CatalogFetchError(PackageDocsSearchError):
    """Raised when the package catalog cannot be fetched or decoded."""


class DocsFetchError(PackageDocsSearchError):
    """Raised when a single package's documentation cannot be fetched or decoded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
