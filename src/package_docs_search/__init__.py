"""Search API documentation aggregated from many independently fetched packages."""

__version__ = "0.1.0"
