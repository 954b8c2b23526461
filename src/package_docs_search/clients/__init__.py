"""HTTP clients for the package documentation site."""

from .package_site import PackageSiteClient


__all__ = ["PackageSiteClient"]
