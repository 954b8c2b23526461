"""Lookup from qualified value names to their documentation anchors."""

from .model import Package
from .name import Name, anchor_path, format_name


def build_name_dictionary(package: Package) -> dict[str, str]:
    """Map every documented ``Module.value`` of a package to its anchor path."""
    dictionary: dict[str, str] = {}
    for module_name, module in package.items():
        for local in module.entries:
            name = Name(home=module_name, local=local)
            dictionary[format_name(name)] = anchor_path(name)
    return dictionary
