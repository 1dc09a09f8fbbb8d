"""Service layer exports.

Responsibilities:
 - Source file enumeration (`list_files`)
 - Locale catalogs (`InMemoryLocaleCatalog`, `LangDirectoryCatalog`)
 - Scan orchestration (`MissingKeyFinder`)
"""

from .file_finder import list_files, list_paths  # noqa: F401
from .locale_catalog import InMemoryLocaleCatalog, LangDirectoryCatalog, LocaleCatalog  # noqa: F401
from .missing_key_finder import MissingKeyFinder, find_missing_keys, scan_source  # noqa: F401

__all__ = [
    "list_files",
    "list_paths",
    "InMemoryLocaleCatalog",
    "LangDirectoryCatalog",
    "LocaleCatalog",
    "MissingKeyFinder",
    "find_missing_keys",
    "scan_source",
]
