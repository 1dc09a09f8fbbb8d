"""Locale catalogs answering "does key K exist in locale L".

Two implementations:
 - ``InMemoryLocaleCatalog``: mapping of locale -> keys (tests, embedding).
 - ``LangDirectoryCatalog``: a Laravel ``lang/`` directory.

Directory layout understood by ``LangDirectoryCatalog``::

    lang/fr.json                      {"Welcome": "Bienvenue"}        -> "Welcome"
    lang/fr/auth.php                  return ['failed' => '...'];    -> "auth.failed"
    lang/fr/admin/users.php           return ['title' => '...'];     -> "admin/users.title"
    lang/vendor/pkg/fr/messages.php   return ['hi' => '...'];        -> "pkg::messages.hi"

Nested arrays are flattened with dots; the intermediate keys exist too
(``auth`` and ``auth.failed`` for the example above).

Existence is literal: a key is present when the target locale defines it,
even if the translation equals the key. There is no fallback to another
locale. A locale with neither a JSON file nor a directory is unknown and
raises ``CatalogError``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import RLock
from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Protocol, Set

from tree_sitter import Node

from ..core import filesystem
from ..parsing.errors import CatalogError, SourceParseError
from ..parsing.literals import literal_value
from ..parsing.php_parser import SyntaxTree, iter_nodes, parse_source

__all__ = [
    "LocaleCatalog",
    "InMemoryLocaleCatalog",
    "LangDirectoryCatalog",
    "resolve_lang_path",
    "php_array_keys",
]

_log = logging.getLogger(__name__)

LANG_PATH_CANDIDATES = ("lang", "resources/lang")


class LocaleCatalog(Protocol):  # pragma: no cover - structural protocol
    def has(self, key: str, locale: str) -> bool: ...


class InMemoryLocaleCatalog:
    def __init__(self, catalogs: Mapping[str, Iterable[str]]) -> None:
        self._catalogs: Dict[str, FrozenSet[str]] = {
            locale: frozenset(keys) for locale, keys in catalogs.items()
        }

    def locales(self) -> list[str]:
        return sorted(self._catalogs)

    def has(self, key: str, locale: str) -> bool:
        try:
            return key in self._catalogs[locale]
        except KeyError:
            raise CatalogError(f"Unknown locale `{locale}`", context={"locale": locale}) from None


def resolve_lang_path(base_dir: str | Path = ".", configured: str | Path | None = None) -> Path:
    """Configured path if given, else the first existing Laravel default."""
    base = Path(base_dir)
    if configured:
        return base / configured
    for candidate in LANG_PATH_CANDIDATES:
        if (base / candidate).is_dir():
            return base / candidate
    return base / LANG_PATH_CANDIDATES[0]


def _array_key(node: Node, source: bytes) -> Optional[str]:
    if node.type == "integer":
        return node.text.decode()
    return literal_value(node, source)


def _array_entries(array: Node, source: bytes) -> Iterator[tuple[str, Optional[Node]]]:
    index = 0
    for element in array.named_children:
        if element.type != "array_element_initializer":
            continue
        parts = [c for c in element.named_children if c.type != "comment"]
        if len(parts) == 2:
            key = _array_key(parts[0], source)
            value = parts[1]
        elif len(parts) == 1 and parts[0].type != "variadic_unpacking":
            key, value = str(index), parts[0]
            index += 1
        else:
            continue  # spread or by-reference element
        if key is None:
            continue
        if key.isdigit():
            index = max(index, int(key) + 1)
        yield key, value


def _flatten(array: Node, source: bytes, prefix: str, sink: Set[str]) -> None:
    for key, value in _array_entries(array, source):
        full = f"{prefix}.{key}" if prefix else key
        sink.add(full)
        if value is not None and value.type == "array_creation_expression":
            _flatten(value, source, full, sink)


def _returned_array(tree: SyntaxTree) -> Optional[Node]:
    for node in iter_nodes(tree.root):
        if node.type == "return_statement":
            exprs = node.named_children
            if exprs and exprs[0].type == "array_creation_expression":
                return exprs[0]
            return None
    return None


def php_array_keys(text: str, *, path: str | None = None) -> Set[str]:
    """Flattened keys of the array returned by a PHP language file."""
    tree = parse_source(text, path=path)
    array = _returned_array(tree)
    keys: Set[str] = set()
    if array is None:
        _log.warning("Language file does not return an array literal: %s", path or "<string>")
        return keys
    _flatten(array, tree.source, "", keys)
    return keys


def _read_language_file(path: Path) -> str:
    try:
        return filesystem.read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogError(f"Cannot read language file {path}: {e}", context={"path": str(path)}) from e


class LangDirectoryCatalog:
    def __init__(self, lang_path: str | Path) -> None:
        self.lang_path = Path(lang_path)
        self._lock = RLock()
        self._cache: Dict[str, FrozenSet[str]] = {}

    def has(self, key: str, locale: str) -> bool:
        return key in self.keys(locale)

    def keys(self, locale: str) -> FrozenSet[str]:
        with self._lock:
            cached = self._cache.get(locale)
            if cached is None:
                cached = frozenset(self._load(locale))
                self._cache[locale] = cached
                _log.debug("Loaded %d keys for locale %s from %s", len(cached), locale, self.lang_path)
            return cached

    def _load(self, locale: str) -> Set[str]:
        json_file = self.lang_path / f"{locale}.json"
        locale_dir = self.lang_path / locale
        if not json_file.is_file() and not locale_dir.is_dir():
            raise CatalogError(
                f"Unknown locale `{locale}`: no {json_file.name} or {locale}/ in {self.lang_path}",
                context={"locale": locale, "lang_path": str(self.lang_path)},
            )
        keys: Set[str] = set()
        if json_file.is_file():
            keys.update(self._json_keys(json_file))
        if locale_dir.is_dir():
            keys.update(self._group_keys(locale_dir, namespace=None))
        vendor = self.lang_path / "vendor"
        if vendor.is_dir():
            for ns_dir in sorted(p for p in vendor.iterdir() if p.is_dir()):
                ns_locale = ns_dir / locale
                if ns_locale.is_dir():
                    keys.update(self._group_keys(ns_locale, namespace=ns_dir.name))
        return keys

    def _json_keys(self, path: Path) -> Set[str]:
        try:
            data = json.loads(_read_language_file(path))
        except json.JSONDecodeError as e:
            raise CatalogError(f"Invalid JSON in {path}: {e}", context={"path": str(path)}) from e
        if not isinstance(data, dict):
            raise CatalogError(f"Expected a JSON object in {path}", context={"path": str(path)})
        return set(data.keys())

    def _group_keys(self, locale_dir: Path, namespace: Optional[str]) -> Set[str]:
        keys: Set[str] = set()
        for file in filesystem.walk_files(locale_dir):
            if file.suffix != ".php":
                continue
            group = file.relative_to(locale_dir).with_suffix("").as_posix()
            prefix = f"{namespace}::{group}" if namespace else group
            try:
                entries = php_array_keys(_read_language_file(file), path=str(file))
            except SourceParseError as e:
                raise CatalogError(f"Cannot read language file {e}", context={"path": str(file)}) from e
            keys.add(prefix)
            keys.update(f"{prefix}.{k}" for k in entries)
        return keys
