"""PHP source parser built on tree-sitter.

Turns one file's text into a ``SyntaxTree`` or raises ``SourceParseError``.

tree-sitter never refuses input; it recovers and marks the broken regions with
``ERROR`` nodes (unexpected tokens) or zero-width *missing* nodes (expected
tokens that never came). Any such node makes the whole file invalid here and
the first one in document order gives the reported location.

An ``<?xml`` processing instruction (sitemaps, feeds) is template text for PHP
without short open tags. It is masked with a same-length placeholder before
parsing so byte offsets are unchanged.

Parsers are not thread safe, so each thread lazily creates its own and reuses
it for subsequent files.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Iterator, Optional

import tree_sitter_php
from tree_sitter import Language, Node, Parser, Tree

from .errors import SourceParseError

__all__ = ["PHP_LANGUAGE", "SyntaxTree", "char_column", "parse_source", "iter_nodes", "node_text"]

PHP_LANGUAGE = Language(tree_sitter_php.language_php())

_XML_DECL_RE = re.compile(rb"<\?(?=xml\b)", re.I)

_local = threading.local()


def _parser() -> Parser:
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = Parser(PHP_LANGUAGE)
        _local.parser = parser
    return parser


@dataclass(frozen=True)
class SyntaxTree:
    tree: Tree
    source: bytes
    path: Optional[str] = None

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return node_text(node, self.source)


def node_text(node: Node, source: bytes | None = None) -> str:
    if source is not None:
        raw = source[node.start_byte : node.end_byte]
    else:
        raw = node.text or b""
    return raw.decode("utf-8", errors="replace")


def iter_nodes(root: Node) -> Iterator[Node]:
    """Pre-order, left-to-right traversal."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _first_error(root: Node) -> Optional[Node]:
    if not root.has_error:
        return None
    for node in iter_nodes(root):
        if node.type == "ERROR" or node.is_missing:
            return node
    return root  # pragma: no cover - has_error always points at a node


def char_column(source: bytes, byte_offset: int) -> int:
    """1-based column of ``byte_offset`` counted in characters, not bytes."""
    line_start = source.rfind(b"\n", 0, byte_offset) + 1
    return len(source[line_start:byte_offset].decode("utf-8", errors="replace")) + 1


def parse_source(text: str, *, path: str | None = None) -> SyntaxTree:
    source = text.encode("utf-8")
    tree = _parser().parse(_XML_DECL_RE.sub(b"<_", source))
    broken = _first_error(tree.root_node)
    if broken is not None:
        row = broken.start_point[0]
        col = char_column(source, broken.start_byte) - 1
        if broken.is_missing:
            message = f"syntax error, expected '{broken.type}'"
        else:
            snippet = node_text(broken, source).strip().splitlines()
            near = snippet[0][:40] if snippet else ""
            message = f"syntax error, unexpected '{near}'" if near else "syntax error"
        raise SourceParseError(message, path=path, line=row + 1, column=col + 1)
    return SyntaxTree(tree=tree, source=source, path=path)
