"""Compile-time evaluation of PHP string literals.

``literal_value`` returns the decoded string for a node that is a literal
string expression, or ``None`` when the value depends on runtime state.

Recognised forms:
 - single-quoted strings (``'a'``, ``b'a'``)
 - double-quoted strings without interpolation
 - nowdoc, and heredoc without interpolation
 - parenthesized literals and ``.`` concatenation of literals
"""

from __future__ import annotations

import re
from typing import Optional

from tree_sitter import Node

from .php_parser import iter_nodes, node_text

__all__ = ["literal_value", "unescape_double_quoted", "unescape_single_quoted"]

# Named node types that may appear inside a string without making it dynamic.
_STATIC_STRING_PARTS = frozenset(
    {"string_content", "string_value", "escape_sequence", "nowdoc_string", "heredoc_start", "heredoc_end"}
)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}

_DQ_ESCAPE_RE = re.compile(
    r"\\(?:(?P<simple>[ntrvef\\$\"])|(?P<oct>[0-7]{1,3})|x(?P<hex>[0-9A-Fa-f]{1,2})|u\{(?P<uni>[0-9A-Fa-f]+)\})"
)
_SQ_ESCAPE_RE = re.compile(r"\\([\\'])")
_HEREDOC_OPEN_RE = re.compile(r"^[bB]?<<<[ \t]*(['\"]?)(\w+)\1[ \t]*\r?\n")


def unescape_single_quoted(body: str) -> str:
    return _SQ_ESCAPE_RE.sub(lambda m: m.group(1), body)


def _dq_replace(m: re.Match) -> str:
    if m.group("simple"):
        return _SIMPLE_ESCAPES[m.group("simple")]
    if m.group("oct"):
        return chr(int(m.group("oct"), 8) & 0xFF)
    if m.group("hex"):
        return chr(int(m.group("hex"), 16))
    return chr(int(m.group("uni"), 16))


def unescape_double_quoted(body: str, *, quote_escape: bool = True) -> str:
    if quote_escape:
        return _DQ_ESCAPE_RE.sub(_dq_replace, body)
    # heredoc: \" is not an escape sequence
    return _DQ_ESCAPE_RE.sub(lambda m: m.group(0) if m.group("simple") == '"' else _dq_replace(m), body)


def _strip_quotes(text: str) -> str:
    if text[:1] in ("b", "B"):
        text = text[1:]
    return text[1:-1]


def _is_static(node: Node) -> bool:
    for child in (d for c in node.children for d in iter_nodes(c)):
        if not child.is_named:
            continue
        if child.type in ("heredoc_body", "nowdoc_body"):
            continue
        if child.type not in _STATIC_STRING_PARTS:
            return False
    return True


def _doc_body(text: str) -> Optional[str]:
    """Body of a heredoc/nowdoc with the closing marker's indentation removed."""
    m = _HEREDOC_OPEN_RE.match(text)
    if not m:
        return None
    label = m.group(2)
    rest = text[m.end() :]
    lines = rest.split("\n")
    closing = lines[-1]
    stripped = closing.lstrip(" \t")
    if not stripped.startswith(label):
        return None
    indent = closing[: len(closing) - len(stripped)]
    body_lines = [ln[len(indent) :] if ln.startswith(indent) else ln.lstrip(" \t") for ln in lines[:-1]]
    body = "\n".join(body_lines)
    return body[:-1] if body.endswith("\r") else body


def literal_value(node: Node | None, source: bytes | None = None) -> Optional[str]:
    if node is None:
        return None
    kind = node.type
    if kind == "parenthesized_expression":
        inner = [c for c in node.named_children if c.type != "comment"]
        return literal_value(inner[0], source) if len(inner) == 1 else None
    if kind == "binary_expression":
        op = node.child_by_field_name("operator")
        if op is None or op.type != ".":
            return None
        left = literal_value(node.child_by_field_name("left"), source)
        if left is None:
            return None
        right = literal_value(node.child_by_field_name("right"), source)
        return None if right is None else left + right
    if kind == "string":
        text = node_text(node, source)
        if text[:1] in ("b", "B"):
            text = text[1:]
        if text.startswith('"'):
            # older grammars tag simple double-quoted strings as ``string``
            return unescape_double_quoted(text[1:-1])
        return unescape_single_quoted(text[1:-1])
    if kind == "encapsed_string":
        if not _is_static(node):
            return None
        return unescape_double_quoted(_strip_quotes(node_text(node, source)))
    if kind == "nowdoc":
        return _doc_body(node_text(node, source))
    if kind == "heredoc":
        if not _is_static(node):
            return None
        body = _doc_body(node_text(node, source))
        return None if body is None else unescape_double_quoted(body, quote_escape=False)
    return None
