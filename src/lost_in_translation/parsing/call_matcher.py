"""Call-site matcher: find calls to translation entry points in a PHP tree.

Three call shapes are recognised:
 - ``__('key')`` / ``\\trans('key')``  (function_call_expression)
 - ``Lang::get('key')``               (scoped_call_expression)
 - ``$translator->get('key')``, ``$this->translator->get('key')`` and
   ``app('translator')->get('key')``  (member_call_expression, incl. nullsafe)

Names are compared case-insensitively, as PHP does for functions, classes and
methods. Namespace prefixes are dropped and ``use`` aliases of the scanned file
are resolved to the imported name before comparison.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Tuple

from tree_sitter import Node

from ..domain.models import CallSite
from .literals import literal_value
from .php_parser import SyntaxTree, char_column, iter_nodes

__all__ = ["CallTargets", "ImportAliases", "collect_aliases", "find_call_sites"]

DEFAULT_FUNCTIONS = ("__", "trans", "trans_choice")
DEFAULT_STATIC_CALLS = (
    ("Lang", "get"),
    ("Lang", "choice"),
    ("Lang", "trans"),
    ("Lang", "transChoice"),
)
DEFAULT_METHOD_CALLS = (("translator", "get"), ("translator", "choice"))

# Container accessors whose first literal argument names the receiver service.
_CONTAINER_FUNCTIONS = frozenset({"app", "resolve"})

_FUNCTION_CALLS = frozenset({"function_call_expression"})
_STATIC_CALLS = frozenset({"scoped_call_expression"})
_METHOD_CALLS = frozenset({"member_call_expression", "nullsafe_member_call_expression"})


def _short(name: str) -> str:
    """``\\Illuminate\\Support\\Facades\\Lang`` -> ``Lang``."""
    return name.strip().lstrip("\\").rsplit("\\", 1)[-1]


def _pairs(pairs: Iterable[Tuple[str, str]]) -> FrozenSet[Tuple[str, str]]:
    return frozenset((_short(a).lower().lstrip("$"), b.lower()) for a, b in pairs)


@dataclass(frozen=True)
class CallTargets:
    """The configured translation entry points."""

    functions: FrozenSet[str] = field(default_factory=lambda: frozenset(DEFAULT_FUNCTIONS))
    static_calls: FrozenSet[Tuple[str, str]] = field(
        default_factory=lambda: frozenset(DEFAULT_STATIC_CALLS)
    )
    method_calls: FrozenSet[Tuple[str, str]] = field(
        default_factory=lambda: frozenset(DEFAULT_METHOD_CALLS)
    )

    def __post_init__(self) -> None:
        # normalise once so lookups are plain set membership
        object.__setattr__(self, "functions", frozenset(_short(f).lower() for f in self.functions))
        object.__setattr__(self, "static_calls", _pairs(self.static_calls))
        object.__setattr__(self, "method_calls", _pairs(self.method_calls))

    @classmethod
    def from_mapping(cls, data: dict) -> "CallTargets":
        """Build from ``{"functions": [...], "static": [[cls, m]...], "method": [[recv, m]...]}``.

        ``"Class::method"`` and ``"receiver->method"`` strings are accepted as
        well as two-element lists.
        """
        functions = data.get("functions", DEFAULT_FUNCTIONS)
        if isinstance(functions, str):
            functions = [functions]
        return cls(
            functions=frozenset(str(f) for f in functions),
            static_calls=frozenset(_split_pairs(data.get("static", DEFAULT_STATIC_CALLS), "::")),
            method_calls=frozenset(_split_pairs(data.get("method", DEFAULT_METHOD_CALLS), "->")),
        )

    def is_empty(self) -> bool:
        return not (self.functions or self.static_calls or self.method_calls)


def _split_pairs(items: Iterable, sep: str) -> Iterator[Tuple[str, str]]:
    for item in items:
        if isinstance(item, str):
            left, found, right = item.partition(sep)
            if not found or not left or not right:
                raise ValueError(f"expected 'name{sep}method', got {item!r}")
            yield left, right
        else:
            left, right = item
            yield str(left), str(right)


@dataclass
class ImportAliases:
    """``use`` aliases of one file, keyed by lower-cased alias."""

    classes: Dict[str, str] = field(default_factory=dict)
    functions: Dict[str, str] = field(default_factory=dict)

    def resolve_class(self, name: str) -> str:
        raw = name.strip()
        if raw.startswith("\\") or "\\" in raw:
            return _short(raw)
        return self.classes.get(raw.lower(), raw)

    def resolve_function(self, name: str) -> str:
        raw = name.strip()
        if raw.startswith("\\") or "\\" in raw:
            return _short(raw)
        return self.functions.get(raw.lower(), raw)


_USE_RE = re.compile(r"^\s*use\s+(?:(function|const)\s+)?(.*?)\s*;?\s*$", re.S | re.I)
_GROUP_RE = re.compile(r"^(?P<prefix>[\\\w]*)\\?\{(?P<body>.*)\}$", re.S)
_CLAUSE_RE = re.compile(r"^(?:(function|const)\s+)?([\\\w]+)(?:\s+as\s+(\w+))?$", re.I)


def _use_clauses(text: str) -> Iterator[Tuple[str, str, str]]:
    """Yield (kind, imported name, alias) from a ``use`` declaration's text."""
    m = _USE_RE.match(text)
    if not m:
        return
    default_kind = (m.group(1) or "class").lower()
    body = m.group(2)
    group = _GROUP_RE.match(body.strip())
    prefix = ""
    if group:
        prefix = group.group("prefix").rstrip("\\")
        body = group.group("body")
    for part in body.split(","):
        part = " ".join(part.split())
        if not part:
            continue
        cm = _CLAUSE_RE.match(part)
        if not cm:
            continue
        kind = (cm.group(1) or default_kind).lower()
        name = cm.group(2).lstrip("\\")
        if prefix:
            name = f"{prefix}\\{name}"
        yield kind, name, cm.group(3) or _short(name)


def collect_aliases(tree: SyntaxTree) -> ImportAliases:
    aliases = ImportAliases()
    for node in iter_nodes(tree.root):
        if node.type != "namespace_use_declaration":
            continue
        for kind, name, alias in _use_clauses(tree.text(node)):
            if kind == "function":
                aliases.functions[alias.lower()] = _short(name)
            elif kind == "class":
                aliases.classes[alias.lower()] = _short(name)
    return aliases


def _argument_nodes(call: Node) -> Tuple[Node, ...]:
    args = call.child_by_field_name("arguments")
    if args is None:
        return ()
    return tuple(c for c in args.named_children if c.type == "argument")


def _plain_name(node: Optional[Node], tree: SyntaxTree) -> Optional[str]:
    if node is None or node.type not in ("name", "qualified_name"):
        return None
    return tree.text(node)


def _receiver_name(obj: Optional[Node], tree: SyntaxTree, aliases: ImportAliases) -> Optional[str]:
    if obj is None:
        return None
    if obj.type == "variable_name":
        return tree.text(obj).lstrip("$")
    if obj.type in ("member_access_expression", "nullsafe_member_access_expression"):
        return _plain_name(obj.child_by_field_name("name"), tree)
    if obj.type == "function_call_expression":
        fn = _plain_name(obj.child_by_field_name("function"), tree)
        if fn is None or aliases.resolve_function(fn).lower() not in _CONTAINER_FUNCTIONS:
            return None
        args = _argument_nodes(obj)
        if not args:
            return None
        return literal_value(args[0].named_children[-1], tree.source)
    if obj.type == "parenthesized_expression" and obj.named_children:
        return _receiver_name(obj.named_children[-1], tree, aliases)
    return None


def _match(node: Node, tree: SyntaxTree, targets: CallTargets, aliases: ImportAliases) -> Optional[str]:
    kind = node.type
    if kind in _FUNCTION_CALLS:
        fn = _plain_name(node.child_by_field_name("function"), tree)
        if fn is None:
            return None
        canonical = aliases.resolve_function(fn)
        return canonical if canonical.lower() in targets.functions else None
    if kind in _STATIC_CALLS:
        scope = _plain_name(node.child_by_field_name("scope"), tree)
        method = _plain_name(node.child_by_field_name("name"), tree)
        if scope is None or method is None:
            return None
        cls = aliases.resolve_class(scope)
        if (cls.lower(), method.lower()) in targets.static_calls:
            return f"{cls}::{method}"
        return None
    if kind in _METHOD_CALLS:
        method = _plain_name(node.child_by_field_name("name"), tree)
        receiver = _receiver_name(node.child_by_field_name("object"), tree, aliases)
        if method is None or receiver is None:
            return None
        if (receiver.lower(), method.lower()) in targets.method_calls:
            return f"{receiver}->{method}"
    return None


def find_call_sites(tree: SyntaxTree, targets: CallTargets) -> Iterator[CallSite]:
    """Yield call sites in pre-order; zero-argument calls included."""
    aliases = collect_aliases(tree)
    for node in iter_nodes(tree.root):
        if node.type not in _FUNCTION_CALLS and node.type not in _STATIC_CALLS and node.type not in _METHOD_CALLS:
            continue
        label = _match(node, tree, targets, aliases)
        if label is None:
            continue
        yield CallSite(
            path=tree.path,
            line=node.start_point[0] + 1,
            column=char_column(tree.source, node.start_byte),
            target=label,
            arguments=_argument_nodes(node),
            node=node,
        )
