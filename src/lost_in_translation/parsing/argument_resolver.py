"""Resolve the translation key passed to a call site."""

from __future__ import annotations

from typing import Optional

from tree_sitter import Node

from ..domain.models import (
    REASON_MISSING,
    REASON_NON_STRING,
    CallSite,
    LiteralKey,
    RejectedKey,
    ResolvedKey,
)
from .literals import literal_value
from .php_parser import node_text

__all__ = ["resolve_first_arg", "key_argument"]

# Parameter name of the key in every translation entry point.
KEY_PARAMETER = "key"


def _argument_name(arg: Node) -> Optional[str]:
    name = arg.child_by_field_name("name")
    if name is None or name == arg.named_children[-1]:
        return None
    return node_text(name)


def key_argument(call: CallSite) -> Optional[Node]:
    """The ``argument`` node bound to the key parameter, or ``None``.

    Positional arguments come before named ones in PHP, so a positional first
    argument is the key. Otherwise the key is bound by name (``key: 'a.b'``)
    in any position.
    """
    if not call.arguments:
        return None
    first = call.arguments[0]
    if _argument_name(first) is None:
        return first
    for arg in call.arguments:
        name = _argument_name(arg)
        if name == KEY_PARAMETER:
            return arg
    return None


def resolve_first_arg(call: CallSite) -> ResolvedKey:
    arg = key_argument(call)
    if arg is None or not arg.named_children:
        return RejectedKey(REASON_MISSING, "")
    value_node = arg.named_children[-1]
    source = node_text(arg)
    if value_node.type == "variadic_unpacking":
        return RejectedKey(REASON_NON_STRING, source)
    value = literal_value(value_node)
    if value is None:
        return RejectedKey(REASON_NON_STRING, source)
    return LiteralKey(value)
