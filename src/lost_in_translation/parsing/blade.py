"""Blade template lowering.

Compiles just enough of Blade into plain PHP for translation calls inside
echoes, directives and ``@php`` blocks to become visible to the PHP parser.
The output is not meant to run; it only has to parse.

Every replacement keeps the newlines of the text it replaces so that line
numbers reported against the lowered source match the template.

Lowering rules:
 - ``{{-- comment --}}``          -> removed (newlines kept)
 - ``@{{ x }}`` / ``@{!! x !!}``   -> left as template text without the ``@``
 - ``{{ expr }}``                 -> ``<?php echo e(expr); ?>``
 - ``{!! expr !!}``               -> ``<?php echo expr; ?>``
 - ``@php ... @endphp``           -> ``<?php ... ?>``; ``@php(expr)`` -> ``<?php (expr); ?>``
 - ``@verbatim ... @endverbatim`` -> body left as template text
 - ``@lang(args)``                -> ``<?php echo app('translator')->get(args); ?>``
 - ``@choice(args)``              -> ``<?php echo app('translator')->choice(args); ?>``
 - ``@foreach/@forelse/@for(...)`` -> matching loop header
 - other known directives         -> ``<?php __blade_<name>(args); ?>`` or removed when argument-less
 - ``<x-name :attr="expr">``      -> ``<x-name <?php echo (expr); ?>>`` for every bound attribute
 - unknown ``@word``              -> left as text (CSS ``@media``, e-mail addresses, ...)
 - ``@@``                         -> ``@``
"""

from __future__ import annotations

import re
from typing import FrozenSet, Iterable, Optional, Tuple

__all__ = ["BLADE_DIRECTIVES", "lower_blade"]

BLADE_DIRECTIVES: FrozenSet[str] = frozenset(
    """
    append auth aware break can canany cannot case checked choice class
    component componentFirst continue csrf dd default disabled dump each
    else elseauth elsecan elsecanany elsecannot elseenv elseguest elseif
    elseproduction empty endauth endcan endcanany endcannot endcomponent
    endcomponentClass endempty endenv enderror endfor endforeach endforelse
    endfragment endguest endif endisset endonce endprepend endPrependOnce
    endproduction endpush endPushOnce endsection endsession endslot endswitch
    endunless endwhile env error extends extendsFirst fragment for foreach
    forelse guest hasSection hasstack if include includeFirst includeIf
    includeUnless includeWhen inject isset js json lang method once overwrite
    parent php prepend prependOnce production props push pushIf pushOnce
    readonly required section sectionMissing selected session show slot stack
    stop style switch unless use verbatim vite viteReactRefresh while yield
    """.split()
)

_TOKEN_RE = re.compile(
    r"(?P<comment>\{\{--.*?--\}\})"
    r"|@(?P<escaped>\{\{.*?\}\}|\{!!.*?!!\})"
    r"|\{!!(?P<raw>.*?)!!\}"
    r"|\{\{(?P<echo>.*?)\}\}"
    r"|(?P<component><x-[\w.:-]+)"
    r"|(?P<at>@@)"
    r"|(?<![\w@])@(?P<directive>\w+)",
    re.S,
)
_ARG_GAP_RE = re.compile(r"[ \t]*\(")
# ``:title="expr"`` on a component tag; ``::attr`` is Blade's escape for a literal colon.
_BOUND_ATTR_RE = re.compile(
    r"(?<![\w:-]):(?!:)[\w.:-]+\s*=\s*(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)')"
)

_TRANSLATOR_DIRECTIVES = {
    "lang": "echo app('translator')->get({args});",
    "choice": "echo app('translator')->choice({args});",
}
_LOOP_DIRECTIVES = {
    "foreach": "foreach ({args});",
    "forelse": "foreach ({args});",
    "for": "for ({args});",
}


def _balanced_args(text: str, open_idx: int) -> Optional[int]:
    """Index just past the ``)`` matching ``text[open_idx] == '('``."""
    depth = 0
    quote: Optional[str] = None
    i = open_idx
    n = len(text)
    while i < n:
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return None


def _directive_args(text: str, pos: int) -> Tuple[Optional[str], int]:
    m = _ARG_GAP_RE.match(text, pos)
    if not m:
        return None, pos
    end = _balanced_args(text, m.end() - 1)
    if end is None:
        return None, pos
    return text[m.end() : end - 1], end


def _block(text: str, pos: int, closing: str) -> Tuple[str, int]:
    idx = text.find(closing, pos)
    if idx < 0:
        return text[pos:], len(text)
    return text[pos:idx], idx + len(closing)


def _php(code: str) -> str:
    return f"<?php {code} ?>"


def _tag_end(text: str, pos: int) -> int:
    """Index just past the ``>`` closing the tag that started before ``pos``."""
    quote: Optional[str] = None
    for i in range(pos, len(text)):
        ch = text[i]
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ">":
            return i + 1
    return len(text)


def _lower_component_tag(tag: str, known: FrozenSet[str]) -> str:
    out = []
    pos = 0
    for m in _BOUND_ATTR_RE.finditer(tag):
        expr = m.group("dq") if m.group("dq") is not None else m.group("sq")
        if not expr.strip():
            continue
        out.append(_lower(tag[pos : m.start()], known))
        out.append(_php(f"echo ({expr});"))
        pos = m.end()
    out.append(_lower(tag[pos:], known))
    return "".join(out)


def lower_blade(text: str, *, extra_directives: Iterable[str] = ()) -> str:
    return _lower(text, BLADE_DIRECTIVES | frozenset(extra_directives))


def _lower(text: str, known: FrozenSet[str]) -> str:
    out = []
    pos = 0
    while True:
        m = _TOKEN_RE.search(text, pos)
        if m is None:
            out.append(text[pos:])
            break
        out.append(text[pos : m.start()])
        pos = m.end()
        if m.group("comment") is not None:
            out.append("\n" * m.group("comment").count("\n"))
        elif m.group("escaped") is not None:
            out.append(m.group("escaped"))
        elif m.group("raw") is not None:
            out.append(_php(f"echo {m.group('raw')};"))
        elif m.group("echo") is not None:
            out.append(_php(f"echo e({m.group('echo')});"))
        elif m.group("component") is not None:
            end = _tag_end(text, pos)
            out.append(m.group("component") + _lower_component_tag(text[pos:end], known))
            pos = end
        elif m.group("at") is not None:
            out.append("@")
        else:
            name = m.group("directive")
            if name not in known:
                out.append(m.group(0))
                continue
            args, end = _directive_args(text, pos)
            gap = text[pos : end - len(args) - 2] if args is not None else ""
            if name == "php" and args is None:
                body, pos = _block(text, pos, "@endphp")
                out.append(f"<?php{body}?>")
                continue
            if name == "verbatim":
                body, pos = _block(text, pos, "@endverbatim")
                out.append(body)
                continue
            if args is None:
                continue  # argument-less directive
            pos = end
            if name == "php":
                code = "({args});"
            elif name in _TRANSLATOR_DIRECTIVES:
                code = _TRANSLATOR_DIRECTIVES[name]
            elif name in _LOOP_DIRECTIVES:
                code = _LOOP_DIRECTIVES[name]
            else:
                code = f"__blade_{name}({{args}});"
            out.append(gap + _php(code.format(args=args)))
    return "".join(out)
