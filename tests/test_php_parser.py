"""Tests for the tree-sitter backed PHP source parser."""

from __future__ import annotations

import pytest

from lost_in_translation.parsing.call_matcher import CallTargets, find_call_sites
from lost_in_translation.parsing.errors import (
    CatalogError,
    ConfigError,
    ParsingError,
    ScannerError,
    SourceParseError,
    SourceReadError,
)
from lost_in_translation.parsing.php_parser import char_column, iter_nodes, parse_source


def test_parse_valid_source_returns_tree():
    tree = parse_source("<?php\necho trans('a.b');\n", path="views/a.php")
    assert tree.root.type == "program"
    assert tree.path == "views/a.php"
    kinds = [n.type for n in iter_nodes(tree.root)]
    assert "function_call_expression" in kinds


def test_parse_inline_html_without_php_is_valid():
    tree = parse_source("<html><body>plain text</body></html>\n")
    assert not tree.root.has_error


def test_iter_nodes_is_preorder():
    tree = parse_source("<?php\nfoo(bar());\n")
    calls = [tree.text(n) for n in iter_nodes(tree.root) if n.type == "function_call_expression"]
    assert calls == ["foo(bar())", "bar()"]


def test_parse_error_reports_location():
    with pytest.raises(SourceParseError) as excinfo:
        parse_source("<?php\n$a = ;\n", path="broken.php")
    err = excinfo.value
    assert err.path == "broken.php"
    assert err.line == 2
    assert err.column is not None and err.column >= 1
    assert str(err).startswith("broken.php:2")
    assert err.context["path"] == "broken.php"


def test_parse_error_is_a_parsing_error():
    with pytest.raises(ParsingError):
        parse_source("<?php\nfunction {\n")


def test_text_helper_handles_multibyte_source():
    tree = parse_source("<?php\necho 'héllo'; trans('ключ');\n")
    calls = [n for n in iter_nodes(tree.root) if n.type == "function_call_expression"]
    assert tree.text(calls[0]) == "trans('ключ')"


def test_error_hierarchy():
    assert issubclass(SourceParseError, ParsingError)
    for cls in (ParsingError, SourceReadError, CatalogError, ConfigError):
        assert issubclass(cls, ScannerError)
    assert not issubclass(CatalogError, ParsingError)
    assert not issubclass(ConfigError, ParsingError)
    assert str(SourceReadError("cannot read", path="a.php")) == "a.php: cannot read"


def test_char_column_counts_characters():
    source = "ab\néé x".encode("utf-8")
    assert char_column(source, source.index(b"x")) == 4
    assert char_column(source, 0) == 1


def test_xml_declaration_is_template_text():
    text = '<?xml version="1.0" encoding="UTF-8"?>\n<rss><?php echo __(\'feed.title\'); ?></rss>\n'
    tree = parse_source(text, path="feed.php")
    sites = list(find_call_sites(tree, CallTargets()))
    assert [(s.target, s.line) for s in sites] == [("__", 2)]
    assert tree.source == text.encode("utf-8")
