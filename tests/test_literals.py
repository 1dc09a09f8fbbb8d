"""Tests for PHP string escape decoding."""

from __future__ import annotations

from lost_in_translation.parsing.literals import unescape_double_quoted, unescape_single_quoted


def test_single_quoted_only_unescapes_quote_and_backslash():
    assert unescape_single_quoted(r"it\'s a \\ \n") == "it's a \\ \\n"


def test_double_quoted_escapes():
    assert unescape_double_quoted(r"a\tb\n\$x\"\\") == 'a\tb\n$x"\\'
    assert unescape_double_quoted(r"\x41\101\u{1F600}") == "AA\U0001F600"
    assert unescape_double_quoted(r"\q stays") == r"\q stays"


def test_heredoc_keeps_escaped_quote():
    assert unescape_double_quoted(r"say \"hi\"\t", quote_escape=False) == 'say \\"hi\\"\t'
