"""Structured errors for the translation key scanner."""

from __future__ import annotations

from typing import Any


class ScannerError(Exception):
    """Base class for scanner related issues."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ParsingError(ScannerError):
    """Base class for source text that cannot be turned into a syntax tree."""


class SourceParseError(ParsingError):
    """Raised when a source file is not syntactically valid PHP."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ):
        super().__init__(message, context={"path": path, "line": line, "column": column})
        self.path = path
        self.line = line
        self.column = column
        self.message = message

    def __str__(self) -> str:
        location = self.path or "<string>"
        if self.line is not None:
            location = f"{location}:{self.line}"
            if self.column is not None:
                location = f"{location}:{self.column}"
        return f"{location}: {self.message}"


class SourceReadError(ScannerError):
    """Raised when a source file cannot be read or is not valid UTF-8."""

    def __init__(self, message: str, *, path: str):
        super().__init__(f"{path}: {message}", context={"path": path})
        self.path = path


class CatalogError(ScannerError):
    """Raised when the locale catalog cannot answer a lookup (e.g. unknown locale)."""


class ConfigError(ScannerError):
    """Raised when configuration values are malformed."""
