"""PHP/Blade parsing: syntax trees, call-site matching and key resolution."""

from .argument_resolver import resolve_first_arg
from .blade import lower_blade
from .call_matcher import CallTargets, find_call_sites
from .errors import (
    CatalogError,
    ConfigError,
    ParsingError,
    ScannerError,
    SourceParseError,
    SourceReadError,
)
from .php_parser import SyntaxTree, parse_source

__all__ = [
    "CallTargets",
    "CatalogError",
    "ConfigError",
    "ParsingError",
    "ScannerError",
    "SourceParseError",
    "SourceReadError",
    "SyntaxTree",
    "find_call_sites",
    "lower_blade",
    "parse_source",
    "resolve_first_arg",
]
