"""Find missing translation strings in PHP and Blade sources.

Scans the configured source paths for translation calls (``__()``,
``trans()``, ``trans_choice()``, ``Lang::get()``, ``@lang`` ...), collects the
literal keys and prints every key the target locale does not define, one per
line.

Exit codes:
 - 0: scan completed (missing keys, if any, printed on stdout)
 - 1: target locale equals the base locale, nothing scanned
 - 2: configuration, read, parse or catalog error

Example:
  lost-in-translation fr --sorted -v
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import TextIO

from ..config.settings import Settings, load_settings
from ..domain.models import ScanPhase, ScanProgressEvent, ScanWarning
from ..parsing.errors import ConfigError, ScannerError
from ..services.file_finder import list_paths
from ..services.locale_catalog import LangDirectoryCatalog, resolve_lang_path
from ..services.missing_key_finder import MissingKeyFinder


class ProgressBar:
    """Single-line progress bar on a terminal stream, cleared when finished."""

    def __init__(self, stream: TextIO, width: int = 28) -> None:
        self.stream = stream
        self.width = width
        self._drawn = 0

    def __call__(self, event: ScanProgressEvent) -> None:
        if event.phase is not ScanPhase.SCANNING or event.total <= 0:
            return
        filled = int(self.width * event.current / event.total)
        line = f" {event.current:>{len(str(event.total))}}/{event.total} [{'=' * filled}{' ' * (self.width - filled)}]"
        self._drawn = len(line)
        self.stream.write("\r" + line)
        self.stream.flush()

    def clear(self) -> None:
        if self._drawn:
            self.stream.write("\r" + " " * self._drawn + "\r")
            self.stream.flush()
            self._drawn = 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="lost-in-translation",
        description="Find missing translation strings in your PHP and Blade files",
    )
    p.add_argument("locale", help="The locale to be checked")
    p.add_argument("--sorted", action="store_true", help="Sort the values before printing")
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Print skipped dynamic keys (-v) and debug logging (-vv)",
    )
    p.add_argument("--json", action="store_true", help="Emit JSON instead of one key per line")
    p.add_argument("--config", help="Path to a lost-in-translation.json config file")
    p.add_argument(
        "--path",
        dest="paths",
        action="append",
        help="Source directory or file to scan (repeatable; overrides configured paths)",
    )
    p.add_argument("--lang-path", help="Laravel lang directory (default: lang/ or resources/lang/)")
    p.add_argument("--base-locale", help="Base locale of the application (default: en)")
    p.add_argument("--jobs", type=int, help="Number of parallel workers (default: CPU count)")
    p.add_argument("--no-progress", action="store_true", help="Do not draw a progress bar")
    return p.parse_args(argv)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _settings(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.config)
    if args.jobs is not None and args.jobs < 1:
        raise ConfigError("--jobs must be >= 1")
    return settings.with_overrides(
        base_locale=args.base_locale,
        paths=args.paths,
        lang_path=args.lang_path,
        max_workers=args.jobs,
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    try:
        settings = _settings(args)
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return 2

    locale = args.locale
    if locale == settings.base_locale:
        print(f"Locale `{locale}` must be different from `{settings.base_locale}`.", file=sys.stderr)
        return 1

    progress = None
    if not args.no_progress and not args.json and sys.stderr.isatty():
        progress = ProgressBar(sys.stderr)

    def warn(warning: ScanWarning) -> None:
        if args.verbose:
            if progress is not None:
                progress.clear()
            print(warning.describe(), file=sys.stderr)

    catalog = LangDirectoryCatalog(resolve_lang_path(".", settings.lang_path))
    finder = MissingKeyFinder(
        catalog,
        locale,
        targets=settings.targets,
        max_workers=settings.max_workers,
        blade_directives=settings.blade_directives,
        on_warning=warn,
        on_progress=progress,
    )
    try:
        catalog.keys(locale)  # unknown locale fails before any scanning
        files = list_paths(settings.paths, settings.extensions)
        result = finder.scan(files, sort=args.sorted)
    except ScannerError as e:
        print(str(e), file=sys.stderr)
        return 2
    finally:
        if progress is not None:
            progress.clear()

    if args.json:
        print(json.dumps(result.to_dict(sort=args.sorted), ensure_ascii=False, indent=2))
    else:
        for key in result.ordered(args.sorted):
            print(key)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
