"""Missing translation key finder (scan orchestration).

Pipeline per file: read -> lower (Blade) -> parse -> match call sites ->
resolve first arguments. Literal keys are collected into a per-file ordered
set; rejected arguments become ``ScanWarning`` events and are skipped.

Aggregation is an explicit fold: per-file results are merged in the order the
files were given, so the reported key order is identical for sequential and
parallel runs. Only after every file is scanned is the locale catalog
queried, once per distinct key.

Phases: PENDING -> SCANNING -> AGGREGATING -> DONE.

Failure policy:
 - ``SourceParseError`` in any file aborts the scan. Files not yet started
   are cancelled and the error propagates to the caller.
 - ``SourceReadError`` (unreadable or non UTF-8 file) aborts the same way.
 - Catalog errors (unknown locale, unreadable language files) propagate.
 - Rejected arguments never abort; they are reported through ``on_warning``.

Parallelism: ``max_workers > 1`` fans files out over a ``ThreadPoolExecutor``.
Each worker owns its syntax trees; nothing mutable is shared between files.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from ..domain.models import (
    FileScan,
    LiteralKey,
    ScanPhase,
    ScanProgressEvent,
    ScanResult,
    ScanWarning,
    SourceFile,
)
from ..parsing.argument_resolver import resolve_first_arg
from ..parsing.blade import lower_blade
from ..parsing.call_matcher import CallTargets, find_call_sites
from ..parsing.errors import SourceReadError
from ..parsing.php_parser import parse_source
from .locale_catalog import LocaleCatalog

__all__ = ["MissingKeyFinder", "scan_source", "find_missing_keys"]

_log = logging.getLogger(__name__)

FileInput = Union[SourceFile, str, Path]
WarningCallback = Callable[[ScanWarning], None]
ProgressCallback = Callable[[ScanProgressEvent], None]


def _as_source(item: FileInput) -> SourceFile:
    if isinstance(item, SourceFile):
        return item
    try:
        return SourceFile.from_path(item)
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(f"cannot read source file: {e}", path=str(item)) from e


def scan_source(
    source: SourceFile,
    targets: CallTargets,
    *,
    blade_directives: Iterable[str] = (),
) -> FileScan:
    """Collect literal keys and warnings from one file."""
    path = str(source.path)
    text = source.text
    if source.kind == "blade":
        text = lower_blade(text, extra_directives=blade_directives)
    tree = parse_source(text, path=path)
    result = FileScan(path=path)
    seen: set[str] = set()
    for call in find_call_sites(tree, targets):
        result.call_sites += 1
        resolved = resolve_first_arg(call)
        if isinstance(resolved, LiteralKey):
            if resolved.value not in seen:
                seen.add(resolved.value)
                result.keys.append(resolved.value)
            continue
        result.warnings.append(
            ScanWarning(
                path=path,
                line=call.line,
                column=call.column,
                reason=resolved.reason,
                raw_argument=resolved.source_text,
            )
        )
    _log.debug(
        "%s: %d call site(s), %d key(s), %d warning(s)",
        path,
        result.call_sites,
        len(result.keys),
        len(result.warnings),
    )
    return result


class MissingKeyFinder:
    def __init__(
        self,
        catalog: LocaleCatalog,
        locale: str,
        *,
        targets: CallTargets | None = None,
        max_workers: int | None = None,
        blade_directives: Iterable[str] = (),
        on_warning: Optional[WarningCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.catalog = catalog
        self.locale = locale
        self.targets = targets or CallTargets()
        self.max_workers = max_workers if max_workers is not None else (os.cpu_count() or 1)
        self.blade_directives = tuple(blade_directives)
        self.on_warning = on_warning
        self.on_progress = on_progress
        self.phase = ScanPhase.PENDING

    # Internal helpers -------------------------------------------------
    def _progress(self, current: int, total: int, path: str | None = None) -> None:
        if self.on_progress is not None:
            self.on_progress(ScanProgressEvent(self.phase, current, total, path))

    def _scan_one(self, item: FileInput) -> FileScan:
        return scan_source(_as_source(item), self.targets, blade_directives=self.blade_directives)

    def _scan_sequential(self, files: Sequence[FileInput]) -> List[FileScan]:
        out: List[FileScan] = []
        for idx, item in enumerate(files, start=1):
            scan = self._scan_one(item)
            out.append(scan)
            self._progress(idx, len(files), scan.path)
        return out

    def _scan_parallel(self, files: Sequence[FileInput]) -> List[FileScan]:
        results: Dict[int, FileScan] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as ex:
            pending: Dict[Future, int] = {ex.submit(self._scan_one, f): i for i, f in enumerate(files)}
            done_count = 0
            while pending:
                done, _ = wait(pending, return_when=FIRST_EXCEPTION)
                for fut in done:
                    idx = pending.pop(fut)
                    exc = fut.exception()
                    if exc is not None:
                        for other in pending:
                            other.cancel()
                        raise exc
                    results[idx] = fut.result()
                    done_count += 1
                    self._progress(done_count, len(files), results[idx].path)
        return [results[i] for i in range(len(files))]

    # Public API -------------------------------------------------------
    def collect(self, files: Iterable[FileInput]) -> ScanResult:
        """Scan files and fold their keys; no catalog lookups."""
        items = list(files)
        self.phase = ScanPhase.SCANNING
        if self.max_workers > 1 and len(items) > 1:
            scans = self._scan_parallel(items)
        else:
            scans = self._scan_sequential(items)
        self.phase = ScanPhase.AGGREGATING
        result = ScanResult(files_scanned=len(scans))
        seen: set[str] = set()
        for scan in scans:
            for warning in scan.warnings:
                result.warnings.append(warning)
                if self.on_warning is not None:
                    self.on_warning(warning)
            for key in scan.keys:
                if key not in seen:
                    seen.add(key)
                    result.reported.append(key)
        return result

    def scan(self, files: Iterable[FileInput], *, sort: bool = False) -> ScanResult:
        result = self.collect(files)
        keys = sorted(result.reported) if sort else result.reported
        for idx, key in enumerate(keys, start=1):
            if not self.catalog.has(key, self.locale):
                result.missing.append(key)
            self._progress(idx, len(keys))
        self.phase = ScanPhase.DONE
        _log.info(
            "Scanned %d file(s): %d key(s) reported, %d missing for %s, %d warning(s)",
            result.files_scanned,
            len(result.reported),
            len(result.missing),
            self.locale,
            len(result.warnings),
        )
        return result


def find_missing_keys(
    files: Iterable[FileInput],
    locale: str,
    catalog: LocaleCatalog,
    *,
    targets: CallTargets | None = None,
    sort: bool = False,
    max_workers: int | None = 1,
    on_warning: Optional[WarningCallback] = None,
) -> List[str]:
    """Functional wrapper returning the missing keys in report order."""
    finder = MissingKeyFinder(
        catalog, locale, targets=targets, max_workers=max_workers, on_warning=on_warning
    )
    return finder.scan(files, sort=sort).ordered(sort)
