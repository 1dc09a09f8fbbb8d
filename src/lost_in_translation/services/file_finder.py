"""Source file enumeration for a scan.

Paths may be directories (walked recursively) or single files. Files are
filtered by name suffix; the default ``php`` suffix also admits Blade
templates (``*.blade.php``). The same file reached through overlapping paths
is returned once.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Sequence

from ..core import filesystem
from ..domain.models import SourceFile, kind_for

__all__ = ["DEFAULT_EXTENSIONS", "list_paths", "list_files"]

_log = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: Sequence[str] = ("php",)


def list_paths(paths: Iterable[str | Path], extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> List[Path]:
    seen: set[Path] = set()
    out: List[Path] = []
    for p in paths:
        root = Path(p)
        if not root.exists():
            _log.warning("Skipping missing path: %s", root)
            continue
        for file in filesystem.walk_files(root):
            if not filesystem.has_suffix(file, extensions):
                continue
            key = file.resolve()
            if key in seen:
                continue
            seen.add(key)
            out.append(file)
    return out


def list_files(
    paths: Iterable[str | Path],
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    encoding: str = "utf-8",
) -> List[SourceFile]:
    """Read every matching file under ``paths`` into a ``SourceFile``."""
    return [
        SourceFile(path=f, text=filesystem.read_text(f, encoding), kind=kind_for(f))
        for f in list_paths(paths, extensions)
    ]
