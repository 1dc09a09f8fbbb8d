"""Filesystem utility helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator


def read_text(path: str | Path, encoding: str = "utf-8") -> str:
    with open(path, "r", encoding=encoding) as fh:
        return fh.read()


def walk_files(root: str | Path) -> Iterator[Path]:
    """Yield every regular file below ``root`` (or ``root`` itself), sorted per directory."""
    base = Path(root)
    if base.is_file():
        yield base
        return
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames.sort()
        for name in sorted(filenames):
            yield Path(dirpath) / name


def has_suffix(path: str | Path, suffixes: Iterable[str]) -> bool:
    name = Path(path).name
    return any(name.endswith(s) for s in suffixes)
