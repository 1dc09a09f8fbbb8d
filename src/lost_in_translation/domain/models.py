"""Domain models for the translation key scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

BLADE_SUFFIX = ".blade.php"

REASON_NON_STRING = "non-string-argument"
REASON_MISSING = "missing-argument"


@dataclass(frozen=True, slots=True)
class SourceFile:
    path: Path
    text: str
    kind: str = "php"  # or "blade"

    @classmethod
    def from_path(cls, path: str | Path, encoding: str = "utf-8") -> "SourceFile":
        p = Path(path)
        return cls(path=p, text=p.read_text(encoding=encoding), kind=kind_for(p))


def kind_for(path: str | Path) -> str:
    return "blade" if str(path).endswith(BLADE_SUFFIX) else "php"


@dataclass(frozen=True, slots=True)
class CallSite:
    """A call to a configured translation entry point."""

    path: Optional[str]
    line: int  # 1-based
    column: int  # 1-based
    target: str
    arguments: Tuple[Any, ...] = ()
    node: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class LiteralKey:
    value: str


@dataclass(frozen=True, slots=True)
class RejectedKey:
    reason: str
    source_text: str = ""


ResolvedKey = Union[LiteralKey, RejectedKey]


@dataclass(frozen=True, slots=True)
class ScanWarning:
    path: Optional[str]
    line: int
    column: int
    reason: str
    raw_argument: str

    def describe(self) -> str:
        where = f"{self.path}:{self.line}" if self.path else f"line {self.line}"
        if self.reason == REASON_MISSING:
            return f"skipping call without language key ({where})"
        return f"skipping dynamic language key: `{self.raw_argument}` ({where})"


class ScanPhase(str, Enum):
    PENDING = "pending"
    SCANNING = "scanning"
    AGGREGATING = "aggregating"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class ScanProgressEvent:
    phase: ScanPhase
    current: int
    total: int
    path: Optional[str] = None


@dataclass(slots=True)
class FileScan:
    """Keys and warnings collected from one file."""

    path: Optional[str]
    keys: List[str] = field(default_factory=list)
    warnings: List[ScanWarning] = field(default_factory=list)
    call_sites: int = 0


@dataclass(slots=True)
class ScanResult:
    reported: List[str] = field(default_factory=list)  # insertion ordered, unique
    missing: List[str] = field(default_factory=list)  # subset of reported, same order
    warnings: List[ScanWarning] = field(default_factory=list)
    files_scanned: int = 0

    @property
    def missing_set(self) -> frozenset[str]:
        return frozenset(self.missing)

    def ordered(self, sort: bool = False) -> List[str]:
        return sorted(self.missing) if sort else list(self.missing)

    def to_dict(self, sort: bool = False) -> dict:
        return {
            "missing": self.ordered(sort),
            "reported_count": len(self.reported),
            "files_scanned": self.files_scanned,
            "warnings": [
                {
                    "path": w.path,
                    "line": w.line,
                    "column": w.column,
                    "reason": w.reason,
                    "argument": w.raw_argument,
                }
                for w in self.warnings
            ],
        }
