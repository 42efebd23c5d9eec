"""Scan result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dirsize.models.report import SoftErrorReport


@dataclass(frozen=True, slots=True)
class DirSizeResult:
    """Aggregated size of one directory."""

    path: Path
    total_bytes: int


@dataclass(slots=True)
class TotalResult:
    """Best-effort total of a tree.

    ``total_bytes`` is what could be measured; check ``report`` to tell a
    complete answer from a partial one.
    """

    root: Path
    total_bytes: int = 0
    report: SoftErrorReport = field(default_factory=SoftErrorReport)
    cancelled: bool = False

    @property
    def partial(self) -> bool:
        return self.cancelled or bool(self.report)


@dataclass(slots=True)
class SubdirSizesResult:
    """Per-directory sizes of a tree, in first-visit order."""

    root: Path
    max_depth: int = 0
    entries: list[DirSizeResult] = field(default_factory=list)
    total_bytes: int = 0
    report: SoftErrorReport = field(default_factory=SoftErrorReport)
    cancelled: bool = False

    @property
    def partial(self) -> bool:
        return self.cancelled or bool(self.report)

    def find(self, path: Path | str) -> DirSizeResult | None:
        target = Path(path)
        for entry in self.entries:
            if entry.path == target:
                return entry
        return None

    def as_mapping(self) -> dict[Path, int]:
        return {e.path: e.total_bytes for e in self.entries}

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": str(self.root),
            "max_depth": self.max_depth,
            "total_bytes": self.total_bytes,
            "cancelled": self.cancelled,
            "directories": [{"path": str(e.path), "total_bytes": e.total_bytes} for e in self.entries],
            "errors": self.report.to_list(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SubdirSizesResult:
        return cls(
            root=Path(raw["root"]),
            max_depth=raw.get("max_depth", 0),
            entries=[DirSizeResult(path=Path(d["path"]), total_bytes=d["total_bytes"]) for d in raw.get("directories", [])],
            total_bytes=raw.get("total_bytes", 0),
            report=SoftErrorReport.from_list(raw.get("errors", [])),
            cancelled=raw.get("cancelled", False),
        )


@dataclass(frozen=True, slots=True)
class ScanProgress:
    """Read-only snapshot published while a scan is running."""

    entries_seen: int = 0
    bytes_seen: int = 0
    errors: int = 0
    current_path: str = ""
    finished: bool = False
