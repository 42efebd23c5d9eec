"""Partial-failure report."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from dirsize.models.entry import ErrorKind


@dataclass(frozen=True, slots=True)
class SoftError:
    """A path that could not be measured, with the reason."""

    path: Path
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(slots=True)
class SoftErrorReport:
    """Every soft error of one traversal, in encounter order.

    The full list is always retained; truncation for display happens in
    ``head()`` / ``summary()`` only.
    """

    errors: list[SoftError] = field(default_factory=list)

    def add(self, path: Path, kind: ErrorKind, message: str) -> None:
        self.errors.append(SoftError(path=path, kind=kind, message=message))

    def head(self, limit: int) -> list[SoftError]:
        return self.errors[: max(limit, 0)]

    def remaining(self, limit: int) -> int:
        """Number of errors hidden when only ``limit`` are shown."""
        return max(len(self.errors) - max(limit, 0), 0)

    def summary(self, limit: int = 3) -> str:
        """One-line description, e.g. ``access denied to some locations: a; b and 2 more...``."""
        if not self.errors:
            return ""
        text = "access denied to some locations: " + "; ".join(str(e) for e in self.head(limit))
        hidden = self.remaining(limit)
        if hidden:
            text += f" and {hidden} more..."
        return text

    @property
    def permission_denied(self) -> bool:
        return any(e.kind is ErrorKind.PERMISSION for e in self.errors)

    def to_list(self) -> list[dict[str, str]]:
        return [{"path": str(e.path), "kind": e.kind.value, "message": e.message} for e in self.errors]

    @classmethod
    def from_list(cls, raw: list[dict[str, str]]) -> SoftErrorReport:
        report = cls()
        for item in raw:
            report.add(Path(item["path"]), ErrorKind(item.get("kind", ErrorKind.IO.value)), item.get("message", ""))
        return report

    def __len__(self) -> int:
        return len(self.errors)

    def __bool__(self) -> bool:
        return bool(self.errors)

    def __iter__(self) -> Iterator[SoftError]:
        return iter(self.errors)


def build_warning(report: SoftErrorReport, is_elevated: bool, limit: int = 3) -> str:
    """Build the user-facing warning for a partial scan, or "" when complete."""
    if not report:
        return ""
    message = f"Some directories couldn't be accessed: {report.summary(limit)}"
    if report.permission_denied and not is_elevated:
        message += "\nTo scan all directories, try again with elevated privileges (--elevate)."
    return message
