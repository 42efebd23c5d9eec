"""Walker observations."""

from __future__ import annotations

import errno
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    """Classification of a per-path failure during a walk."""

    PERMISSION = "permission"
    VANISHED = "vanished"
    IO = "io"

    @classmethod
    def classify(cls, exc: OSError) -> ErrorKind:
        if isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EPERM):
            return cls.PERMISSION
        if isinstance(exc, FileNotFoundError) or exc.errno == errno.ENOENT:
            return cls.VANISHED
        return cls.IO


class WalkAction(Enum):
    """What the walker should do after an entry has been consumed."""

    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"
    ABORT = "abort"


@dataclass(frozen=True, slots=True)
class VisitError:
    """A failure attached to one path."""

    kind: ErrorKind
    cause: OSError

    @property
    def message(self) -> str:
        return self.cause.strerror or str(self.cause)


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """Single filesystem node observed by the walker.

    ``size`` is the file length for regular files and 0 for directories,
    symlinks and special files. ``depth`` counts path segments below the
    walk root (the root itself is 0).
    """

    path: Path
    is_directory: bool
    size: int = 0
    depth: int = 0
    error: VisitError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
