"""dirsize data models."""

from dirsize.models.entry import DirectoryEntry, ErrorKind, VisitError, WalkAction
from dirsize.models.report import SoftError, SoftErrorReport
from dirsize.models.scan_result import DirSizeResult, ScanProgress, SubdirSizesResult, TotalResult

__all__ = [
    "DirSizeResult",
    "DirectoryEntry",
    "ErrorKind",
    "ScanProgress",
    "SoftError",
    "SoftErrorReport",
    "SubdirSizesResult",
    "TotalResult",
    "VisitError",
    "WalkAction",
]
