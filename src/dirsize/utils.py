"""Shared utility functions."""

from __future__ import annotations

import os
from pathlib import Path

from dirsize.models.scan_result import DirSizeResult


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string, e.g. ``1.50 KB``."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"

    units = ("KB", "MB", "GB", "TB")
    if size_bytes < 1024:
        return f"{size_bytes} B"
    value = size_bytes / 1024
    for unit in units[:-1]:
        if value < 1024:
            return f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} {units[-1]}"


def sort_by_size(entries: list[DirSizeResult]) -> list[DirSizeResult]:
    """Return a copy of *entries*, largest first (ties by path)."""
    return sorted(entries, key=lambda e: (-e.total_bytes, str(e.path)))


def relative_label(path: Path, root: Path) -> str:
    """Display *path* relative to *root*, ``.`` for the root itself."""
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m {secs:.0f}s"
