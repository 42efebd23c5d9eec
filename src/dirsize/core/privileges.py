"""Privilege elevation via pkexec for scanning unreadable locations."""

from __future__ import annotations

import ctypes
import json
import logging
import os
import shutil
import subprocess
from pathlib import Path

from dirsize.core.walker import DirSizeError
from dirsize.models.scan_result import SubdirSizesResult

log = logging.getLogger(__name__)

# Timeout for the pkexec subprocess (seconds).
_PKEXEC_TIMEOUT = 600


class PrivilegeError(DirSizeError):
    """Raised when privilege escalation fails."""


def is_elevated() -> bool:
    """Check if the current process runs with administrative rights."""
    if hasattr(os, "geteuid"):
        return os.geteuid() == 0
    try:
        return bool(ctypes.windll.shell32.IsUserAnAdmin())
    except (AttributeError, OSError):
        return False


def find_dirsize_executable() -> str | None:
    """Find the dirsize CLI executable on PATH."""
    return shutil.which("dirsize")


def pkexec_available() -> bool:
    """Check if pkexec is available on the system."""
    return shutil.which("pkexec") is not None


def run_privileged_scan(
    root: Path | str,
    max_depth: int = 0,
    exclude: tuple[str, ...] = (),
    one_file_system: bool = False,
) -> SubdirSizesResult:
    """Re-run a scan as root via pkexec.

    Invokes ``pkexec dirsize scan-as-root`` with a JSON request on stdin and
    rebuilds the result from the JSON it prints.

    Raises:
        PrivilegeError: On authentication cancel/deny/timeout/bad output.
    """
    dirsize_exe = find_dirsize_executable()
    if dirsize_exe is None:
        raise PrivilegeError("Could not find the 'dirsize' executable on PATH")
    if not pkexec_available():
        raise PrivilegeError("pkexec not available, cannot escalate privileges")

    payload = json.dumps(
        {
            "root": str(root),
            "max_depth": max_depth,
            "exclude": list(exclude),
            "one_file_system": one_file_system,
        }
    )

    try:
        proc = subprocess.run(
            ["pkexec", dirsize_exe, "scan-as-root"],
            input=payload,
            capture_output=True,
            text=True,
            timeout=_PKEXEC_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        raise PrivilegeError("Privileged scan timed out after 10 minutes")

    if proc.returncode == 126:
        raise PrivilegeError("Authentication dismissed by user")
    if proc.returncode == 127:
        raise PrivilegeError("Authentication denied")
    if proc.returncode != 0:
        stderr = proc.stderr.strip()
        raise PrivilegeError(f"Privileged scan failed (exit {proc.returncode}): {stderr}")

    try:
        return SubdirSizesResult.from_dict(json.loads(proc.stdout))
    except (json.JSONDecodeError, TypeError, KeyError) as exc:
        raise PrivilegeError(f"Invalid response from privileged process: {exc}")
