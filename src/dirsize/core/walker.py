"""Depth-first directory tree walker.

The walker is a generator: it yields one :class:`DirectoryEntry` per
filesystem node in pre-order (a directory before its contents) and the
consumer may ``send()`` back a :class:`WalkAction` to prune a subtree or
stop the walk.  Failures on descendants never raise; they are yielded as
entries carrying a :class:`VisitError`.  Only a bad root is fatal.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Callable, Generator

from dirsize.models.entry import DirectoryEntry, ErrorKind, VisitError, WalkAction

log = logging.getLogger(__name__)

EntryStream = Generator[DirectoryEntry, "WalkAction | None", None]
Visitor = Callable[[DirectoryEntry], "WalkAction | None"]


class DirSizeError(Exception):
    """Base class for dirsize errors."""


class RootPathError(DirSizeError):
    """Raised when the walk root is missing, not a directory, or unreadable."""


def absolute(root: Path | str) -> Path:
    """Absolute form of *root* without resolving symlinks."""
    return Path(os.path.abspath(os.fspath(root)))


def _list_dir(path: Path, sort_entries: bool) -> list[os.DirEntry]:
    """Read all entries of one directory."""
    with os.scandir(path) as it:
        entries = list(it)
    if sort_entries:
        entries.sort(key=lambda e: e.name)
    return entries


def walk(
    root: Path | str,
    *,
    sort_entries: bool = True,
    one_file_system: bool = False,
) -> EntryStream:
    """Validate *root* and return a lazy pre-order stream of its entries.

    Raises:
        RootPathError: *root* does not exist, is not a directory, or
            cannot be listed.
    """
    root_path = absolute(root)
    try:
        st = os.stat(root_path)
    except FileNotFoundError as exc:
        raise RootPathError(f"{root_path}: no such file or directory") from exc
    except OSError as exc:
        raise RootPathError(f"{root_path}: {exc.strerror or exc}") from exc

    if not stat.S_ISDIR(st.st_mode):
        raise RootPathError(f"{root_path} is not a directory")

    try:
        children = _list_dir(root_path, sort_entries)
    except OSError as exc:
        raise RootPathError(f"cannot open {root_path}: {exc.strerror or exc}") from exc

    return _walk(root_path, st.st_dev, children, sort_entries, one_file_system)


def _failed(path: Path, depth: int, exc: OSError, *, is_directory: bool) -> DirectoryEntry:
    kind = ErrorKind.classify(exc)
    log.debug("Cannot access %s (%s): %s", path, kind.value, exc)
    return DirectoryEntry(
        path=path,
        is_directory=is_directory,
        depth=depth,
        error=VisitError(kind=kind, cause=exc),
    )


def _walk(
    root: Path,
    root_dev: int,
    children: list[os.DirEntry],
    sort_entries: bool,
    one_file_system: bool,
) -> EntryStream:
    action = yield DirectoryEntry(path=root, is_directory=True)
    if action in (WalkAction.ABORT, WalkAction.SKIP_SUBTREE):
        return

    stack = [(iter(children), 1)]
    while stack:
        pending, depth = stack[-1]
        dirent = next(pending, None)
        if dirent is None:
            stack.pop()
            continue

        path = Path(dirent.path)
        try:
            is_dir = dirent.is_dir(follow_symlinks=False)
            st = dirent.stat(follow_symlinks=False)
        except OSError as exc:
            if (yield _failed(path, depth, exc, is_directory=False)) is WalkAction.ABORT:
                return
            continue

        if not is_dir:
            size = st.st_size if stat.S_ISREG(st.st_mode) else 0
            if (yield DirectoryEntry(path=path, is_directory=False, size=size, depth=depth)) is WalkAction.ABORT:
                return
            continue

        action = yield DirectoryEntry(path=path, is_directory=True, depth=depth)
        if action is WalkAction.ABORT:
            return
        if action is WalkAction.SKIP_SUBTREE:
            continue
        if one_file_system and st.st_dev != root_dev:
            log.debug("Not crossing filesystem boundary at %s", path)
            continue

        try:
            entries = _list_dir(path, sort_entries)
        except OSError as exc:
            if (yield _failed(path, depth, exc, is_directory=True)) is WalkAction.ABORT:
                return
            continue
        stack.append((iter(entries), depth + 1))


class TreeWalker:
    """Walk configuration plus the callback-driven form of :func:`walk`."""

    def __init__(self, *, sort_entries: bool = True, one_file_system: bool = False) -> None:
        self.sort_entries = sort_entries
        self.one_file_system = one_file_system

    def entries(self, root: Path | str) -> EntryStream:
        return walk(root, sort_entries=self.sort_entries, one_file_system=self.one_file_system)

    def run(self, root: Path | str, visit: Visitor) -> None:
        """Feed every entry under *root* to *visit*, obeying the returned action.

        A ``None`` return is treated as ``WalkAction.CONTINUE``.
        """
        stream = self.entries(root)
        action: WalkAction | None = None
        try:
            while True:
                try:
                    entry = stream.send(action)
                except StopIteration:
                    return
                action = visit(entry)
        finally:
            stream.close()
