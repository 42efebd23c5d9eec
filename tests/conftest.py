"""Shared test fixtures."""

from __future__ import annotations

import errno
from pathlib import Path

import pytest

import dirsize.core.walker as walker


def _make_tree(root: Path, layout: dict) -> Path:
    """Create files (int = size in bytes) and directories (dict) under *root*."""
    root.mkdir(parents=True, exist_ok=True)
    for name, value in layout.items():
        path = root / name
        if isinstance(value, dict):
            _make_tree(path, value)
        else:
            path.write_bytes(b"x" * value)
    return root


@pytest.fixture
def make_tree():
    return _make_tree


@pytest.fixture
def scenario_tree(tmp_path):
    """root/{a.txt(100B), sub/{b.txt(50B)}, empty/}"""
    return _make_tree(tmp_path / "root", {"a.txt": 100, "sub": {"b.txt": 50}, "empty": {}})


@pytest.fixture
def deep_tree(tmp_path):
    return _make_tree(
        tmp_path / "deep",
        {
            "top.bin": 7,
            "a": {
                "a1.bin": 10,
                "b": {
                    "b1.bin": 20,
                    "c": {"c1.bin": 40, "d": {"d1.bin": 80}},
                },
            },
            "e": {"e1.bin": 5, "f": {}},
        },
    )


@pytest.fixture
def deny_listing(monkeypatch):
    """Paths added to the returned set fail to list with EACCES.

    Works regardless of the uid running the tests.
    """
    denied: set[Path] = set()
    real_list_dir = walker._list_dir

    def fake_list_dir(path, sort_entries):
        if Path(path) in denied:
            raise PermissionError(errno.EACCES, "Permission denied", str(path))
        return real_list_dir(path, sort_entries)

    monkeypatch.setattr(walker, "_list_dir", fake_list_dir)
    return denied


@pytest.fixture
def isolate_settings(tmp_path, monkeypatch):
    """Redirect the settings file to a temp directory."""
    config_home = tmp_path / "config"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "dirsize" / "settings.json"
