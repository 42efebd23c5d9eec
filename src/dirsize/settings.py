"""JSON-backed user defaults."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from dirsize.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "dirsize"
_SETTINGS_FILE = "settings.json"

DEFAULTS: dict[str, Any] = {
    "scan": {"depth": 1, "sort": True, "exclude": [], "one_file_system": False},
    "display": {"error_limit": 3},
}


class Settings:
    """Persistent settings backed by a JSON file.

    Uses dot-notation keys for nested access:
        settings.get("scan.depth")  # reads data["scan"]["depth"]
        settings.set("scan.depth", 2)  # writes + saves

    Keys missing from the file fall back to ``DEFAULTS``.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        found, value = _lookup(self._data, key)
        if found:
            return value
        found, value = _lookup(DEFAULTS, key)
        return value if found else default

    def get_int(self, key: str, minimum: int = 0) -> int:
        """Get an integer >= *minimum*, falling back to the default if invalid."""
        value = self.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value >= minimum:
            return value
        return self._invalid(key, value)

    def get_bool(self, key: str) -> bool:
        value = self.get(key)
        if isinstance(value, bool):
            return value
        return self._invalid(key, value)

    def get_patterns(self, key: str) -> tuple[str, ...]:
        """Get a list of glob patterns as a tuple."""
        value = self.get(key)
        if isinstance(value, list) and all(isinstance(p, str) for p in value):
            return tuple(value)
        return tuple(self._invalid(key, value))

    def _invalid(self, key: str, value: Any) -> Any:
        _, default = _lookup(DEFAULTS, key)
        log.warning("Invalid value %r for '%s' in %s, using %r", value, key, self._path, default)
        return default

    def set(self, key: str, value: Any) -> None:
        """Set a value by dot-notation key and persist to disk."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            return
        if not isinstance(data, dict):
            log.warning("Ignoring settings in %s: expected an object", self._path)
            return
        self._data = data

    def _save(self) -> None:
        """Persist settings to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self._path, e)


def _lookup(data: dict[str, Any], key: str) -> tuple[bool, Any]:
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return False, None
        node = node[part]
    return True, node
