"""JSON-backed key/value stores for persisted settings."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from loguru import logger

from utils.constants import SETTINGS_FILE


class StoreService:
    """Service that reads and writes lightweight JSON stores."""

    def load_store(self, path: Path) -> dict[str, Any]:
        """
        Load JSON data from the given path.

        Args:
            path: Path to the JSON store

        Returns:
            Dictionary payload (empty dict if missing, unreadable or not an object)
        """
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON at {path}; ignoring store")
            return {}
        except OSError as exc:
            logger.warning(f"Failed to read {path}: {exc}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Store at {path} is not a JSON object; ignoring store")
            return {}
        return data

    def save_store(self, path: Path, data: dict[str, Any]) -> bool:
        """
        Persist JSON data to the given path.

        Args:
            path: Path to write
            data: Dictionary payload

        Returns:
            True when the file was written
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            logger.warning(f"Failed to write {path}: {exc}")
            return False
        return True


class SettingsStore:
    """Process-wide boolean settings persisted to a single JSON file."""

    def __init__(self, path: Path | None = None, store_service: StoreService | None = None):
        self.path = path or SETTINGS_FILE
        self._store = store_service or get_store_service()
        self._lock = threading.Lock()
        self._values: dict[str, Any] = self._store.load_store(self.path)

    def get_bool(self, key: str, default: bool = False) -> bool:
        with self._lock:
            value = self._values.get(key, default)
        return value if isinstance(value, bool) else default

    def set_bool(self, key: str, value: bool) -> None:
        with self._lock:
            self._values[key] = bool(value)
            snapshot = dict(self._values)
        self._store.save_store(self.path, snapshot)

    def reload(self) -> None:
        values = self._store.load_store(self.path)
        with self._lock:
            self._values = values


_default_store_service: StoreService | None = None


def get_store_service() -> StoreService:
    """Return a shared StoreService instance."""
    global _default_store_service
    if _default_store_service is None:
        _default_store_service = StoreService()
    return _default_store_service


def reset_store_service() -> None:
    global _default_store_service
    _default_store_service = None


__all__ = ["SettingsStore", "StoreService", "get_store_service", "reset_store_service"]
