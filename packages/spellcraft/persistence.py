"""
Config stores - key/value adapters used by BalanceConfigManager.

The simulation core never touches storage. Stores only move JSON-compatible
dictionaries in and out; merging with defaults is the caller's job.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

logger = logging.getLogger(__name__)

__all__ = ["ConfigStore", "InMemoryConfigStore", "JsonFileConfigStore"]


class ConfigStore(Protocol):
    """Minimal key/value interface for persisted configuration."""

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    def write(self, key: str, data: Dict[str, Any]) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemoryConfigStore:
    """Dictionary-backed store, one per test or session."""

    def __init__(self, initial: Optional[Dict[str, Dict[str, Any]]] = None):
        self._data: Dict[str, Dict[str, Any]] = {}
        for key, value in (initial or {}).items():
            self._data[key] = json.loads(json.dumps(value))

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        # Round-trip through JSON so callers never share nested dicts
        return json.loads(json.dumps(value)) if value is not None else None

    def write(self, key: str, data: Dict[str, Any]) -> None:
        self._data[key] = json.loads(json.dumps(data))

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileConfigStore:
    """
    One JSON file per key inside a directory.

    Usage:
        store = JsonFileConfigStore("~/.spellcraft")
        store.write("balance_config", config.to_dict())
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def write(self, key: str, data: Dict[str, Any]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        tmp.replace(path)
        logger.debug("Wrote %s", path)

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()
