"""Lightweight persistent key-value state (e.g. the last checked month)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional

from . import config


class KeyValueStore:
    """String key-value storage used for small pieces of cross-session state."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Keeps values for the lifetime of the process only."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._values[key] = str(value)


class JsonFileStore(KeyValueStore):
    """Stores values as a flat JSON object on disk.

    Unreadable or corrupted files read as empty; write errors propagate.
    """

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path is not None else config.STATE_PATH

    def load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError):
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def get_item(self, key: str) -> Optional[str]:
        return self.load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self.load()
        data[key] = str(value)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open('w', encoding='utf-8') as handle:
            json.dump(data, handle, indent=2, sort_keys=True)
