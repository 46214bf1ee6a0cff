"""
Key-value storage persisted as a single JSON document.

Mirrors the browser ``localStorage`` contract: string keys, string values,
every write goes straight to disk.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Optional

from .errors import ValidationError

logger = logging.getLogger(__name__)

TASKS_KEY = "taskmaster-tasks"
THEME_KEY = "taskmaster-theme"

THEMES = ["light", "dark"]
DEFAULT_THEME = "light"


class LocalStorage:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._items: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            logger.exception("Failed to read storage file %s; starting empty.", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s does not hold an object; starting empty.", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2, ensure_ascii=False)
        os.replace(tmp, self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = {**self._items, key: str(value)}
            self._flush(items)
            self._items = items

    def remove_item(self, key: str) -> None:
        with self._lock:
            if key not in self._items:
                return
            items = {k: v for k, v in self._items.items() if k != key}
            self._flush(items)
            self._items = items

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._items)


# ---------------------------------------------------------------------------
# Theme preference
# ---------------------------------------------------------------------------

def get_theme(storage: LocalStorage) -> str:
    theme = storage.get_item(THEME_KEY)
    return theme if theme in THEMES else DEFAULT_THEME


def set_theme(storage: LocalStorage, theme: str) -> str:
    if theme not in THEMES:
        raise ValidationError(f"theme: Expected one of {', '.join(THEMES)}, received '{theme}'")
    storage.set_item(THEME_KEY, theme)
    logger.info("Theme set to %s", theme)
    return theme


def toggle_theme(storage: LocalStorage) -> str:
    return set_theme(storage, "light" if get_theme(storage) == "dark" else "dark")
