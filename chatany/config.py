"""Persistent JSON config helpers.

Stores the editor preference and the last editor-open timestamp.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "chat-any"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

EDITOR_KEY = "editor"
LAST_EDITOR_OPEN_KEY = "last_editor_open_ms"
MACOS_DEFAULT_EDITOR = "Cursor"
FALLBACK_EDITOR_COMMAND = "cursor"


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


class ConfigStore:
    """Key-value view over the JSON config file."""

    def get(self, key: str) -> object | None:
        return load_config().get(key)

    def set(self, key: str, value: object) -> None:
        config = load_config()
        config[key] = value
        save_config(config)


class MemoryStore:
    """In-process key-value store with the same surface as ``ConfigStore``."""

    def __init__(self, initial: dict[str, object] | None = None) -> None:
        self.data: dict[str, object] = dict(initial or {})

    def get(self, key: str) -> object | None:
        return self.data.get(key)

    def set(self, key: str, value: object) -> None:
        self.data[key] = value


def default_editor_name() -> str:
    """Return the platform default editor identifier."""
    if sys.platform == "darwin":
        return MACOS_DEFAULT_EDITOR
    for variable in ("VISUAL", "EDITOR"):
        value = os.environ.get(variable, "").strip()
        if value:
            return value
    return FALLBACK_EDITOR_COMMAND


def load_editor_name(store: ConfigStore | MemoryStore | None = None) -> str:
    """Return the configured editor, falling back to the platform default."""
    value = (store or ConfigStore()).get(EDITOR_KEY)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default_editor_name()


def load_last_open_ms(store: ConfigStore | MemoryStore) -> int:
    """Return the stored last editor-open time in epoch milliseconds.

    Missing, non-numeric, and boolean values read as ``0``.
    """
    value = store.get(LAST_EDITOR_OPEN_KEY)
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError:
            return 0
    return 0


def save_last_open_ms(store: ConfigStore | MemoryStore, timestamp_ms: int) -> None:
    """Persist the last editor-open time as a decimal string."""
    store.set(LAST_EDITOR_OPEN_KEY, str(int(timestamp_ms)))


__all__ = [
    "CONFIG_PATH",
    "ConfigStore",
    "EDITOR_KEY",
    "LAST_EDITOR_OPEN_KEY",
    "MemoryStore",
    "default_editor_name",
    "load_config",
    "load_editor_name",
    "load_last_open_ms",
    "save_config",
    "save_last_open_ms",
]
