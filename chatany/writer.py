"""Write/append state machine for the destination document.

``write`` always overwrites and opens the editor. ``append`` consults the last
editor-open time:

- more than ``RESET_AFTER_MS`` ago: behave exactly like ``write``;
- more than ``REOPEN_AFTER_MS`` ago: append, reopen, and scroll to the end;
- otherwise: append and only report success, leaving editor focus alone.

Directory, persistence, and launch failures map to distinct messages. A launch
failure after a successful write still reports the content as saved.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .config import ConfigStore, MemoryStore, load_last_open_ms, save_last_open_ms
from .paths import Destination

logger = logging.getLogger(__name__)

MODE_WRITE = "write"
MODE_APPEND = "append"

APPEND_SEPARATOR = "\n\n---\n\n"
REOPEN_AFTER_MS = 60 * 1000
RESET_AFTER_MS = 10 * 60 * 1000

DIRECTORY_FAILED = "Could not create the destination directory"
WRITE_FAILED = "Could not write file"
OPEN_FAILED = "Wrote content, but could not open editor"
APPEND_SUCCEEDED = "Append succeeded"

OpenEditor = Callable[[Path, Path, bool], str | None]


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class WriteOutcome:
    """Result of one writer operation.

    ``message`` is the user-facing text to show, or ``None`` when opening the
    editor is feedback enough.
    """

    persisted: bool
    opened: bool
    message: str | None = None


class AggregateWriter:
    def __init__(
        self,
        destination: Destination,
        state: ConfigStore | MemoryStore,
        open_editor: OpenEditor,
        clock_ms: Callable[[], int] = now_ms,
    ) -> None:
        self.destination = destination
        self.state = state
        self.open_editor = open_editor
        self.clock_ms = clock_ms

    def write(self, text: str) -> WriteOutcome:
        """Overwrite the destination with ``text`` and open it."""
        if not self.ensure_directory():
            return WriteOutcome(persisted=False, opened=False, message=DIRECTORY_FAILED)
        return self._overwrite_and_open(text, self.clock_ms())

    def append(self, text: str) -> WriteOutcome:
        """Append ``text``; reopen or reset depending on the last open time."""
        if not self.ensure_directory():
            return WriteOutcome(persisted=False, opened=False, message=DIRECTORY_FAILED)

        now = self.clock_ms()
        elapsed = now - load_last_open_ms(self.state)
        if elapsed > RESET_AFTER_MS:
            logger.info("Destination idle for %d ms; starting a fresh document", elapsed)
            return self._overwrite_and_open(text, now)

        try:
            self.destination.append(text, APPEND_SEPARATOR)
        except OSError as exc:
            logger.error("Failed to append to %s: %s", self.destination.file_path, exc)
            return WriteOutcome(persisted=False, opened=False, message=WRITE_FAILED)

        if elapsed > REOPEN_AFTER_MS:
            return self._open(now, scroll_to_end=True)
        return WriteOutcome(persisted=True, opened=False, message=APPEND_SUCCEEDED)

    def ensure_directory(self) -> bool:
        try:
            self.destination.ensure_directory()
        except OSError as exc:
            logger.error("Failed to create %s: %s", self.destination.directory, exc)
            return False
        return True

    def _overwrite_and_open(self, text: str, now: int) -> WriteOutcome:
        try:
            self.destination.write(text)
        except OSError as exc:
            logger.error("Failed to write %s: %s", self.destination.file_path, exc)
            return WriteOutcome(persisted=False, opened=False, message=WRITE_FAILED)
        return self._open(now, scroll_to_end=False)

    def _open(self, now: int, scroll_to_end: bool) -> WriteOutcome:
        try:
            error = self.open_editor(self.destination.directory, self.destination.file_path, scroll_to_end)
        except Exception as exc:
            error = str(exc) or type(exc).__name__
        if error is not None:
            logger.error("Failed to open editor: %s", error)
            return WriteOutcome(persisted=True, opened=False, message=OPEN_FAILED)
        save_last_open_ms(self.state, now)
        return WriteOutcome(persisted=True, opened=True)


__all__ = [
    "APPEND_SEPARATOR",
    "APPEND_SUCCEEDED",
    "AggregateWriter",
    "DIRECTORY_FAILED",
    "MODE_APPEND",
    "MODE_WRITE",
    "OPEN_FAILED",
    "REOPEN_AFTER_MS",
    "RESET_AFTER_MS",
    "WRITE_FAILED",
    "WriteOutcome",
    "now_ms",
]
