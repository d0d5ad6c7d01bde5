"""Host primitives: selected items, highlighted text, clipboard, notifications.

``Host`` bundles the four callables the commands depend on. ``desktop_host``
binds them to platform tools (Finder via ``osascript`` on macOS, the X11 or
Wayland PRIMARY selection and clipboard helpers elsewhere).
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

APP_TITLE = "Chat Any"
HOST_COMMAND_TIMEOUT_SECONDS = 5.0

_FINDER_SELECTION_SCRIPT = """
tell application "Finder"
    set theSelection to selection as alias list
end tell
set output to ""
repeat with anItem in theSelection
    set output to output & POSIX path of anItem & linefeed
end repeat
return output
"""


@dataclass(frozen=True)
class Host:
    """Callables supplied by whatever launches a command."""

    get_selected_items: Callable[[], list[Path]]
    get_selected_text: Callable[[], str]
    get_clipboard_text: Callable[[], str]
    notify: Callable[[str], None]


def _run_capture(command: Sequence[str], timeout: float = HOST_COMMAND_TIMEOUT_SECONDS) -> str:
    """Run ``command`` and return stdout, raising ``RuntimeError`` on failure."""
    proc = subprocess.run(
        list(command),
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
        check=False,
    )
    if proc.returncode != 0:
        raise RuntimeError(f"{command[0]} exited with status {proc.returncode}: {proc.stderr.strip()}")
    return proc.stdout


def _first_available_output(command_candidates: list[list[str]]) -> str:
    """Return output of the first installed command that succeeds."""
    errors: list[str] = []
    for command in command_candidates:
        if shutil.which(command[0]) is None:
            continue
        try:
            return _run_capture(command)
        except (OSError, RuntimeError, subprocess.SubprocessError) as exc:
            errors.append(str(exc))
    if errors:
        raise RuntimeError("; ".join(errors))
    raise RuntimeError("no supported tool is installed")


def finder_selected_items() -> list[Path]:
    """Return Finder's current selection on macOS, otherwise an empty list."""
    if sys.platform != "darwin":
        return []
    output = _run_capture(["osascript", "-e", _FINDER_SELECTION_SCRIPT])
    return [Path(line) for line in output.splitlines() if line.strip()]


def primary_selection_text() -> str:
    """Return currently highlighted text where the platform exposes it."""
    if sys.platform == "darwin" or os.name == "nt":
        raise RuntimeError("highlighted text is not queryable on this platform")
    return _first_available_output(
        [
            ["wl-paste", "--primary", "--no-newline"],
            ["xclip", "-selection", "primary", "-o"],
            ["xsel", "--primary", "--output"],
        ]
    )


def clipboard_text() -> str:
    """Best-effort clipboard read across macOS, Windows, and common Linux tools."""
    if sys.platform == "darwin":
        command_candidates = [["pbpaste"]]
    elif os.name == "nt":
        command_candidates = [["powershell", "-NoProfile", "-Command", "Get-Clipboard"]]
    else:
        command_candidates = [
            ["wl-paste", "--no-newline"],
            ["xclip", "-selection", "clipboard", "-o"],
            ["xsel", "--clipboard", "--output"],
        ]
    return _first_available_output(command_candidates)


def applescript_string(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def desktop_notify(message: str) -> None:
    """Print ``message`` and post a desktop notification when possible.

    Notification failures are logged and never raised.
    """
    print(message)
    try:
        if sys.platform == "darwin":
            script = f"display notification {applescript_string(message)} with title {applescript_string(APP_TITLE)}"
            _run_capture(["osascript", "-e", script])
        elif shutil.which("notify-send") is not None:
            _run_capture(["notify-send", APP_TITLE, message])
    except Exception as exc:
        logger.warning("Failed to show notification: %s", exc)


def desktop_host(paths: Sequence[Path] | None = None) -> Host:
    """Build a desktop host.

    Explicit ``paths`` stand in for the file-browser selection when given.
    """
    if paths:
        explicit = [Path(path) for path in paths]

        def get_selected_items() -> list[Path]:
            return list(explicit)
    else:
        get_selected_items = finder_selected_items

    return Host(
        get_selected_items=get_selected_items,
        get_selected_text=primary_selection_text,
        get_clipboard_text=clipboard_text,
        notify=desktop_notify,
    )


__all__ = [
    "Host",
    "applescript_string",
    "clipboard_text",
    "desktop_host",
    "desktop_notify",
    "finder_selected_items",
    "primary_selection_text",
]
