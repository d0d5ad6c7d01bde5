"""Editor launch helper for the destination document.

On macOS the editor is an application name opened with ``open -a``; the
destination directory is opened first so the editor shows it as a workspace.
Elsewhere the editor is a shell-style command run against the document.
Returns an error message string instead of raising for UI-friendly handling.
"""

from __future__ import annotations

import shlex
import subprocess
import sys
from pathlib import Path

from .host import applescript_string

_SCROLL_TO_END_SCRIPT = """
tell application {app}
    activate
    tell application "System Events"
        key code 125 using {{command down}}
    end tell
end tell
"""


def _run_checked(command: list[str], capture: bool = True, check_status: bool = True) -> str | None:
    try:
        proc = subprocess.run(command, capture_output=capture, text=True, check=False)
    except Exception as exc:
        return f"Failed to launch {command[0]}: {exc}"
    if check_status and proc.returncode != 0:
        detail = (proc.stderr or "").strip() or f"exit status {proc.returncode}"
        return f"{command[0]} failed: {detail}"
    return None


def launch_editor(editor: str, directory: Path, file_path: Path, scroll_to_end: bool = False) -> str | None:
    """Open ``file_path`` in ``editor``, optionally scrolling to its end."""
    editor = editor.strip()
    if not editor:
        return "Cannot open editor: no editor configured."

    if sys.platform == "darwin":
        for target in (directory, file_path):
            error = _run_checked(["open", "-a", editor, str(target)])
            if error is not None:
                return error
        if scroll_to_end:
            script = _SCROLL_TO_END_SCRIPT.format(app=applescript_string(editor))
            return _run_checked(["osascript", "-e", script])
        return None

    try:
        cmd = shlex.split(editor)
    except ValueError as exc:
        return f"Cannot open editor: {exc}"
    if not cmd:
        return "Cannot open editor: editor command is empty."
    # Terminal editors need the real tty. Their exit status reflects the
    # editing session, not the launch, so only a spawn failure counts.
    return _run_checked([*cmd, str(file_path)], capture=False, check_status=False)


__all__ = ["launch_editor"]
