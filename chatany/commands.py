"""User-facing commands: ``write``, ``append``, and ``link``.

Commands never raise into their caller. Every outcome, including unexpected
failures, ends as at most one notification through the host.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from .config import ConfigStore, MemoryStore, load_editor_name
from .editor import launch_editor
from .host import Host
from .paths import Destination, default_destination
from .resolver import resolve_content
from .writer import DIRECTORY_FAILED, MODE_APPEND, MODE_WRITE, AggregateWriter

logger = logging.getLogger(__name__)

NOTHING_TO_AGGREGATE = "Nothing selected, no highlighted text, and the clipboard is empty"
NOTHING_SELECTED = "Nothing selected"
OPERATION_FAILED = "Operation failed"


def notify(host: Host, message: str) -> None:
    """Deliver ``message`` through the host; failures are logged and dropped."""
    try:
        host.notify(message)
    except Exception as exc:
        logger.warning("Failed to deliver notification %r: %s", message, exc)


def build_writer(
    editor: str | None = None,
    destination: Destination | None = None,
    state: ConfigStore | MemoryStore | None = None,
) -> AggregateWriter:
    """Wire the writer to the configured editor and persisted state."""
    state = state if state is not None else ConfigStore()
    editor_name = editor.strip() if editor and editor.strip() else load_editor_name(state)
    return AggregateWriter(
        destination=destination if destination is not None else default_destination(),
        state=state,
        open_editor=partial(launch_editor, editor_name),
    )


def run_aggregate(mode: str, host: Host, writer: AggregateWriter) -> str | None:
    """Resolve content and write or append it; return the message shown."""
    if mode not in (MODE_WRITE, MODE_APPEND):
        raise ValueError(f"unknown mode: {mode!r}")

    message: str | None
    try:
        if not writer.ensure_directory():
            message = DIRECTORY_FAILED
        else:
            resolution = resolve_content(host)
            if resolution.is_empty:
                message = NOTHING_TO_AGGREGATE
            else:
                logger.debug("Using %s content for %s", resolution.source, mode)
                outcome = writer.write(resolution.text) if mode == MODE_WRITE else writer.append(resolution.text)
                message = outcome.message
    except Exception:
        logger.exception("%s command failed", mode)
        message = OPERATION_FAILED

    if message is not None:
        notify(host, message)
    return message


@dataclass(frozen=True)
class LinkResult:
    created: int
    failed: int


def _link_one(item: Path, directory: Path) -> bool:
    source = item.absolute()
    link_path = directory / (source.name or str(source).strip(os.sep))
    if link_path.is_symlink():
        link_path.unlink()
    elif link_path.exists():
        logger.warning("Not replacing existing non-link entry %s", link_path)
        return False
    link_path.symlink_to(source, target_is_directory=source.is_dir())
    return True


def link_selected_items(items: list[Path], destination: Destination) -> LinkResult:
    """Symlink each selected item into the destination directory by name.

    Existing links of the same name are replaced; real files or directories
    in the way count as failures and are left untouched.
    """
    destination.ensure_directory()
    created = 0
    failed = 0
    for item in items:
        try:
            ok = _link_one(Path(item), destination.directory)
        except OSError as exc:
            logger.warning("Failed to link %s: %s", item, exc)
            ok = False
        if ok:
            created += 1
        else:
            failed += 1
    return LinkResult(created=created, failed=failed)


def run_link(host: Host, destination: Destination | None = None) -> str:
    """Link the current selection into the destination directory."""
    destination = destination if destination is not None else default_destination()
    try:
        items = list(host.get_selected_items() or [])
    except Exception as exc:
        logger.warning("Failed to get selected items: %s", exc)
        items = []

    if not items:
        message = NOTHING_SELECTED
    else:
        try:
            result = link_selected_items(items, destination)
        except OSError as exc:
            logger.error("Failed to create %s: %s", destination.directory, exc)
            message = DIRECTORY_FAILED
        else:
            noun = "link" if result.created == 1 else "links"
            message = f"Created {result.created} {noun}"
            if result.failed:
                message += f", {result.failed} failed"
    notify(host, message)
    return message


__all__ = [
    "LinkResult",
    "NOTHING_SELECTED",
    "NOTHING_TO_AGGREGATE",
    "OPERATION_FAILED",
    "build_writer",
    "link_selected_items",
    "notify",
    "run_aggregate",
    "run_link",
]
