"""Resolve aggregated text from the first content source that yields any.

Sources are tried in order: selected items, highlighted text, clipboard.
Every source failure is logged and converted to an empty result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from pathlib import Path

from .filters import BINARY, IGNORED, classify
from .host import Host
from .walker import (
    DEFAULT_READ_WORKERS,
    binary_placeholder,
    ignored_placeholder,
    read_failed_placeholder,
    read_file_block,
    walk_directory,
)

logger = logging.getLogger(__name__)

SELECTED_TEXT_TIMEOUT_SECONDS = 1.0

SOURCE_SELECTION = "selection"
SOURCE_SELECTED_TEXT = "selected-text"
SOURCE_CLIPBOARD = "clipboard"


@dataclass(frozen=True)
class Resolution:
    """Resolved text plus the name of the source that produced it.

    ``source`` is ``None`` when every source came back empty.
    """

    text: str
    source: str | None

    @property
    def is_empty(self) -> bool:
        return self.source is None


@dataclass(frozen=True)
class _ItemRender:
    structure: tuple[str, ...]
    block: str
    file_count: int


def _render_selected_item(path: Path, executor: ThreadPoolExecutor) -> _ItemRender | None:
    """Render one top-level selected item, or ``None`` when it is neither file nor directory."""
    label = str(path)
    name = path.name or label
    if classify(name) == IGNORED:
        return _ItemRender(structure=(), block=ignored_placeholder(label), file_count=0)

    try:
        is_dir = path.is_dir()
        is_file = not is_dir and path.is_file()
    except OSError as exc:
        logger.warning("Failed to stat selected item %s: %s", path, exc)
        return _ItemRender(structure=(name,), block=read_failed_placeholder(label), file_count=0)

    # Binary extensions only apply to files here; selected bundles are walked.
    if is_dir:
        result = walk_directory(path, label=label, executor=executor)
        return _ItemRender(
            structure=(f"{name}/", *result.tree),
            block=result.text + "\n",
            file_count=result.file_count,
        )

    if is_file:
        if classify(name) == BINARY:
            return _ItemRender(structure=(name,), block=binary_placeholder(label), file_count=0)
        return _ItemRender(structure=(name,), block=read_file_block(path, label), file_count=1)

    logger.debug("Skipping selected item that is neither file nor directory: %s", path)
    return None


def render_selection(items: list[Path], max_workers: int = DEFAULT_READ_WORKERS) -> str:
    """Render selected items into one document, preserving selection order.

    Returns an empty string when no item produced a block.
    """
    if not items:
        return ""

    renders: list[_ItemRender] = []
    with ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="chatany-read") as executor:
        for item in items:
            rendered = _render_selected_item(Path(item), executor)
            if rendered is not None:
                renders.append(rendered)

    if not renders:
        return ""

    file_count = sum(render.file_count for render in renders)
    out = [f"Files: {file_count}\n", "\n", "Structure:\n"]
    for render in renders:
        out.extend(f"{line}\n" for line in render.structure)
    out.append("\n")
    out.append("Content:\n")
    out.extend(render.block for render in renders)
    return "".join(out)


def content_from_selected_items(host: Host) -> str:
    try:
        items = host.get_selected_items()
    except Exception as exc:
        logger.warning("Failed to get selected items: %s", exc)
        return ""
    try:
        return render_selection(list(items or []))
    except Exception:
        logger.exception("Failed to render selected items")
        return ""


def content_from_selected_text(host: Host, timeout: float = SELECTED_TEXT_TIMEOUT_SECONDS) -> str:
    """Query highlighted text, giving up after ``timeout`` seconds.

    A timed-out query keeps running in the background; its result is dropped.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="chatany-selected-text")
    try:
        future = executor.submit(host.get_selected_text)
        try:
            return future.result(timeout=timeout) or ""
        except FutureTimeoutError:
            logger.warning("Timed out after %.1fs waiting for selected text", timeout)
            return ""
        except Exception as exc:
            logger.warning("Failed to get selected text: %s", exc)
            return ""
    finally:
        executor.shutdown(wait=False)


def content_from_clipboard(host: Host) -> str:
    try:
        return host.get_clipboard_text() or ""
    except Exception as exc:
        logger.warning("Failed to read clipboard: %s", exc)
        return ""


def content_sources(host: Host) -> list[tuple[str, Callable[[], str]]]:
    """Return the ordered ``(name, provider)`` fallback chain for ``host``."""
    return [
        (SOURCE_SELECTION, lambda: content_from_selected_items(host)),
        (SOURCE_SELECTED_TEXT, lambda: content_from_selected_text(host)),
        (SOURCE_CLIPBOARD, lambda: content_from_clipboard(host)),
    ]


def resolve_content(host: Host) -> Resolution:
    """Return text from the first non-empty source; later sources are not queried."""
    for name, provider in content_sources(host):
        text = provider()
        if text:
            logger.debug("Resolved %d characters from %s", len(text), name)
            return Resolution(text=text, source=name)
        logger.debug("Content source %s yielded nothing", name)
    return Resolution(text="", source=None)


__all__ = [
    "Resolution",
    "SELECTED_TEXT_TIMEOUT_SECONDS",
    "SOURCE_CLIPBOARD",
    "SOURCE_SELECTED_TEXT",
    "SOURCE_SELECTION",
    "content_from_clipboard",
    "content_from_selected_items",
    "content_from_selected_text",
    "content_sources",
    "render_selection",
    "resolve_content",
]
