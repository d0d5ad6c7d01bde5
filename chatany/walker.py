"""Recursive directory rendering for aggregated context documents.

A walk runs in two phases. Scanning enumerates every directory depth-first
and submits file reads to a thread pool. Rendering then joins those reads in
entry order, so output never depends on which read finished first.

Each directory renders as a ``Directory:`` header, a ``Structure:`` listing of
its direct non-ignored entries, and one block per entry. Subdirectories splice
their own rendering in place.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from .filters import BINARY, IGNORED, classify

logger = logging.getLogger(__name__)

DEFAULT_READ_WORKERS = 8
INDENT = "  "


@dataclass(frozen=True)
class WalkResult:
    """Rendered subtree text plus counted files and the full structure tree.

    ``tree`` holds one line per non-ignored entry anywhere below the root,
    indented one level per depth, starting at depth one.
    """

    text: str
    file_count: int
    tree: tuple[str, ...] = ()


@dataclass
class _DirectoryScan:
    label: str
    depth: int
    error: OSError | None = None
    level_lines: list[str] = field(default_factory=list)
    tree: list[str] = field(default_factory=list)
    parts: list[str | tuple[str, Future[str]] | _DirectoryScan] = field(default_factory=list)
    file_count: int = 0


def ignored_placeholder(label: str) -> str:
    return f"File: {label} (content ignored)\n\n"


def binary_placeholder(label: str) -> str:
    return f"File: {label} (binary/media, ignored)\n\n"


def read_failed_placeholder(label: str) -> str:
    return f"File: {label} (read failed)\n\n"


def directory_failed_placeholder(label: str) -> str:
    return f"Directory: {label} (directory read failed)\n\n"


def read_text(path: Path) -> str:
    """Read ``path`` as UTF-8 text, tolerating a leading BOM.

    Undecodable bytes raise ``UnicodeDecodeError`` so callers can treat the
    file as unreadable rather than guessing another encoding.
    """
    return path.read_text(encoding="utf-8-sig")


def read_file_block(path: Path, label: str) -> str:
    """Return a full content block for ``path`` or a read-failure placeholder."""
    try:
        content = read_text(path)
    except (OSError, UnicodeError) as exc:
        logger.warning("Failed to read %s: %s", path, exc)
        return read_failed_placeholder(label)
    return f"File: {label}\n{content}\n\n"


def _sorted_entries(directory: Path) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as entries:
        children = list(entries)
    children.sort(key=lambda entry: (entry.name.lower(), entry.name))
    return children


def _entry_kind(entry: os.DirEntry[str]) -> tuple[bool, bool]:
    """Return ``(is_dir, is_file)`` without following directory symlinks."""
    try:
        is_dir = entry.is_dir(follow_symlinks=False)
    except OSError:
        is_dir = False
    if is_dir:
        return True, False
    try:
        is_file = entry.is_file()
    except OSError:
        is_file = False
    return False, is_file


def _scan(directory: Path, label: str, rel: str, depth: int, executor: Executor) -> _DirectoryScan:
    """Enumerate one directory and recurse, submitting file reads to ``executor``."""
    scan = _DirectoryScan(label=label, depth=depth)
    try:
        entries = _sorted_entries(directory)
    except OSError as exc:
        logger.warning("Failed to read directory %s: %s", directory, exc)
        scan.error = exc
        return scan

    indent = INDENT * depth
    for entry in entries:
        name = entry.name
        child_rel = os.path.join(rel, name) if rel else name
        decision = classify(name)
        is_dir, is_file = _entry_kind(entry)

        if decision == IGNORED:
            scan.parts.append(ignored_placeholder(child_rel))
            continue

        line = f"{indent}{name}/" if is_dir else f"{indent}{name}"
        scan.level_lines.append(line)
        scan.tree.append(line)

        if decision == BINARY:
            scan.parts.append(binary_placeholder(child_rel))
            continue

        if is_dir:
            child = _scan(Path(entry.path), child_rel, child_rel, depth + 1, executor)
            scan.tree.extend(child.tree)
            scan.parts.append(child)
            continue

        if not is_file:
            scan.parts.append(read_failed_placeholder(child_rel))
            continue

        scan.file_count += 1
        scan.parts.append((child_rel, executor.submit(read_file_block, Path(entry.path), child_rel)))
    return scan


def _render(scan: _DirectoryScan) -> tuple[str, int]:
    """Join pending reads in entry order and return ``(text, file_count)``."""
    if scan.error is not None:
        return directory_failed_placeholder(scan.label), 0

    out = [f"Directory: {scan.label}/\n", "Structure:\n"]
    out.extend(f"{line}\n" for line in scan.level_lines)
    out.append("\n")
    file_count = scan.file_count
    for part in scan.parts:
        if isinstance(part, str):
            out.append(part)
        elif isinstance(part, _DirectoryScan):
            text, child_count = _render(part)
            out.append(text)
            file_count += child_count
        else:
            label, future = part
            try:
                out.append(future.result())
            except Exception:
                logger.exception("Unexpected read failure for %s", label)
                out.append(read_failed_placeholder(label))
    return "".join(out), file_count


def walk_directory(
    root: Path,
    label: str | None = None,
    executor: Executor | None = None,
    max_workers: int = DEFAULT_READ_WORKERS,
) -> WalkResult:
    """Render ``root`` recursively.

    ``label`` names the root in headers and placeholders and defaults to the
    path itself. Entry paths below the root are relative to it. When no
    ``executor`` is supplied, a private thread pool is used for the walk.
    """
    root_label = label if label is not None else str(root)
    if executor is None:
        with ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="chatany-read") as pool:
            scan = _scan(root, root_label, "", 1, pool)
            text, file_count = _render(scan)
    else:
        scan = _scan(root, root_label, "", 1, executor)
        text, file_count = _render(scan)
    return WalkResult(text=text, file_count=file_count, tree=tuple(scan.tree))


__all__ = [
    "DEFAULT_READ_WORKERS",
    "WalkResult",
    "binary_placeholder",
    "directory_failed_placeholder",
    "ignored_placeholder",
    "read_failed_placeholder",
    "read_file_block",
    "read_text",
    "walk_directory",
]
