"""Name-based filtering for selection items and walked directory entries.

``classify`` looks only at a base name: ignore patterns first, then the
binary/media extension set. File contents are never inspected.
"""

from __future__ import annotations

import os
import re
from typing import Literal

FilterDecision = Literal["ignored", "binary", "content"]

IGNORED: FilterDecision = "ignored"
BINARY: FilterDecision = "binary"
CONTENT: FilterDecision = "content"

BINARY_MEDIA_EXTENSIONS = frozenset(
    {
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".bmp",
        ".tiff",
        ".mp3",
        ".wav",
        ".flac",
        ".mp4",
        ".avi",
        ".mkv",
        ".exe",
        ".dll",
        ".bin",
        ".iso",
        ".zip",
        ".rar",
        ".xcodeproj",
        ".xcworkspace",
        ".tiktoken",
    }
)

IGNORED_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(node_modules|dist|build|coverage|tmp|logs|public|assets|vendor)$"),
    # Hidden files and directories; also covers .git, .vscode, .idea, .env*, .cache, .DS_Store.
    re.compile(r"^\..+"),
    re.compile(r"^(package-lock\.json|yarn\.lock)$"),
    re.compile(r"^(bower_components|jspm_packages)$"),
    re.compile(r"^(__pycache__|\.venv|venv)$"),
)


def is_ignored_name(name: str) -> bool:
    """Return whether ``name`` matches any ignore pattern."""
    return any(pattern.search(name) for pattern in IGNORED_PATTERNS)


def is_binary_or_media_name(name: str) -> bool:
    """Return whether the extension of ``name`` is a known binary/media type."""
    _stem, ext = os.path.splitext(name)
    return ext.lower() in BINARY_MEDIA_EXTENSIONS


def classify(name: str) -> FilterDecision:
    """Classify an item by its base name.

    Paths are reduced to their last component first, so callers may pass
    either a bare name or a full path.
    """
    base = os.path.basename(name.rstrip("/\\")) or name
    if is_ignored_name(base):
        return IGNORED
    if is_binary_or_media_name(base):
        return BINARY
    return CONTENT


__all__ = [
    "BINARY",
    "BINARY_MEDIA_EXTENSIONS",
    "CONTENT",
    "FilterDecision",
    "IGNORED",
    "IGNORED_PATTERNS",
    "classify",
    "is_binary_or_media_name",
    "is_ignored_name",
]
