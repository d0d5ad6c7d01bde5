"""Destination directory and document layout.

The aggregated document lives at a fixed path under the user's documents
directory. ``Destination`` wraps the few file operations the writer needs so
tests can point it at a temporary directory.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_documents_dir

DESTINATION_DIRNAME = "Chat Any"
DESTINATION_FILENAME = "context.txt"


@dataclass(frozen=True)
class Destination:
    directory: Path
    filename: str = DESTINATION_FILENAME

    @property
    def file_path(self) -> Path:
        return self.directory / self.filename

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def exists(self) -> bool:
        return self.file_path.is_file()

    def read(self) -> str:
        return self.file_path.read_text(encoding="utf-8")

    def write(self, text: str) -> None:
        """Replace the whole document with ``text``."""
        with self.file_path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)

    def append(self, text: str, separator: str) -> None:
        """Append ``text``, preceded by ``separator`` unless the document is empty."""
        try:
            has_content = self.file_path.stat().st_size > 0
        except FileNotFoundError:
            has_content = False
        with self.file_path.open("a", encoding="utf-8", newline="") as handle:
            handle.write(f"{separator}{text}" if has_content else text)


def default_destination() -> Destination:
    """Return the per-user destination under the documents directory."""
    return Destination(directory=Path(user_documents_dir()) / DESTINATION_DIRNAME)


__all__ = [
    "DESTINATION_DIRNAME",
    "DESTINATION_FILENAME",
    "Destination",
    "default_destination",
]
