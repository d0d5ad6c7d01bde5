"""Tests for the write/append state machine and its reopen throttle."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from chatany.config import LAST_EDITOR_OPEN_KEY, MemoryStore
from chatany.paths import Destination
from chatany.writer import (
    APPEND_SEPARATOR,
    APPEND_SUCCEEDED,
    DIRECTORY_FAILED,
    OPEN_FAILED,
    WRITE_FAILED,
    AggregateWriter,
    WriteOutcome,
)

NOW_MS = 1_700_000_000_000


class _Harness:
    def __init__(self, tmp: str, last_open_ms: int | None = None, open_error: str | None = None) -> None:
        self.destination = Destination(directory=Path(tmp) / "Chat Any")
        initial = {} if last_open_ms is None else {LAST_EDITOR_OPEN_KEY: str(last_open_ms)}
        self.state = MemoryStore(initial)
        self.open_editor = mock.Mock(return_value=open_error)
        self.writer = AggregateWriter(
            destination=self.destination,
            state=self.state,
            open_editor=self.open_editor,
            clock_ms=lambda: NOW_MS,
        )


class WriteTests(unittest.TestCase):
    def test_write_creates_directory_overwrites_and_opens_editor(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h = _Harness(tmp)
            self.assertFalse(h.destination.exists())

            outcome = h.writer.write("first")
            outcome_again = h.writer.write("second")

            self.assertEqual(h.destination.read(), "second")
            self.assertTrue(h.destination.exists())

        self.assertEqual(outcome, WriteOutcome(persisted=True, opened=True, message=None))
        self.assertEqual(outcome_again, outcome)
        h.open_editor.assert_called_with(h.destination.directory, h.destination.file_path, False)
        self.assertEqual(h.state.get(LAST_EDITOR_OPEN_KEY), str(NOW_MS))

    def test_write_is_idempotent_for_same_content(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h = _Harness(tmp)
            h.writer.write("same\ncontent\n")
            once = h.destination.file_path.read_bytes()
            h.writer.write("same\ncontent\n")
            twice = h.destination.file_path.read_bytes()
        self.assertEqual(once, twice)

    def test_editor_failure_still_reports_content_as_saved(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h = _Harness(tmp, open_error="open failed: no such application")

            outcome = h.writer.write("kept")

            self.assertEqual(h.destination.read(), "kept")
        self.assertEqual(outcome, WriteOutcome(persisted=True, opened=False, message=OPEN_FAILED))
        self.assertIsNone(h.state.get(LAST_EDITOR_OPEN_KEY))

    def test_editor_exception_is_treated_as_launch_failure(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h = _Harness(tmp)
            h.open_editor.side_effect = FileNotFoundError("open")

            outcome = h.writer.write("kept")

        self.assertEqual(outcome.message, OPEN_FAILED)
        self.assertTrue(outcome.persisted)

    def test_directory_failure_is_reported_without_writing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "Chat Any"
            blocker.write_text("a file where the directory should be", encoding="utf-8")
            h = _Harness(tmp)

            outcome = h.writer.write("text")

        self.assertEqual(outcome, WriteOutcome(persisted=False, opened=False, message=DIRECTORY_FAILED))
        h.open_editor.assert_not_called()

    def test_write_failure_is_reported_and_editor_not_opened(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h = _Harness(tmp)
            h.destination.file_path.parent.mkdir(parents=True)
            h.destination.file_path.mkdir()

            outcome = h.writer.write("text")

        self.assertEqual(outcome, WriteOutcome(persisted=False, opened=False, message=WRITE_FAILED))
        h.open_editor.assert_not_called()


class AppendThrottleTests(unittest.TestCase):
    def _append_after(self, tmp: str, seconds_since_open: int) -> tuple[_Harness, WriteOutcome]:
        h = _Harness(tmp, last_open_ms=NOW_MS - seconds_since_open * 1000)
        h.destination.ensure_directory()
        h.destination.write("X")
        return h, h.writer.append("Y")

    def test_append_within_a_minute_does_not_reopen_editor(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h, outcome = self._append_after(tmp, 59)
            content = h.destination.read()

        self.assertEqual(content, f"X{APPEND_SEPARATOR}Y")
        self.assertEqual(outcome, WriteOutcome(persisted=True, opened=False, message=APPEND_SUCCEEDED))
        h.open_editor.assert_not_called()
        self.assertEqual(h.state.get(LAST_EDITOR_OPEN_KEY), str(NOW_MS - 59_000))

    def test_append_after_a_minute_reopens_and_scrolls_to_end(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h, outcome = self._append_after(tmp, 61)
            content = h.destination.read()

        self.assertEqual(content, f"X{APPEND_SEPARATOR}Y")
        self.assertEqual(outcome, WriteOutcome(persisted=True, opened=True, message=None))
        h.open_editor.assert_called_once_with(h.destination.directory, h.destination.file_path, True)
        self.assertEqual(h.state.get(LAST_EDITOR_OPEN_KEY), str(NOW_MS))

    def test_append_five_minutes_later_keeps_earlier_content_first(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h, _outcome = self._append_after(tmp, 5 * 60)
            content = h.destination.read()

        self.assertTrue(content.startswith("X"))
        self.assertTrue(content.endswith("Y"))
        self.assertLess(content.index("X"), content.index(APPEND_SEPARATOR.strip()))

    def test_append_after_ten_minutes_behaves_like_write(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h, outcome = self._append_after(tmp, 601)
            content = h.destination.read()

        self.assertEqual(content, "Y")
        self.assertEqual(outcome, WriteOutcome(persisted=True, opened=True, message=None))
        h.open_editor.assert_called_once_with(h.destination.directory, h.destination.file_path, False)

    def test_exactly_ten_minutes_still_appends(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h, _outcome = self._append_after(tmp, 600)
            content = h.destination.read()
        self.assertEqual(content, f"X{APPEND_SEPARATOR}Y")

    def test_missing_timestamp_resets_to_fresh_write(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h = _Harness(tmp)
            h.destination.ensure_directory()
            h.destination.write("stale")

            h.writer.append("fresh")

            self.assertEqual(h.destination.read(), "fresh")

    def test_append_to_missing_document_skips_separator(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h = _Harness(tmp, last_open_ms=NOW_MS - 10_000)

            outcome = h.writer.append("only")

            self.assertEqual(h.destination.read(), "only")
        self.assertEqual(outcome.message, APPEND_SUCCEEDED)

    def test_rapid_appends_all_persist(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            h = _Harness(tmp, last_open_ms=NOW_MS - 5_000)
            for chunk in ("one", "two", "three"):
                h.writer.append(chunk)
            content = h.destination.read()

        self.assertEqual(content, APPEND_SEPARATOR.join(["one", "two", "three"]))
        h.open_editor.assert_not_called()


if __name__ == "__main__":
    unittest.main()
