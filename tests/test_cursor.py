"""Tests for the log cursor and bookmark file."""

from __future__ import annotations

from pathlib import Path

import pytest

from logfile_bayes.cursor import CursorState, LogCursor, read_bookmark, write_bookmark
from logfile_bayes.errors import LogUnavailableError, MalformedBookmarkError


# ---------------------------------------------------------------------------
# Bookmark file
# ---------------------------------------------------------------------------

class TestBookmark:
    """Tests for read_bookmark() and write_bookmark()."""

    def test_write_then_read(self, bookmark_path: Path) -> None:
        write_bookmark(bookmark_path, 1234)
        assert bookmark_path.read_text(encoding="utf-8") == "1234\n"
        assert read_bookmark(bookmark_path) == 1234

    def test_missing_returns_none(self, bookmark_path: Path) -> None:
        assert read_bookmark(bookmark_path) is None

    def test_tolerates_surrounding_whitespace(self, bookmark_path: Path) -> None:
        bookmark_path.write_text("  42 \r\n", encoding="utf-8")
        assert read_bookmark(bookmark_path) == 42

    @pytest.mark.parametrize("content", ["", "abc", "-5", "12.5", "1 2", "0x10"])
    def test_malformed(self, bookmark_path: Path, content: str) -> None:
        bookmark_path.write_text(content, encoding="utf-8")
        with pytest.raises(MalformedBookmarkError):
            read_bookmark(bookmark_path)

    def test_negative_offset_rejected(self, bookmark_path: Path) -> None:
        with pytest.raises(ValueError):
            write_bookmark(bookmark_path, -1)
        assert not bookmark_path.exists()

    def test_overwrite_leaves_no_temp_files(self, tmp_path: Path) -> None:
        path = tmp_path / "bm"
        write_bookmark(path, 1)
        write_bookmark(path, 2)
        assert read_bookmark(path) == 2
        assert [p.name for p in tmp_path.iterdir()] == ["bm"]

    def test_failed_write_removes_temp_file(self, tmp_path: Path) -> None:
        path = tmp_path / "bm"
        path.mkdir()
        with pytest.raises(OSError):
            write_bookmark(path, 5)
        assert [p.name for p in tmp_path.iterdir()] == ["bm"]


# ---------------------------------------------------------------------------
# LogCursor
# ---------------------------------------------------------------------------

class TestFirstRun:
    """No usable bookmark: record the baseline and read nothing."""

    def test_no_bookmark(self, log_path: Path, bookmark_path: Path) -> None:
        size = log_path.stat().st_size
        batch = LogCursor(log_path, bookmark_path).read()
        assert batch.state is CursorState.FIRST_RUN
        assert batch.lines == []
        assert batch.end_offset == size
        assert read_bookmark(bookmark_path) == size

    def test_malformed_bookmark(self, log_path: Path, bookmark_path: Path) -> None:
        bookmark_path.write_text("garbage\n", encoding="utf-8")
        batch = LogCursor(log_path, bookmark_path).read()
        assert batch.state is CursorState.FIRST_RUN
        assert read_bookmark(bookmark_path) == log_path.stat().st_size

    def test_empty_log(self, tmp_path: Path, bookmark_path: Path) -> None:
        log = tmp_path / "empty.log"
        log.write_bytes(b"")
        batch = LogCursor(log, bookmark_path).read()
        assert batch.state is CursorState.FIRST_RUN
        assert read_bookmark(bookmark_path) == 0


class TestResume:
    """Reading from a saved offset."""

    def test_reads_appended_lines(self, log_path: Path, bookmark_path: Path, append_log) -> None:
        start = log_path.stat().st_size
        write_bookmark(bookmark_path, start)
        append_log(log_path, b"disk error on sda\nfan speed warning\n")

        cursor = LogCursor(log_path, bookmark_path)
        batch = cursor.read()
        assert batch.state is CursorState.RESUMING
        assert batch.lines == ["disk error on sda", "fan speed warning"]
        assert batch.start_offset == start
        assert batch.end_offset == log_path.stat().st_size
        assert not batch.truncated

    def test_read_does_not_advance_bookmark(self, log_path: Path, bookmark_path: Path) -> None:
        write_bookmark(bookmark_path, 0)
        LogCursor(log_path, bookmark_path).read()
        assert read_bookmark(bookmark_path) == 0

    def test_commit_advances_bookmark(self, log_path: Path, bookmark_path: Path) -> None:
        write_bookmark(bookmark_path, 0)
        cursor = LogCursor(log_path, bookmark_path)
        batch = cursor.read()
        cursor.commit(batch)
        assert read_bookmark(bookmark_path) == log_path.stat().st_size
        assert cursor.read().lines == []

    def test_nothing_new(self, log_path: Path, bookmark_path: Path) -> None:
        size = log_path.stat().st_size
        write_bookmark(bookmark_path, size)
        batch = LogCursor(log_path, bookmark_path).read()
        assert batch.lines == []
        assert batch.end_offset == size

    def test_partial_line_left_for_next_pass(
        self, log_path: Path, bookmark_path: Path, append_log,
    ) -> None:
        start = log_path.stat().st_size
        write_bookmark(bookmark_path, start)
        append_log(log_path, b"complete line\nhalf writ")

        cursor = LogCursor(log_path, bookmark_path)
        batch = cursor.read()
        assert batch.lines == ["complete line"]
        assert batch.end_offset == start + len(b"complete line\n")
        cursor.commit(batch)

        append_log(log_path, b"ten line\n")
        assert cursor.read().lines == ["half written line"]

    def test_crlf_and_blank_lines(self, tmp_path: Path, bookmark_path: Path) -> None:
        log = tmp_path / "win.log"
        log.write_bytes(b"first\r\n\r\nthird\n")
        write_bookmark(bookmark_path, 0)
        batch = LogCursor(log, bookmark_path).read()
        assert batch.lines == ["first", "", "third"]

    def test_invalid_utf8_replaced(self, tmp_path: Path, bookmark_path: Path) -> None:
        log = tmp_path / "bin.log"
        log.write_bytes(b"bad \xff byte\n")
        write_bookmark(bookmark_path, 0)
        batch = LogCursor(log, bookmark_path).read()
        assert batch.lines == ["bad � byte"]
        assert batch.end_offset == len(b"bad \xff byte\n")


class TestTruncation:
    """The log shrank below the saved offset."""

    def test_restarts_from_zero(self, log_path: Path, bookmark_path: Path) -> None:
        write_bookmark(bookmark_path, 10_000)
        log_path.write_bytes(b"rotated line one\nrotated line two\n")

        batch = LogCursor(log_path, bookmark_path).read()
        assert batch.truncated
        assert batch.start_offset == 0
        assert batch.lines == ["rotated line one", "rotated line two"]
        assert batch.end_offset == log_path.stat().st_size

    def test_truncated_to_empty(self, log_path: Path, bookmark_path: Path) -> None:
        write_bookmark(bookmark_path, 500)
        log_path.write_bytes(b"")
        batch = LogCursor(log_path, bookmark_path).read()
        assert batch.truncated
        assert batch.lines == []
        assert batch.end_offset == 0


class TestUnavailableLog:
    """A missing log is fatal and leaves the bookmark alone."""

    def test_missing_log(self, tmp_path: Path, bookmark_path: Path) -> None:
        write_bookmark(bookmark_path, 7)
        with pytest.raises(LogUnavailableError):
            LogCursor(tmp_path / "missing.log", bookmark_path).read()
        assert read_bookmark(bookmark_path) == 7

    def test_missing_log_on_first_run(self, tmp_path: Path, bookmark_path: Path) -> None:
        with pytest.raises(LogUnavailableError):
            LogCursor(tmp_path / "missing.log", bookmark_path).read()
        assert not bookmark_path.exists()
