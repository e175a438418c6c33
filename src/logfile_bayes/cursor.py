"""Byte-offset bookmark over an append-only log file.

The bookmark file holds one newline-terminated integer: the offset just past
the last line already classified. The first time a log is seen (no bookmark,
or one that does not parse) the cursor records the current end of file and
yields nothing, so historical content is never replayed.

If the log is now smaller than the saved offset it has been truncated or
rotated, and reading restarts from offset 0. A final line without a
terminating newline is left in place for the next pass.

No locking is performed on either file.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from .errors import LogUnavailableError, MalformedBookmarkError

logger = logging.getLogger(__name__)


class CursorState(str, Enum):
    """Whether a pass starts from a saved offset."""

    FIRST_RUN = "first_run"
    RESUMING = "resuming"


@dataclass
class LogBatch:
    """Complete lines read from a log in one pass.

    Attributes:
        state: ``FIRST_RUN`` when no usable bookmark existed.
        start_offset: Byte offset reading started from.
        end_offset: Byte offset just past the last complete line read.
        lines: Decoded lines with their terminators removed.
        truncated: True if the log shrank below the saved offset.
    """

    state: CursorState
    start_offset: int
    end_offset: int
    lines: list[str] = field(default_factory=list)
    truncated: bool = False


def read_bookmark(path: str | Path) -> Optional[int]:
    """Read a saved offset.

    Returns:
        The offset, or ``None`` if the bookmark cannot be read.

    Raises:
        MalformedBookmarkError: If the content is not a non-negative integer.
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    value = content.strip()
    if not (value.isascii() and value.isdigit()):
        raise MalformedBookmarkError(f"Bookmark {path} does not hold an offset: {value[:40]!r}")
    return int(value)


def write_bookmark(path: str | Path, offset: int) -> None:
    """Atomically replace the bookmark with ``offset``."""
    if offset < 0:
        raise ValueError(f"Bookmark offset must be non-negative, got {offset}")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=str(path.parent), prefix=f".{path.name}.", delete=False,
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(f"{offset}\n")
        temp_path.replace(path)
    except OSError:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


class LogCursor:
    """Tracks how much of ``log_path`` has been consumed.

    Usage::

        cursor = LogCursor("/var/log/app.log", "/var/tmp/app.bookmark")
        batch = cursor.read()
        for line in batch.lines:
            ...
        cursor.commit(batch)

    ``read()`` never advances the bookmark on its own (except to record the
    baseline on a first run); callers ``commit()`` once the batch has been
    fully processed.
    """

    def __init__(self, log_path: str | Path, bookmark_path: str | Path) -> None:
        self.log_path = Path(log_path)
        self.bookmark_path = Path(bookmark_path)

    def read(self) -> LogBatch:
        """Read every complete line appended since the saved offset.

        Raises:
            LogUnavailableError: If the log cannot be opened. The bookmark
                is left untouched.
        """
        size = self._log_size()
        saved = self._saved_offset()

        if saved is None:
            write_bookmark(self.bookmark_path, size)
            logger.info(f"First run on {self.log_path}: bookmark set to end of file ({size})")
            return LogBatch(state=CursorState.FIRST_RUN, start_offset=size, end_offset=size)

        start = saved
        truncated = size < saved
        if truncated:
            logger.warning(
                f"{self.log_path} shrank from {saved} to {size} bytes; reading from the start"
            )
            start = 0

        lines, end = self._read_lines(start)
        logger.debug(f"Read {len(lines)} lines from {self.log_path} [{start}, {end})")
        return LogBatch(
            state=CursorState.RESUMING,
            start_offset=start,
            end_offset=end,
            lines=lines,
            truncated=truncated,
        )

    def commit(self, batch: LogBatch) -> None:
        """Persist ``batch.end_offset`` as the new bookmark."""
        write_bookmark(self.bookmark_path, batch.end_offset)

    def _log_size(self) -> int:
        try:
            with open(self.log_path, "rb") as f:
                f.seek(0, 2)
                return f.tell()
        except OSError as e:
            raise LogUnavailableError(f"Could not read {self.log_path}: {e}") from e

    def _saved_offset(self) -> Optional[int]:
        try:
            return read_bookmark(self.bookmark_path)
        except MalformedBookmarkError as e:
            logger.warning(f"{e}; treating as first run")
            return None

    def _read_lines(self, start: int) -> tuple[list[str], int]:
        lines: list[str] = []
        end = start
        try:
            with open(self.log_path, "rb") as f:
                f.seek(start)
                for raw in f:
                    if not raw.endswith(b"\n"):
                        break
                    end += len(raw)
                    lines.append(raw.rstrip(b"\r\n").decode("utf-8", errors="replace"))
        except OSError as e:
            raise LogUnavailableError(f"Could not read {self.log_path}: {e}") from e
        return lines, end
