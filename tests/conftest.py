"""Shared test fixtures for logfile-bayes tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from logfile_bayes.bayes import NaiveBayesModel
from logfile_bayes.bootstrap import new_seeded_model


@pytest.fixture
def seeded_model() -> NaiveBayesModel:
    """A model trained on the bootstrap vocabulary only."""
    return new_seeded_model()


@pytest.fixture
def model_path(tmp_path: Path) -> Path:
    return tmp_path / "model.json"


@pytest.fixture
def bookmark_path(tmp_path: Path) -> Path:
    return tmp_path / "app.bookmark"


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    """A log file with two historical lines."""
    path = tmp_path / "app.log"
    path.write_bytes(
        b"Jan 10 10:00:00 host1 backup job started\n"
        b"Jan 10 10:05:00 host1 backup job finished\n"
    )
    return path


@pytest.fixture
def append_log():
    """Return a helper that appends raw bytes to a file."""

    def append(path: Path, data: bytes) -> None:
        with open(path, "ab") as f:
            f.write(data)

    return append
