"""Run configuration and mode resolution.

The command line fills a ``RunConfig``; ``validate()`` rejects missing or
conflicting options before any file is touched.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .bayes import MODEL_TYPES
from .errors import ConfigError
from .models import Severity

ENV_PREFIX = "LOGFILE_BAYES"


class Mode(str, Enum):
    """What a single invocation does."""

    TAIL = "tail"
    LEARN = "learn"
    RATE = "rate"


@dataclass
class RunConfig:
    """Options for one invocation.

    Attributes:
        database: Path to the model file (required).
        learn: Severity to learn the text as, if in learn mode.
        rate: Rate the text (default mode when not learning or tailing).
        bookmark: Bookmark path for tail mode.
        logfile: Log file path for tail mode.
        explain: Write per-label and per-word scores to the diagnostic stream.
        autolearn: Learn each tailed line under its chosen label.
        model_type: Model variant used when creating a new model.
        purge: Purge policy used when creating a new model.
        text: Free text for learn and rate modes.
    """

    database: Optional[Path] = None
    learn: Optional[str] = None
    rate: bool = True
    bookmark: Optional[Path] = None
    logfile: Optional[Path] = None
    explain: bool = False
    autolearn: bool = False
    model_type: str = "frequency"
    purge: bool = False
    text: str = ""

    @property
    def mode(self) -> Optional[Mode]:
        """Resolved mode, or ``None`` when there is nothing to do."""
        if self.bookmark is not None and self.logfile is not None:
            return Mode.TAIL
        if self.learn is not None:
            return Mode.LEARN
        if self.rate:
            return Mode.RATE
        return None

    @property
    def severity(self) -> Optional[Severity]:
        return Severity.parse(self.learn) if self.learn is not None else None

    def validate(self) -> "RunConfig":
        """Check the configuration.

        Returns:
            Self (for chaining).

        Raises:
            ConfigError: On a missing database, half-specified tail mode,
                unknown severity or model type, or autolearn outside tail mode.
        """
        if self.database is None:
            raise ConfigError(f"Must specify --database (or {ENV_PREFIX}_DATABASE)")
        if self.logfile is not None and self.bookmark is None:
            raise ConfigError("Bookmark not specified: --logfile requires --bookmark")
        if self.bookmark is not None and self.logfile is None:
            raise ConfigError("Logfile not specified: --bookmark requires --logfile")
        if self.learn is not None:
            try:
                Severity.parse(self.learn)
            except ValueError as e:
                raise ConfigError(str(e)) from e
        if self.autolearn and self.mode is not Mode.TAIL:
            raise ConfigError("--autolearn is only valid with --bookmark and --logfile")
        if self.model_type.lower() not in MODEL_TYPES:
            raise ConfigError(
                f"Unknown model type '{self.model_type}'. "
                f"Available: {', '.join(sorted(MODEL_TYPES))}"
            )
        return self
