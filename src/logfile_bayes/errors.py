"""Exception hierarchy for logfile-bayes.

Every error that aborts an invocation derives from ``LogfileBayesError`` so
the command-line layer can report it with a single handler. Where a built-in
exception already describes the condition, the error subclasses it as well.
"""

from __future__ import annotations


class LogfileBayesError(Exception):
    """Base class for all logfile-bayes errors."""


class ConfigError(LogfileBayesError, ValueError):
    """A required path or mode is missing, or options conflict."""


class StoreUnavailableError(LogfileBayesError):
    """The model path exists but cannot be read or decoded."""


class NoTrainingDataError(LogfileBayesError, RuntimeError):
    """``train()`` was called with no accumulated instances."""


class ModelNotTrainedError(LogfileBayesError, RuntimeError):
    """``predict()`` was called before any successful ``train()``."""


class LogUnavailableError(LogfileBayesError):
    """The target log file cannot be opened."""


class MalformedBookmarkError(LogfileBayesError, ValueError):
    """The bookmark file does not hold a single non-negative integer."""
