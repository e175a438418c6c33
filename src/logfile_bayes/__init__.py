"""logfile-bayes -- Naive Bayes severity rating for log files."""

__version__ = "0.1.0"

from .bayes import (
    FrequencyModel,
    NaiveBayesModel,
    TrainedModel,
    TrainingAccumulator,
    create_model,
    rescale,
)
from .bootstrap import bootstrap_instances, new_seeded_model, seed_model
from .cursor import CursorState, LogBatch, LogCursor, read_bookmark, write_bookmark
from .driver import best_label, learn, rate_line, tail
from .errors import (
    ConfigError,
    LogfileBayesError,
    LogUnavailableError,
    MalformedBookmarkError,
    ModelNotTrainedError,
    NoTrainingDataError,
    StoreUnavailableError,
)
from .models import LineRating, Severity, TailReport, WordContribution
from .store import load_model, load_or_bootstrap, save_model
from .tokenizer import to_attributes, tokenize

__all__ = [
    # Model
    "NaiveBayesModel",
    "FrequencyModel",
    "TrainingAccumulator",
    "TrainedModel",
    "create_model",
    "rescale",
    # Bootstrap
    "bootstrap_instances",
    "seed_model",
    "new_seeded_model",
    # Persistence
    "load_model",
    "save_model",
    "load_or_bootstrap",
    # Log cursor
    "LogCursor",
    "LogBatch",
    "CursorState",
    "read_bookmark",
    "write_bookmark",
    # Driver
    "tokenize",
    "to_attributes",
    "rate_line",
    "learn",
    "tail",
    "best_label",
    # Records
    "Severity",
    "LineRating",
    "WordContribution",
    "TailReport",
    # Errors
    "LogfileBayesError",
    "ConfigError",
    "StoreUnavailableError",
    "NoTrainingDataError",
    "ModelNotTrainedError",
    "LogUnavailableError",
    "MalformedBookmarkError",
]
