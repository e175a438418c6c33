"""Model persistence (JSON serialization).

The whole model, accumulator included, is written as one JSON document.
Python's JSON encoder writes floats with their shortest round-tripping
representation, so the log-probability tables reload bit-for-bit.
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Optional

from .bayes import NaiveBayesModel
from .bootstrap import new_seeded_model
from .errors import StoreUnavailableError

logger = logging.getLogger(__name__)

STORE_FORMAT = "logfile-bayes"
STORE_VERSION = 1


def load_model(path: str | Path) -> Optional[NaiveBayesModel]:
    """Load a model from ``path``.

    Returns:
        The restored model, or ``None`` if ``path`` does not exist.

    Raises:
        StoreUnavailableError: If ``path`` exists but cannot be read or
            does not hold a valid model document.
    """
    path = Path(path)
    if not path.exists():
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise StoreUnavailableError(f"Cannot read model {path}: {e}") from e

    if not isinstance(data, dict) or data.get("format") != STORE_FORMAT:
        raise StoreUnavailableError(f"{path} is not a {STORE_FORMAT} model file")
    if data.get("version") != STORE_VERSION:
        raise StoreUnavailableError(
            f"Unsupported model version {data.get('version')!r} in {path} "
            f"(expected {STORE_VERSION})"
        )

    try:
        model = NaiveBayesModel.from_dict(data["model"])
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise StoreUnavailableError(f"Corrupt model {path}: {e}") from e

    logger.debug(f"Loaded {model.model_type} model from {path} ({len(model.labels)} labels)")
    return model


def save_model(model: NaiveBayesModel, path: str | Path) -> None:
    """Write ``model`` to ``path``, replacing any previous file.

    The document is written to a temporary file next to ``path`` and then
    renamed over it, so an interrupted save leaves the old model intact.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    document = {
        "format": STORE_FORMAT,
        "version": STORE_VERSION,
        "model": model.to_dict(),
    }
    payload = json.dumps(document)
    temp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=str(path.parent), prefix=f".{path.name}.", delete=False,
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(payload)
        temp_path.replace(path)
    except OSError:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise
    logger.debug(f"Saved model to {path}")


def load_or_bootstrap(
    path: str | Path,
    model_type: str = "frequency",
    *,
    purge: bool = False,
) -> tuple[NaiveBayesModel, bool]:
    """Load the model at ``path`` or create a seeded one.

    A newly created model is saved immediately so the path exists for the
    next invocation.

    Returns:
        ``(model, created)`` where ``created`` is True for a new model.

    Raises:
        StoreUnavailableError: If ``path`` exists but is unreadable.
    """
    model = load_model(path)
    if model is not None:
        return model, False

    logger.info(f"No model at {path}; creating a new {model_type} model")
    model = new_seeded_model(model_type, purge=purge)
    save_model(model, path)
    return model, True
