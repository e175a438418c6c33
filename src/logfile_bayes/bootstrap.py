"""Fixed seed vocabulary for a newly created model.

A fresh model knows nothing, so before its first ``train()`` it is fed a
handful of obvious associations: failure words rate ``critical``, severity
names rate as themselves, and low-severity words rate ``ignore``.
"""

from __future__ import annotations

import logging

from .bayes import NaiveBayesModel, create_model
from .models import Severity

logger = logging.getLogger(__name__)

FAILURE_WORDS: tuple[str, ...] = (
    "can't", "couldn't", "didn't", "isn't", "failed", "missing", "lost", "error",
)
SEVERITY_WORDS: tuple[str, ...] = ("warning", "minor", "major", "critical")
QUIET_WORDS: tuple[str, ...] = ("notice", "info")


def bootstrap_instances() -> list[tuple[dict[str, int], str]]:
    """Return the seed dataset as ``(attributes, label)`` pairs."""
    instances = [({word: 1}, Severity.CRITICAL.value) for word in FAILURE_WORDS]
    instances += [({word: 1}, word) for word in SEVERITY_WORDS]
    instances += [({word: 1}, Severity.IGNORE.value) for word in QUIET_WORDS]
    return instances


def seed_model(model: NaiveBayesModel) -> NaiveBayesModel:
    """Add the seed dataset to ``model`` and train it."""
    for attributes, label in bootstrap_instances():
        model.add_instance(attributes, label)
    model.train()
    logger.info(f"Seeded new {model.model_type} model with {len(bootstrap_instances())} instances")
    return model


def new_seeded_model(model_type: str = "frequency", *, purge: bool = False) -> NaiveBayesModel:
    """Create a model of ``model_type`` and seed it."""
    return seed_model(create_model(model_type, purge=purge))
