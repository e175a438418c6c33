"""Incremental Naive Bayes text classifier.

Instances (attribute -> weight mappings tagged with one or more labels) are
accumulated with ``add_instance()``. ``train()`` rebuilds the log-probability
tables from the accumulated counts, and ``predict()`` scores a new attribute
set in log space before rescaling the result.

Training:

    prior(label)            = ln(count(label) / instances)
    smoother(label)         = -ln(tokens(label) + |V|)
    log P(attr | label)     = ln(count(attr, label) + 1) - ln(tokens(label) + |V|)

where ``tokens(label)`` is the summed attribute weight seen under ``label``
and ``|V|`` is the number of distinct attributes observed. Attributes never
observed at all are ignored at prediction time.

Model variants register themselves in ``MODEL_TYPES`` and are built with
``create_model()``; ``FrequencyModel`` is the only variant shipped.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Optional

from .errors import ModelNotTrainedError, NoTrainingDataError

logger = logging.getLogger(__name__)


def rescale(scores: Mapping[str, float]) -> dict[str, float]:
    """Convert log-space scores to an L2-normalized vector of likelihoods.

    Subtracts the maximum score, exponentiates, then divides by the L2 norm
    of the exponentiated values. Every value lies in ``(0, 1]`` and the best
    label approaches 1.0 as it dominates the others. The values are *not*
    probabilities and do not sum to 1.
    """
    if not scores:
        return {}
    top = max(scores.values())
    scaled = {label: math.exp(score - top) for label, score in scores.items()}
    total = math.sqrt(sum(v ** 2 for v in scaled.values()))
    return {label: v / total for label, v in scaled.items()}


def _normalize_labels(labels: str | Iterable[str]) -> list[str]:
    if isinstance(labels, str):
        labels = [labels]
    # dict.fromkeys keeps first-seen order while dropping duplicates
    return list(dict.fromkeys(labels))


# ---------------------------------------------------------------------------
# Model state
# ---------------------------------------------------------------------------

@dataclass
class TrainingAccumulator:
    """Aggregated instance counts awaiting ``train()``.

    Attributes:
        instance_count: Number of instances added.
        attribute_totals: Attribute -> summed weight across all instances.
        label_counts: Label -> number of instances carrying that label.
        label_attribute_totals: Label -> (attribute -> summed weight) for
            instances carrying that label.
    """

    instance_count: int = 0
    attribute_totals: dict[str, int] = field(default_factory=dict)
    label_counts: dict[str, int] = field(default_factory=dict)
    label_attribute_totals: dict[str, dict[str, int]] = field(default_factory=dict)

    def add(self, attributes: Mapping[str, int], labels: list[str]) -> None:
        self.instance_count += 1
        for attribute, weight in attributes.items():
            self.attribute_totals[attribute] = self.attribute_totals.get(attribute, 0) + weight
        for label in labels:
            self.label_counts[label] = self.label_counts.get(label, 0) + 1
            totals = self.label_attribute_totals.setdefault(label, {})
            for attribute, weight in attributes.items():
                totals[attribute] = totals.get(attribute, 0) + weight

    def to_dict(self) -> dict:
        return {
            "instance_count": self.instance_count,
            "attribute_totals": self.attribute_totals,
            "label_counts": self.label_counts,
            "label_attribute_totals": self.label_attribute_totals,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrainingAccumulator":
        return cls(
            instance_count=int(data["instance_count"]),
            attribute_totals=dict(data["attribute_totals"]),
            label_counts=dict(data["label_counts"]),
            label_attribute_totals={
                label: dict(totals)
                for label, totals in data["label_attribute_totals"].items()
            },
        )


@dataclass
class TrainedModel:
    """Log-probability tables produced by ``train()``.

    Attributes:
        prior_log_prob: Label -> ln P(label).
        smoother_log_prob: Label -> log-probability used for an attribute
            known to the model but never seen under that label.
        attribute_log_prob: Label -> (attribute -> ln P(attribute | label)).
        known_attributes: Every attribute observed at training time.
        vocabulary_size: ``len(known_attributes)``, frozen at training time.
    """

    prior_log_prob: dict[str, float] = field(default_factory=dict)
    smoother_log_prob: dict[str, float] = field(default_factory=dict)
    attribute_log_prob: dict[str, dict[str, float]] = field(default_factory=dict)
    known_attributes: frozenset[str] = field(default_factory=frozenset)
    vocabulary_size: int = 0

    @property
    def labels(self) -> list[str]:
        """Trained labels in lexicographic order."""
        return sorted(self.prior_log_prob)

    def to_dict(self) -> dict:
        return {
            "prior_log_prob": self.prior_log_prob,
            "smoother_log_prob": self.smoother_log_prob,
            "attribute_log_prob": self.attribute_log_prob,
            "known_attributes": sorted(self.known_attributes),
            "vocabulary_size": self.vocabulary_size,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrainedModel":
        return cls(
            prior_log_prob={k: float(v) for k, v in data["prior_log_prob"].items()},
            smoother_log_prob={k: float(v) for k, v in data["smoother_log_prob"].items()},
            attribute_log_prob={
                label: {attr: float(v) for attr, v in probs.items()}
                for label, probs in data["attribute_log_prob"].items()
            },
            known_attributes=frozenset(data["known_attributes"]),
            vocabulary_size=int(data["vocabulary_size"]),
        )


# ---------------------------------------------------------------------------
# Model interface
# ---------------------------------------------------------------------------

class NaiveBayesModel(ABC):
    """Abstract incremental Naive Bayes model.

    Subclasses implement ``_build()`` (accumulator -> trained tables) and
    ``_score()`` (raw log-space scores for one attribute set). Everything
    else, including the purge policy and serialization, lives here.

    Args:
        purge: When True, ``train()`` discards the accumulated counts after
            building the trained tables. Later ``train()`` calls then only
            reflect instances added since the previous one.
    """

    model_type: str = ""

    def __init__(self, *, purge: bool = False) -> None:
        self.purge = purge
        self.accumulator = TrainingAccumulator()
        self.trained: Optional[TrainedModel] = None

    @property
    def is_trained(self) -> bool:
        """Whether ``train()`` has completed at least once."""
        return self.trained is not None

    @property
    def labels(self) -> list[str]:
        """Labels known to the trained model, in lexicographic order."""
        return self.trained.labels if self.trained else []

    @property
    def instance_count(self) -> int:
        """Instances currently held by the accumulator."""
        return self.accumulator.instance_count

    def add_instance(
        self,
        attributes: Mapping[str, int],
        labels: str | Iterable[str],
    ) -> None:
        """Accumulate one observation.

        Has no effect on predictions until ``train()`` is called.

        Args:
            attributes: Attribute -> non-negative weight. May be empty.
            labels: One label or an iterable of labels. Must not be empty.

        Raises:
            ValueError: If ``labels`` is empty or a weight is negative.
        """
        label_list = _normalize_labels(labels)
        if not label_list:
            raise ValueError("add_instance() requires at least one label")
        for attribute, weight in attributes.items():
            if weight < 0:
                raise ValueError(f"Negative weight {weight} for attribute {attribute!r}")
        self.accumulator.add(attributes, label_list)

    def train(self) -> None:
        """Rebuild the trained tables from the accumulated counts.

        Raises:
            NoTrainingDataError: If no instances have been accumulated.
        """
        if self.accumulator.instance_count == 0:
            raise NoTrainingDataError("Cannot train: no instances have been added")
        self.trained = self._build(self.accumulator)
        logger.debug(
            f"Trained {self.model_type} model on {self.accumulator.instance_count} instances, "
            f"{len(self.trained.prior_log_prob)} labels, vocabulary {self.trained.vocabulary_size}"
        )
        if self.purge:
            self.accumulator = TrainingAccumulator()

    def predict(self, attributes: Mapping[str, int]) -> dict[str, float]:
        """Score every trained label for an attribute set.

        Returns:
            Label -> rescaled score (see ``rescale()``).

        Raises:
            ModelNotTrainedError: If ``train()`` was never called.
        """
        if self.trained is None:
            raise ModelNotTrainedError("Model has not been trained. Call train() first.")
        return rescale(self._score(self.trained, attributes))

    @abstractmethod
    def _build(self, accumulator: TrainingAccumulator) -> TrainedModel:
        """Compute trained tables from an accumulator."""
        ...

    @abstractmethod
    def _score(self, trained: TrainedModel, attributes: Mapping[str, int]) -> dict[str, float]:
        """Compute unnormalized log-space scores per label."""
        ...

    def to_dict(self) -> dict:
        """Serialize the complete model state."""
        return {
            "model_type": self.model_type,
            "purge": self.purge,
            "accumulator": self.accumulator.to_dict(),
            "trained": self.trained.to_dict() if self.trained else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NaiveBayesModel":
        """Deserialize a model, dispatching on its ``model_type``."""
        model = create_model(data["model_type"], purge=bool(data["purge"]))
        model.accumulator = TrainingAccumulator.from_dict(data["accumulator"])
        if data["trained"] is not None:
            model.trained = TrainedModel.from_dict(data["trained"])
        return model


# ---------------------------------------------------------------------------
# Frequency model
# ---------------------------------------------------------------------------

class FrequencyModel(NaiveBayesModel):
    """Multinomial Naive Bayes over attribute frequencies with add-one smoothing."""

    model_type = "frequency"

    def _build(self, accumulator: TrainingAccumulator) -> TrainedModel:
        instances = accumulator.instance_count
        vocab_size = len(accumulator.attribute_totals)
        trained = TrainedModel(
            known_attributes=frozenset(accumulator.attribute_totals),
            vocabulary_size=vocab_size,
        )

        for label, count in accumulator.label_counts.items():
            trained.prior_log_prob[label] = math.log(count / instances)

            attribute_totals = accumulator.label_attribute_totals.get(label, {})
            label_tokens = sum(attribute_totals.values())
            # Empty vocabulary: the smoother is never consulted by _score
            denominator = math.log(max(label_tokens + vocab_size, 1))
            trained.smoother_log_prob[label] = -denominator
            trained.attribute_log_prob[label] = {
                attribute: math.log(attr_count + 1) - denominator
                for attribute, attr_count in attribute_totals.items()
            }

        return trained

    def _score(self, trained: TrainedModel, attributes: Mapping[str, int]) -> dict[str, float]:
        # Log space: contributions add instead of multiply
        scores = dict(trained.prior_log_prob)
        for attribute, weight in attributes.items():
            if attribute not in trained.known_attributes:
                continue
            for label in scores:
                log_prob = trained.attribute_log_prob.get(label, {}).get(
                    attribute, trained.smoother_log_prob[label]
                )
                scores[label] += log_prob * weight
        return scores


MODEL_TYPES: dict[str, type[NaiveBayesModel]] = {
    FrequencyModel.model_type: FrequencyModel,
}


def create_model(model_type: str = "frequency", *, purge: bool = False) -> NaiveBayesModel:
    """Build an empty model of the given type.

    Args:
        model_type: Key into ``MODEL_TYPES`` (case-insensitive).
        purge: Purge policy passed to the model (see ``NaiveBayesModel``).

    Raises:
        ValueError: If ``model_type`` is not registered.
    """
    model_cls = MODEL_TYPES.get(model_type.lower())
    if model_cls is None:
        raise ValueError(
            f"Unknown model type '{model_type}'. "
            f"Available: {', '.join(sorted(MODEL_TYPES))}"
        )
    return model_cls(purge=purge)
