"""Classification driver: rating, manual learning, and log tailing.

Every function takes the model explicitly and mutates it only where noted
(``learn()`` and ``tail()`` with autolearn). Persistence is the caller's
job except in ``tail()``, which owns the model-then-bookmark write order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from .bayes import NaiveBayesModel
from .cursor import CursorState, LogCursor
from .models import LineRating, Severity, TailReport, WordContribution
from .store import save_model
from .tokenizer import to_attributes, tokenize

logger = logging.getLogger(__name__)

# Words shown in the annotation prefix
TOP_WORDS = 3
# A word must score above this towards the chosen label to be shown
MIN_CONTRIBUTION = 0.1


def best_label(scores: dict[str, float]) -> str:
    """Return the highest-scoring label; ties go to the lexicographically first."""
    return max(sorted(scores), key=scores.__getitem__)


def rate_line(model: NaiveBayesModel, text: str) -> LineRating:
    """Classify one line of text.

    The whole line is scored to pick the label. Each distinct token is then
    scored on its own to measure its contribution; the top ``TOP_WORDS``
    tokens whose contribution to the chosen label exceeds
    ``MIN_CONTRIBUTION`` become the line's significant words.

    Raises:
        ModelNotTrainedError: If the model was never trained.
    """
    tokens = tokenize(text)
    attributes = to_attributes(tokens)
    scores = model.predict(attributes)
    label = best_label(scores)

    contributions = [
        WordContribution(word=word, scores=model.predict({word: 1}))
        for word in attributes
    ]
    # sorted() is stable, so equal contributions keep first-appearance order
    ranked = sorted(contributions, key=lambda c: c.towards(label), reverse=True)
    significant = [
        c.word for c in ranked[:TOP_WORDS] if c.towards(label) > MIN_CONTRIBUTION
    ]

    return LineRating(
        text=text,
        label=label,
        scores=scores,
        contributions=contributions,
        significant_words=significant,
    )


def learn(model: NaiveBayesModel, severity: str | Severity, text: str) -> dict[str, int]:
    """Teach the model that ``text`` has ``severity`` and retrain.

    Returns:
        The attribute set that was learned.

    Raises:
        ValueError: If ``severity`` is not a known severity.
    """
    label = severity if isinstance(severity, Severity) else Severity.parse(severity)
    attributes = to_attributes(tokenize(text.rstrip()))
    model.add_instance(attributes, label.value)
    model.train()
    logger.info(f"Learned {len(attributes)} words as {label.value}")
    return attributes


def tail(
    model: NaiveBayesModel,
    cursor: LogCursor,
    model_path: str | Path,
    *,
    autolearn: bool = False,
    on_rating: Optional[Callable[[LineRating], None]] = None,
) -> TailReport:
    """Classify lines appended to the cursor's log since the last pass.

    On a first run only the baseline bookmark is written. Otherwise every
    new complete line is rated and passed to ``on_rating`` as soon as it is
    rated. With ``autolearn`` each line's attributes are added under the
    chosen label and the model is retrained before the next line is rated.

    Once all lines are processed the model is saved (only if autolearn
    changed it) and then the bookmark is advanced. If anything fails before
    that point, neither file is written.

    Raises:
        LogUnavailableError: If the log cannot be opened.
    """
    batch = cursor.read()
    report = TailReport(
        start_offset=batch.start_offset,
        end_offset=batch.end_offset,
        first_run=batch.state is CursorState.FIRST_RUN,
        truncated=batch.truncated,
    )
    if report.first_run:
        return report

    for line in batch.lines:
        rating = rate_line(model, line)
        report.ratings.append(rating)
        if on_rating is not None:
            on_rating(rating)
        if autolearn:
            # Retrain per line so the next line is rated by the updated model
            model.add_instance(to_attributes(tokenize(line)), rating.label)
            model.train()
            report.learned += 1

    if report.learned:
        save_model(model, model_path)
        logger.info(f"Autolearned {report.learned} lines into {model_path}")
    cursor.commit(batch)
    logger.info(
        f"Classified {report.line_count} lines from {cursor.log_path}; "
        f"bookmark now {batch.end_offset}"
    )
    return report
