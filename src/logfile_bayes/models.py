"""Data records for line ratings and tail runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Severity(str, Enum):
    """Severity labels accepted by manual learning."""

    IGNORE = "ignore"
    WARNING = "warning"
    NORMAL = "normal"
    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, value: str) -> "Severity":
        """Case-insensitive lookup.

        Raises:
            ValueError: If ``value`` names no severity.
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown severity '{value}'. Expected one of: {valid}") from None


@dataclass
class WordContribution:
    """Scores of a single token predicted on its own."""

    word: str
    scores: dict[str, float] = field(default_factory=dict)

    def towards(self, label: str) -> float:
        return self.scores.get(label, 0.0)


@dataclass
class LineRating:
    """Classification of one line of text."""

    text: str
    label: str
    scores: dict[str, float] = field(default_factory=dict)
    contributions: list[WordContribution] = field(default_factory=list)
    significant_words: list[str] = field(default_factory=list)

    @property
    def score(self) -> float:
        """Score of the selected label."""
        return self.scores.get(self.label, 0.0)

    @property
    def annotation(self) -> str:
        """``{word}`` prefix built from the most significant words."""
        return " ".join(f"{{{word}}}" for word in self.significant_words)

    def format_line(self) -> str:
        """Tail output record: ``LABEL<TAB><TAB>text<TAB>{w1} {w2}``."""
        return f"{self.label.upper()}\t\t{self.text}\t{self.annotation}"


@dataclass
class TailReport:
    """Outcome of one tail pass over a log file."""

    start_offset: int
    end_offset: int
    ratings: list[LineRating] = field(default_factory=list)
    first_run: bool = False
    truncated: bool = False
    learned: int = 0

    @property
    def line_count(self) -> int:
        return len(self.ratings)
