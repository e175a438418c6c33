"""Line tokenizer for the severity classifier.

Turns a raw log line into normalized word tokens that serve as classifier
attributes. Leading ``{word}`` annotations (as written by a previous tail
run) are stripped so re-feeding classifier output does not learn its own
annotations.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_SPLIT_RE = re.compile(r"[\s,;]+")
_TAG_RE = re.compile(r"\{.*\}")
_DRIVE_PREFIX_RE = re.compile(r"[A-Z]:")


def tokenize(line: str) -> list[str]:
    """Split a log line into normalized tokens.

    Splits on runs of whitespace, commas and semicolons, drops any leading
    bracketed tags, then strips trailing periods/colons and lowercases each
    token. Tokens that start with a single uppercase letter followed by a
    colon (``C:\\temp``) are kept verbatim.

    Empty tokens are discarded, so ``tokenize("")`` returns ``[]``.

    Example::

        >>> tokenize("Error: disk Failed.")
        ['error', 'disk', 'failed']
    """
    words = [w for w in _SPLIT_RE.split(line) if w]
    while words and _TAG_RE.match(words[0]):
        words.pop(0)

    tokens: list[str] = []
    for word in words:
        if not _DRIVE_PREFIX_RE.match(word):
            word = word.rstrip(".:").lower()
        if word:
            tokens.append(word)
    return tokens


def to_attributes(tokens: Iterable[str]) -> dict[str, int]:
    """Build a classifier attribute set from tokens.

    Repeated tokens are deduplicated: every distinct token gets weight 1.
    Insertion order follows first appearance.
    """
    return {token: 1 for token in tokens}
