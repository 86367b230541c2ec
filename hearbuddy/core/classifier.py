"""Question detection for recognized speech fragments.

WHY: Speech engines return bare word sequences without punctuation. To end
a fragment with "?" instead of "." we need a cheap, deterministic guess at
whether it reads as a question.

HOW: A fixed cascade of regex rules over the first word, the last words,
and the position of question words. The first rule that matches decides.
This is a heuristic, not a grammar; false positives and negatives are
accepted, but rule order is part of the contract because reordering
changes the outcome for ambiguous text.

RULES:
- Returns False when detect_questions is off, text is blank, or it already ends with "?"
- 1. First word is a question word → question
- 2. First word is an auxiliary AND (tag ending OR question word anywhere) → question
- 3. First word is an auxiliary AND at most 5 words → question
- 4. Text ends with a tag phrase ("right", "okay", ...) → question
- 5. A question word starts within the first 30% of the text → question
- 6. Otherwise → statement
"""

from __future__ import annotations

import re
from functools import lru_cache

from hearbuddy.core.models import PunctuationConfig

QUESTION_WORDS = ("what", "where", "when", "who", "why", "how", "which", "whose", "whom")

AUXILIARY_STARTERS = (
    "is", "are", "was", "were", "do", "does", "did", "can", "could",
    "would", "should", "will", "shall", "may", "might", "have", "has", "had",
)

TAG_ENDINGS = ("right", "correct", "okay", "ok", "sure", "huh", "eh")

_QUESTION_WORD_RE = re.compile(r"\b(?:{})\b".format("|".join(QUESTION_WORDS)), re.IGNORECASE)
_AUXILIARY_RE = re.compile(r"\b(?:{})\b".format("|".join(AUXILIARY_STARTERS)), re.IGNORECASE)
_TAG_ENDING_RE = re.compile(r"\b(?:{})\s*$".format("|".join(TAG_ENDINGS)), re.IGNORECASE)

# Question words past this fraction of the text usually belong to a
# relative clause ("I know where it is").
_EARLY_POSITION_RATIO = 0.3

_SHORT_INVERTED_MAX_WORDS = 5


@lru_cache(maxsize=128)
def _split_words(text: str) -> tuple[str, ...]:
    # Interim and final results repeat the same strings many times a second.
    return tuple(text.split())


def is_question(text: str, config: PunctuationConfig) -> bool:
    """Classify a fragment as a question.

    Args:
        text: Recognized fragment; surrounding whitespace is ignored.
        config: Current punctuation settings; only detect_questions is read.

    Returns:
        True if the first matching rule says the text is a question.
    """
    if not config.detect_questions or not text:
        return False

    trimmed = text.strip()
    if not trimmed or trimmed.endswith("?"):
        return False

    words = _split_words(trimmed)
    first_word = words[0]

    if _QUESTION_WORD_RE.search(first_word):
        return True

    if _AUXILIARY_RE.search(first_word):
        if _TAG_ENDING_RE.search(trimmed) or _QUESTION_WORD_RE.search(trimmed):
            return True
        if len(words) <= _SHORT_INVERTED_MAX_WORDS:
            return True

    if _TAG_ENDING_RE.search(trimmed):
        return True

    match = _QUESTION_WORD_RE.search(trimmed)
    if match and match.start() < len(trimmed) * _EARLY_POSITION_RATIO:
        return True

    return False
