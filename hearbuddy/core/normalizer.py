"""Capitalization, punctuation, and sentence-boundary rules for caption text.

WHY: Raw recognition output is lowercase and unpunctuated. Captions read
far better when each sentence starts with a capital letter and ends with
".", "?" or "!". These helpers are pure so the accumulator, the CLI, and
tests can all share them.

HOW: add_punctuation() composes capitalize_first() and is_question()
under the switches in PunctuationConfig. append_fragment() owns the
single-space separator rule for the committed transcript.

RULES:
- capitalize_first trims and uppercases only the first character
- A new sentence starts after empty text or text ending in ".", "!" or "?"
- Existing terminal punctuation is never replaced
- add_commas is never consulted
- append_fragment inserts at most one separator space and always ends with a space
"""

from __future__ import annotations

import re

from hearbuddy.core.classifier import is_question
from hearbuddy.core.models import PunctuationConfig

_TERMINAL_PUNCTUATION_RE = re.compile(r"[.!?]$")
_SENTENCE_END_RE = re.compile(r"[.!?]\s*$")
_WHITESPACE_RE = re.compile(r"\s+")


def capitalize_first(text: str) -> str:
    """Trim text and uppercase its first character; falsy input passes through."""
    if not text:
        return text
    trimmed = text.strip()
    if not trimmed:
        return trimmed
    return trimmed[0].upper() + trimmed[1:]


def is_new_sentence(preceding: str | None) -> bool:
    """Return True if text appended after ``preceding`` starts a sentence."""
    return not preceding or bool(_SENTENCE_END_RE.search(preceding.strip()))


def collapse_whitespace(text: str) -> str:
    """Trim and collapse internal whitespace runs to single spaces."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def add_punctuation(text: str, config: PunctuationConfig, is_new: bool = False) -> str:
    """Capitalize and punctuate one recognized fragment.

    WHY: Finalized fragments are appended to the caption as sentences, so
    they need a leading capital (when they start a sentence) and a
    terminal mark.

    HOW: Trim, then walk the config switches in order: capitalization,
    existing punctuation, question detection, periods.

    RULES:
    - auto_punctuation off → trimmed text, capitalized only when is_new
    - Text already ending in ".", "!" or "?" is returned as-is
    - Questions get "?"; otherwise "." when add_periods is on
    - No side effects

    Args:
        text: Raw fragment from the recognition engine.
        config: Current punctuation settings.
        is_new: Whether the fragment starts a new sentence.

    Returns:
        The normalized fragment.
    """
    if not text:
        return text

    trimmed = text.strip()
    if not trimmed:
        return trimmed

    if not config.auto_punctuation:
        return capitalize_first(trimmed) if is_new else trimmed

    if is_new:
        trimmed = capitalize_first(trimmed)

    if _TERMINAL_PUNCTUATION_RE.search(trimmed):
        return trimmed

    if is_question(trimmed, config):
        return trimmed + "?"

    if config.add_periods:
        return trimmed + "."

    return trimmed


def append_fragment(committed: str, fragment: str) -> str:
    """Append a normalized fragment to the committed transcript.

    RULES:
    - Empty fragment → committed unchanged
    - One separator space only when committed is non-empty and lacks a trailing space
    - The result always ends with a single space
    """
    if not fragment:
        return committed
    separator = " " if committed and not committed.endswith(" ") else ""
    return committed + separator + fragment + " "
