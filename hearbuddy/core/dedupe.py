"""Suppression of fragments the recognition engine delivers more than once.

WHY: Several platforms (mobile Chrome in particular) re-deliver a final
result that was already committed, or send an interim fragment that
later arrives unchanged as final. Without suppression the caption shows
the same sentence twice.

HOW: Three checks, cheapest first: the last committed raw fragment, the
tail of the committed transcript (raw and punctuated forms), and a
bounded memory of normalized keys. The memory is an insertion-ordered
dict used as an ordered set; once it exceeds its capacity the oldest
keys are evicted.

RULES:
- normalize_key lowercases, collapses whitespace and strips ".", "!" and "?"
- remember() must run before the append so a racing re-delivery sees the key
- remember() stores both the raw-lowercased and the normalized key
- The tail check is a character suffix match, so a fragment that ends
  a longer committed word also counts as a repeat
- Memory never holds more than ``capacity`` keys
"""

from __future__ import annotations

import re
from collections import OrderedDict

DEFAULT_DEDUPE_CAPACITY = 100

_SENTENCE_PUNCTUATION_RE = re.compile(r"[.!?]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_key(text: str) -> str:
    """Build the identity key used to compare fragments."""
    key = _SENTENCE_PUNCTUATION_RE.sub("", text.lower())
    return _WHITESPACE_RE.sub(" ", key).strip()


class DedupeMemory:
    """Bounded record of fragments already committed in this session.

    WHY: Re-deliveries are not always adjacent. A bounded memory catches
    repeats a few fragments later without growing for the whole length
    of a long captioning session.

    HOW: Keys live in an OrderedDict in insertion order. last_fragment
    keeps the most recent raw fragment for the common adjacent case.

    RULES:
    - capacity must be at least 1
    - clear() resets keys and last_fragment together
    """

    def __init__(self, capacity: int = DEFAULT_DEDUPE_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("Dedupe capacity must be at least 1, got {}".format(capacity))
        self.capacity = capacity
        self._keys: OrderedDict[str, None] = OrderedDict()
        self.last_fragment = ""

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def is_duplicate(
        self,
        fragment: str,
        committed: str,
        punctuated: str | None = None,
    ) -> bool:
        """Decide whether ``fragment`` has already been committed.

        Args:
            fragment: Raw candidate fragment.
            committed: Current committed transcript.
            punctuated: The normalized form about to be appended, if known.

        Returns:
            True when any of the duplicate checks matches.
        """
        trimmed = fragment.strip()
        if not trimmed:
            return False

        if self.last_fragment and trimmed == self.last_fragment:
            return True

        tail = committed.strip()
        if tail:
            candidates = [trimmed]
            if punctuated:
                candidates.append(punctuated.strip())
            for candidate in candidates:
                # Plain suffix match, not word-aligned: "old" after "It is cold"
                # counts as a repeat. tail is stripped, so the separator space
                # never matters.
                if candidate and tail.endswith(candidate):
                    return True

        return normalize_key(trimmed) in self._keys

    def remember(self, fragment: str) -> None:
        """Register a fragment that is about to be committed."""
        trimmed = fragment.strip()
        if not trimmed:
            return
        for key in (trimmed.lower(), normalize_key(trimmed)):
            if key in self._keys:
                self._keys.move_to_end(key)
            else:
                self._keys[key] = None
        while len(self._keys) > self.capacity:
            self._keys.popitem(last=False)
        self.last_fragment = trimmed

    def clear(self) -> None:
        self._keys.clear()
        self.last_fragment = ""
