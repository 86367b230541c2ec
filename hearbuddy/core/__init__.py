"""Text post-processing core for live captions.

WHY: The only algorithmic part of the caption app is turning a noisy
stream of recognition results into a clean, punctuated transcript. It is
kept free of any engine, UI, or network dependency.

HOW: models.py defines the shared shapes, classifier.py and normalizer.py
are pure text functions, dedupe.py suppresses re-delivered fragments,
scheduler.py abstracts the finalize timer, and accumulator.py ties them
into the transcript state machine.

RULES:
- Nothing in core imports from hearbuddy.engine, hearbuddy.session, or the CLI
- Pure functions stay pure; state lives only in DedupeMemory and the accumulator
"""

from hearbuddy.core.accumulator import TranscriptAccumulator
from hearbuddy.core.classifier import is_question
from hearbuddy.core.dedupe import DedupeMemory, normalize_key
from hearbuddy.core.models import (
    PunctuationConfig,
    RecognitionEvent,
    ResultAlternative,
    SessionPhase,
    TranscriptState,
)
from hearbuddy.core.normalizer import (
    add_punctuation,
    append_fragment,
    capitalize_first,
    is_new_sentence,
)

__all__ = [
    "DedupeMemory",
    "PunctuationConfig",
    "RecognitionEvent",
    "ResultAlternative",
    "SessionPhase",
    "TranscriptAccumulator",
    "TranscriptState",
    "add_punctuation",
    "append_fragment",
    "capitalize_first",
    "is_new_sentence",
    "is_question",
    "normalize_key",
]
