"""Data model for recognition events, punctuation settings, and transcript state.

WHY: The recognition engine, the text post-processing functions, and the
presentation layer all exchange the same handful of shapes: a settings
object, batches of recognition results, and a committed/interim transcript
snapshot. Typing them once keeps every layer honest about field names.

HOW: PunctuationConfig is a frozen pydantic model because it arrives from
user-editable settings documents (camelCase keys from the browser app,
snake_case from Python callers) and needs validation. Recognition events
and transcript snapshots are plain dataclasses built in-process.

RULES:
- PunctuationConfig is immutable; settings changes replace it wholesale
- add_commas is recognized but inert
- Only results at or after result_index are new in a RecognitionEvent
- TranscriptState is an immutable snapshot, never mutated by listeners
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PunctuationConfig(BaseModel):
    """User-configurable punctuation and capitalization settings.

    WHY: Listeners toggle punctuation behaviour from a settings panel while
    captions are running. The accumulator reads the current config per
    fragment, so a change applies to the next fragment only.

    HOW: Frozen pydantic model. Field aliases accept the camelCase keys the
    browser app stores (``autoPunctuation`` etc.); ``populate_by_name``
    keeps the snake_case names usable from Python.

    RULES:
    - auto_punctuation: master switch; when off only capitalization applies
    - detect_questions: append "?" to text classified as a question
    - add_periods: append "." to statements
    - add_commas: reserved, never applied
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    auto_punctuation: bool = Field(
        default=True,
        alias="autoPunctuation",
        description="Add punctuation to finalized fragments.",
    )
    detect_questions: bool = Field(
        default=True,
        alias="detectQuestions",
        description="End fragments that read as questions with '?'.",
    )
    add_periods: bool = Field(
        default=True,
        alias="addPeriods",
        description="End statements with '.'.",
    )
    add_commas: bool = Field(
        default=False,
        alias="addCommas",
        description="Reserved for pause-based comma insertion; currently inert.",
    )


@dataclass(frozen=True)
class ResultAlternative:
    """One recognition result: the top alternative's text and its final flag."""

    text: str
    final: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResultAlternative:
        """Parse either the Web Speech shape or the snake_case shape.

        RULES:
        - text comes from "text" or "transcript" (missing → "")
        - final comes from "final" or "isFinal" (missing → False)
        """
        text = data.get("text", data.get("transcript"))
        final = data.get("final", data.get("isFinal", False))
        return cls(text=text or "", final=bool(final))


@dataclass(frozen=True)
class RecognitionEvent:
    """A batch of results delivered by one engine callback.

    WHY: Some platforms re-deliver the full result history on every
    callback. result_index marks where the new entries start.

    HOW: split_chunks() walks the new entries in order and concatenates
    final and interim texts separately, the same way the browser result
    handler does.

    RULES:
    - Entries before result_index are history and are ignored
    - A negative result_index is treated as 0
    """

    results: tuple[ResultAlternative, ...] = field(default_factory=tuple)
    result_index: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecognitionEvent:
        raw_results = data.get("results") or []
        index = data.get("result_index", data.get("resultIndex", 0))
        return cls(
            results=tuple(ResultAlternative.from_dict(r) for r in raw_results),
            result_index=int(index or 0),
        )

    @classmethod
    def of(cls, *results: ResultAlternative, result_index: int = 0) -> RecognitionEvent:
        return cls(results=tuple(results), result_index=result_index)

    def split_chunks(self) -> tuple[str, str]:
        """Return (final_chunk, interim_chunk) built from the new entries."""
        final_parts: list[str] = []
        interim_parts: list[str] = []
        for result in self.results[max(self.result_index, 0):]:
            if not result.text:
                continue
            if result.final:
                final_parts.append(result.text)
            else:
                interim_parts.append(result.text)
        return "".join(final_parts), "".join(interim_parts)


@dataclass(frozen=True)
class TranscriptState:
    """Snapshot of the caption text handed to listeners.

    RULES:
    - committed: append-only finalized text, ends in a space when non-empty
    - interim: live preview, replaced or cleared on every callback
    """

    committed: str = ""
    interim: str = ""


class SessionPhase(str, enum.Enum):
    """Lifecycle of a recognition session.

    RULES:
    - open: constructed (or stopped), engine idle
    - active: listening, engine callbacks feed the transcript
    - closed: torn down, handlers detached, every control call is a no-op
    """

    OPEN = "open"
    ACTIVE = "active"
    CLOSED = "closed"
