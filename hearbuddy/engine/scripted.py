"""Scripted recognition engine that replays recorded result batches.

WHY: Real recognizers need a microphone and a platform API. Recorded
event scripts make platform quirks (re-delivered finals, interim text
that never finalizes, permission errors) reproducible on any machine,
from the CLI and from tests.

HOW: A script is a JSON document with a list of steps. Each step waits
``delay_ms`` of virtual time, then delivers either a result batch or an
engine error code. The document is validated against SCRIPT_SCHEMA with
jsonschema before parsing. replay() advances a ManualScheduler by each
step's delay so the accumulator's finalize timer fires exactly where it
would in real time.

RULES:
- Result entries accept "text"/"final" or the Web Speech "transcript"/"isFinal"
- result_index (or resultIndex) defaults to 0
- A step has either "results" or "error", never both
- Steps are only delivered while the engine is running
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import jsonschema

from hearbuddy.core.models import RecognitionEvent
from hearbuddy.core.scheduler import ManualScheduler
from hearbuddy.engine.base import EngineStateError, RecognitionEngine

logger = logging.getLogger(__name__)

_RESULT_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "text": {"type": "string"},
        "transcript": {"type": "string"},
        "final": {"type": "boolean"},
        "isFinal": {"type": "boolean"},
    },
    "anyOf": [{"required": ["text"]}, {"required": ["transcript"]}],
}

SCRIPT_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Recognition event script",
    "type": "object",
    "required": ["steps"],
    "properties": {
        "language": {"type": "string"},
        "steps": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "delay_ms": {"type": "number", "minimum": 0},
                    "results": {"type": "array", "items": _RESULT_SCHEMA},
                    "result_index": {"type": "integer", "minimum": 0},
                    "resultIndex": {"type": "integer", "minimum": 0},
                    "error": {"type": "string", "minLength": 1},
                },
                "oneOf": [{"required": ["results"]}, {"required": ["error"]}],
            },
        },
    },
}


class ScriptFormatError(ValueError):
    """Raised when an event script is not valid JSON or violates SCRIPT_SCHEMA.

    RULES:
    - Message names the offending location when jsonschema provides one
    """


@dataclass
class ScriptStep:
    """One timed delivery in a script.

    RULES:
    - delay_s: virtual seconds to wait before delivering
    - exactly one of event / error is set
    """

    delay_s: float
    event: Optional[RecognitionEvent] = None
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScriptStep:
        delay_s = float(data.get("delay_ms", 0)) / 1000.0
        if "error" in data:
            return cls(delay_s=delay_s, error=data["error"])
        return cls(delay_s=delay_s, event=RecognitionEvent.from_dict(data))


class ScriptedEngine(RecognitionEngine):
    """Recognition engine backed by a list of ScriptStep objects."""

    def __init__(self, steps: List[ScriptStep], language: str = "en-US") -> None:
        super().__init__()
        self.steps = list(steps)
        self.language = language
        self.running = False
        self.aborted = False

    @classmethod
    def from_dict(cls, data: Any) -> ScriptedEngine:
        """Validate a script document and build an engine from it."""
        try:
            jsonschema.validate(instance=data, schema=SCRIPT_SCHEMA)
        except jsonschema.ValidationError as exc:
            location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
            raise ScriptFormatError(
                "Invalid event script at {}: {}".format(location, exc.message)
            ) from exc
        steps = [ScriptStep.from_dict(step) for step in data["steps"]]
        return cls(steps, language=data.get("language", "en-US"))

    @classmethod
    def from_file(cls, path: Path) -> ScriptedEngine:
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ScriptFormatError("{} is not valid JSON: {}".format(path.name, exc)) from exc
        return cls.from_dict(data)

    # ------------------------------------------------------------------
    # Engine primitives
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self.running:
            raise EngineStateError("Recognition has already started")
        self.running = True
        self.aborted = False
        logger.debug("Scripted engine started with %d steps", len(self.steps))

    def stop(self) -> None:
        self.running = False

    def abort(self) -> None:
        self.running = False
        self.aborted = True

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def deliver(self, step: ScriptStep) -> bool:
        """Deliver one step to the attached handlers. Returns False if not running."""
        if not self.running:
            return False
        if step.error is not None:
            self.emit_error(step.error)
        elif step.event is not None:
            self.emit_result(step.event)
        return True

    def replay(self, scheduler: Optional[ManualScheduler] = None) -> int:
        """Deliver every step in order, advancing the virtual clock between steps.

        Args:
            scheduler: Virtual clock shared with the accumulator. Without it,
                       delays are ignored and the finalize timer never fires
                       during replay.

        Returns:
            The number of steps actually delivered.
        """
        delivered = 0
        for step in self.steps:
            if scheduler is not None:
                scheduler.advance(step.delay_s)
            if self.deliver(step):
                delivered += 1
            else:
                logger.debug("Engine not running; skipped scripted step")
        return delivered
