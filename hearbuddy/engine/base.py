"""Abstract speech-recognition engine interface.

WHY: Speech-to-text is delegated entirely to the host platform. The
session controller must not care whether results come from a browser
bridge, a desktop recognizer, or a recorded script, so the engine is an
injectable dependency with the same small surface the Web Speech API has.

HOW: RecognitionEngine is an ABC with start/stop/abort primitives and two
handler attributes, on_result and on_error. Implementations call
emit_result()/emit_error() from their own callbacks; delivery is skipped
once the handlers are detached.

RULES:
- Subclasses MUST implement start(), stop() and abort()
- start() on a running engine raises EngineStateError
- Error codes are the Web Speech codes ("not-allowed", "no-speech", "network", ...)
- Detaching = setting both handlers to None
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from hearbuddy.core.models import RecognitionEvent

ResultHandler = Callable[[RecognitionEvent], None]
ErrorHandler = Callable[[str], None]


class EngineStateError(RuntimeError):
    """Raised when a primitive is called in the wrong engine state.

    WHY: Browsers throw InvalidStateError when start() is called on a
    recognizer that is already running. Engines here mirror that so the
    session controller's recovery path is exercised the same way.
    """


class RecognitionEngine(ABC):
    """Base class for all recognition engines.

    To add a new engine:
    1. Subclass RecognitionEngine
    2. Implement start(), stop() and abort()
    3. Call emit_result() for each result batch and emit_error() for failures
    """

    def __init__(self) -> None:
        self.on_result: ResultHandler | None = None
        self.on_error: ErrorHandler | None = None

    @abstractmethod
    def start(self) -> None:
        """Begin delivering results."""

    @abstractmethod
    def stop(self) -> None:
        """Stop gracefully; pending results may still be delivered."""

    @abstractmethod
    def abort(self) -> None:
        """Stop immediately and discard pending results."""

    @property
    def attached(self) -> bool:
        return self.on_result is not None or self.on_error is not None

    def detach(self) -> None:
        self.on_result = None
        self.on_error = None

    def emit_result(self, event: RecognitionEvent) -> None:
        handler = self.on_result
        if handler is not None:
            handler(event)

    def emit_error(self, code: str) -> None:
        handler = self.on_error
        if handler is not None:
            handler(code)
