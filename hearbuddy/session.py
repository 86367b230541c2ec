"""Recognition session controller: engine lifecycle around the transcript.

WHY: The presentation layer needs three buttons (start, stop, clear) and
two outputs (caption text, status line). Everything in between, from
engine start failures to permission errors and handler teardown, must
never crash the app. This module is the one place that talks to the
engine.

HOW: RecognitionSession owns a RecognitionEngine and a
TranscriptAccumulator. It attaches itself as the engine's result and
error handler, maps engine error codes to user-facing status text, and
moves through the phases open → active → open … → closed. Status
messages are reported through an optional on_status callback, like the
converter client's status hooks.

RULES:
- engine=None means unsupported: status says so and every call is a no-op
- start_listening() while active or closed is a no-op
- stop_listening() while not active is a no-op
- A failed engine.start() is reported via status and rolls back to open
- "not-allowed" forces open without flushing, stops and aborts the engine,
  and detaches handlers; secondary errors are swallowed
- Any other engine error only updates status
- Nothing here raises to the caller
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from hearbuddy.core.accumulator import (
    DEFAULT_FINALIZE_DELAY_S,
    TranscriptAccumulator,
    TranscriptListener,
)
from hearbuddy.core.dedupe import DEFAULT_DEDUPE_CAPACITY
from hearbuddy.core.models import PunctuationConfig, RecognitionEvent, SessionPhase
from hearbuddy.core.scheduler import Scheduler
from hearbuddy.engine.base import RecognitionEngine

logger = logging.getLogger(__name__)

UNSUPPORTED_MESSAGE = (
    "Speech Recognition is not supported on this platform. "
    "Try Chrome or Edge on desktop, or Chrome on Android."
)
PERMISSION_DENIED_MESSAGE = (
    "Microphone access denied. Please allow mic permissions in your browser settings."
)
START_FAILED_MESSAGE = "Error starting speech recognition. Please try again."

PERMISSION_DENIED_CODE = "not-allowed"


def describe_engine_error(code: str | None) -> str:
    """Map an engine error code to the status text shown to the user."""
    code = code or "unknown"
    if code == PERMISSION_DENIED_CODE:
        return PERMISSION_DENIED_MESSAGE
    return "Mic error: {}".format(code)


class RecognitionSession:
    """One speech-captioning session bound to a recognition engine.

    WHY: Session flags, the last committed fragment, and the dedupe cache
    belong to one object with an explicit lifecycle, constructed per
    session and discarded on teardown.

    HOW: Use as a context manager so handlers are always detached:

        with RecognitionSession(engine, config) as session:
            session.start_listening()
            ...

    RULES:
    - config is read per fragment; update_config() affects the next fragment only
    - subscribe() listeners receive TranscriptState snapshots
    - on_status receives every status change, including the reset to ""
    """

    def __init__(
        self,
        engine: RecognitionEngine | None,
        config: PunctuationConfig | None = None,
        scheduler: Scheduler | None = None,
        finalize_delay_s: float = DEFAULT_FINALIZE_DELAY_S,
        dedupe_capacity: int = DEFAULT_DEDUPE_CAPACITY,
        on_status: Callable[[str], None] | None = None,
    ) -> None:
        self._engine = engine
        self._config = config or PunctuationConfig()
        self._on_status = on_status
        self._status = ""
        self._phase = SessionPhase.OPEN
        self.accumulator = TranscriptAccumulator(
            config_provider=lambda: self._config,
            scheduler=scheduler,
            finalize_delay_s=finalize_delay_s,
            dedupe_capacity=dedupe_capacity,
        )

        if engine is None:
            self._set_status(UNSUPPORTED_MESSAGE)
        else:
            self._attach()

    def __enter__(self) -> RecognitionSession:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def supported(self) -> bool:
        return self._engine is not None

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def listening(self) -> bool:
        return self._phase is SessionPhase.ACTIVE

    @property
    def status(self) -> str:
        return self._status

    @property
    def committed(self) -> str:
        return self.accumulator.committed

    @property
    def interim(self) -> str:
        return self.accumulator.interim

    @property
    def config(self) -> PunctuationConfig:
        return self._config

    def subscribe(self, listener: TranscriptListener) -> Callable[[], None]:
        return self.accumulator.subscribe(listener)

    def update_config(self, config: PunctuationConfig) -> None:
        """Replace the punctuation settings; applies from the next fragment."""
        self._config = config
        logger.info("Punctuation settings updated: %s", config.model_dump())

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    def start_listening(self) -> None:
        if self._engine is None or self._phase is not SessionPhase.OPEN:
            return

        self._set_status("")
        if not self._engine.attached:
            self._attach()
        self._phase = SessionPhase.ACTIVE
        self.accumulator.begin()

        try:
            self._engine.start()
        except Exception:
            logger.exception("Error starting recognition")
            self._set_status(START_FAILED_MESSAGE)
            self._phase = SessionPhase.OPEN
            self.accumulator.finish(flush=False)
            return

        logger.info("Listening started")

    def stop_listening(self, force: bool = False) -> None:
        if self._engine is None or self._phase is not SessionPhase.ACTIVE:
            return

        self.accumulator.finish(flush=True)
        self._phase = SessionPhase.OPEN

        try:
            self._engine.stop()
        except Exception:
            logger.debug("Engine stop failed", exc_info=True)

        if force:
            try:
                self._engine.abort()
            except Exception:
                logger.debug("Engine abort failed", exc_info=True)

        logger.info("Listening stopped%s", " (forced)" if force else "")

    def clear_transcript(self) -> None:
        self.accumulator.clear()

    def close(self) -> None:
        """Tear the session down: force-stop, detach handlers, drop timers."""
        if self._phase is SessionPhase.CLOSED:
            return
        if self._engine is not None:
            self.stop_listening(force=True)
            self._engine.detach()
        self.accumulator.finish(flush=False)
        self._phase = SessionPhase.CLOSED

    # ------------------------------------------------------------------
    # Engine callbacks
    # ------------------------------------------------------------------

    def _attach(self) -> None:
        self._engine.on_result = self._handle_result
        self._engine.on_error = self._handle_error

    def _handle_result(self, event: RecognitionEvent) -> None:
        try:
            self.accumulator.handle_event(event)
        except Exception:
            logger.exception("Failed to process recognition result")

    def _handle_error(self, code: str) -> None:
        logger.warning("Speech recognition error: %s", code)
        self._set_status(describe_engine_error(code))

        if code != PERMISSION_DENIED_CODE:
            return

        self._phase = SessionPhase.OPEN
        self.accumulator.finish(flush=False)
        engine = self._engine
        try:
            engine.stop()
            engine.abort()
        except Exception:
            logger.debug("Error stopping recognition after permission denial", exc_info=True)
        engine.detach()

    def _set_status(self, message: str) -> None:
        self._status = message
        if self._on_status is not None:
            try:
                self._on_status(message)
            except Exception:
                logger.exception("Status callback failed")
