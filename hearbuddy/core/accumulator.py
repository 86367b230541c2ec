"""Transcript accumulator: merges interim and final results into captions.

WHY: Recognition engines stream provisional (interim) text while the
speaker talks and later confirm it as final. Some engines re-deliver
finals, and some never mark trailing speech as final before a pause.
The accumulator turns that noisy stream into one append-only caption
plus a live preview line.

HOW: A small state machine (idle ↔ listening) consumes RecognitionEvent
batches:
  final chunk   → cancel timer, duplicate check, normalize, append, clear interim
  interim chunk → capitalize for display, store as interim, restart finalize timer
  nothing       → clear interim
The finalize timer commits a stalled interim through the same path as a
final chunk. Every observable change is pushed to subscribed listeners
as a TranscriptState snapshot.

RULES:
- committed is append-only; only clear() shrinks it
- The punctuation config is read per fragment, never cached per session
- At most one finalize timer is outstanding; a superseded timer that
  still fires is ignored (generation check)
- remember() runs before the append
- Listeners are called under the lock, in mutation order; one that
  raises is logged and skipped
- All mutation happens under one re-entrant lock
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from hearbuddy.core.dedupe import DEFAULT_DEDUPE_CAPACITY, DedupeMemory
from hearbuddy.core.models import PunctuationConfig, RecognitionEvent, TranscriptState
from hearbuddy.core.normalizer import (
    add_punctuation,
    append_fragment,
    capitalize_first,
    collapse_whitespace,
    is_new_sentence,
)
from hearbuddy.core.scheduler import Scheduler, ThreadingScheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_FINALIZE_DELAY_S = 0.6

TranscriptListener = Callable[[TranscriptState], None]


class TranscriptAccumulator:
    """Owns the committed transcript, the interim preview, and dedupe memory.

    WHY: All transcript state for one speech session lives in one object
    with an explicit lifecycle instead of scattered mutable cells.

    HOW: The session controller calls begin()/finish() around a listening
    period and forwards engine callbacks to handle_event().

    RULES:
    - handle_event() is ignored while idle
    - finish(flush=True) commits a pending interim synchronously
    - clear() works in any state
    """

    def __init__(
        self,
        config_provider: Callable[[], PunctuationConfig],
        scheduler: Scheduler | None = None,
        finalize_delay_s: float = DEFAULT_FINALIZE_DELAY_S,
        dedupe_capacity: int = DEFAULT_DEDUPE_CAPACITY,
    ) -> None:
        if finalize_delay_s < 0:
            raise ValueError("finalize_delay_s must not be negative")
        self._config_provider = config_provider
        self._scheduler = scheduler or ThreadingScheduler()
        self.finalize_delay_s = finalize_delay_s
        self.memory = DedupeMemory(dedupe_capacity)

        self._lock = threading.RLock()
        self._committed = ""
        self._interim = ""
        self._listening = False
        self._timer: TimerHandle | None = None
        self._timer_generation = 0
        self._listeners: list[TranscriptListener] = []

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def committed(self) -> str:
        return self._committed

    @property
    def interim(self) -> str:
        return self._interim

    @property
    def listening(self) -> bool:
        return self._listening

    @property
    def timer_pending(self) -> bool:
        return self._timer is not None

    def snapshot(self) -> TranscriptState:
        with self._lock:
            return TranscriptState(committed=self._committed, interim=self._interim)

    def subscribe(self, listener: TranscriptListener) -> Callable[[], None]:
        """Register a change listener and return a function that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def begin(self) -> None:
        with self._lock:
            self._listening = True

    def finish(self, flush: bool = True) -> None:
        """Leave the listening state, committing any pending interim text.

        RULES:
        - The finalize timer is cancelled first
        - With flush, a non-empty interim goes through the duplicate-check
          and append path before the state turns idle
        """
        with self._lock:
            self._cancel_timer()
            if flush and self._interim.strip():
                self._commit(self._interim)
            self._interim = ""
            self._listening = False
            self._notify_locked()

    def clear(self) -> None:
        """Reset committed text, interim text, and dedupe memory."""
        with self._lock:
            self._cancel_timer()
            self._committed = ""
            self._interim = ""
            self.memory.clear()
            logger.info("Transcript cleared")
            self._notify_locked()

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def handle_event(self, event: RecognitionEvent) -> None:
        """Merge one batch of recognition results into the transcript."""
        with self._lock:
            if not self._listening:
                logger.debug("Dropping recognition event received while idle")
                return

            final_chunk, interim_chunk = event.split_chunks()

            if final_chunk.strip():
                self._cancel_timer()
                self._commit(final_chunk)
                self._interim = ""
            elif interim_chunk.strip():
                if is_new_sentence(self._committed):
                    self._interim = capitalize_first(interim_chunk)
                else:
                    self._interim = interim_chunk
                self._restart_timer()
            else:
                self._cancel_timer()
                self._interim = ""

            self._notify_locked()

    def _commit(self, fragment: str) -> bool:
        """Duplicate-check, normalize, and append one fragment. Lock held."""
        raw = collapse_whitespace(fragment)
        if not raw:
            return False

        config = self._config_provider()
        normalized = add_punctuation(raw, config, is_new_sentence(self._committed))

        if self.memory.is_duplicate(raw, self._committed, normalized):
            logger.debug("Suppressed duplicate fragment: %r", raw)
            return False

        self.memory.remember(raw)
        self._committed = append_fragment(self._committed, normalized)
        return True

    # ------------------------------------------------------------------
    # Finalize timer
    # ------------------------------------------------------------------

    def _restart_timer(self) -> None:
        self._cancel_timer()
        generation = self._timer_generation
        self._timer = self._scheduler.call_later(
            self.finalize_delay_s,
            lambda: self._on_finalize_timer(generation),
        )

    def _cancel_timer(self) -> None:
        # Bumping the generation also neutralizes a timer thread that has
        # already started running and is waiting for the lock.
        self._timer_generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_finalize_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._timer_generation or not self._listening:
                return
            self._timer = None
            if not self._interim.strip():
                return
            logger.debug("Finalizing stalled interim text")
            self._commit(self._interim)
            self._interim = ""
            self._notify_locked()

    # ------------------------------------------------------------------
    # Notification
    # ------------------------------------------------------------------

    def _snapshot_locked(self) -> TranscriptState:
        return TranscriptState(committed=self._committed, interim=self._interim)

    def _notify_locked(self) -> None:
        # Delivered under the lock so listeners see snapshots in mutation order
        state = self._snapshot_locked()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Transcript listener failed")
