"""Shared test fixtures for the hearbuddy test suite.

WHY: Accumulator, session, and CLI tests all need the same building
blocks: a virtual-clock scheduler, punctuation configs, compact builders
for recognition events, and an engine double that records which
primitives were called.

HOW: Plain helper functions build RecognitionEvent batches. Fixtures
provide a ManualScheduler, a mutable config holder, an accumulator bound
to both, and a RecordingEngine.

RULES:
- Every test gets fresh objects; nothing mutable is shared between tests
- The finalize delay in fixtures is the production default (0.6 s)
"""

from typing import List, Optional, Set

import pytest

from hearbuddy.core.accumulator import TranscriptAccumulator
from hearbuddy.core.models import PunctuationConfig, RecognitionEvent, ResultAlternative
from hearbuddy.core.scheduler import ManualScheduler
from hearbuddy.engine.base import EngineStateError, RecognitionEngine


# ---------------------------------------------------------------------------
# Event builders
# ---------------------------------------------------------------------------


def final(text: str) -> ResultAlternative:
    return ResultAlternative(text=text, final=True)


def interim(text: str) -> ResultAlternative:
    return ResultAlternative(text=text, final=False)


def final_event(text: str) -> RecognitionEvent:
    return RecognitionEvent.of(final(text))


def interim_event(text: str) -> RecognitionEvent:
    return RecognitionEvent.of(interim(text))


# ---------------------------------------------------------------------------
# Engine double
# ---------------------------------------------------------------------------


class RecordingEngine(RecognitionEngine):
    """Engine double that records primitive calls and can fail on demand."""

    def __init__(self, fail_on: Optional[Set[str]] = None) -> None:
        super().__init__()
        self.calls: List[str] = []
        self.fail_on = set(fail_on or ())
        self.running = False

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise EngineStateError("{} failed".format(name))

    def start(self) -> None:
        self._record("start")
        self.running = True

    def stop(self) -> None:
        self._record("stop")
        self.running = False

    def abort(self) -> None:
        self._record("abort")
        self.running = False


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class ConfigHolder:
    """Mutable box so tests can swap the config between fragments."""

    def __init__(self, config: PunctuationConfig) -> None:
        self.config = config

    def __call__(self) -> PunctuationConfig:
        return self.config


@pytest.fixture
def default_config():
    return PunctuationConfig()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def config_holder(default_config):
    return ConfigHolder(default_config)


@pytest.fixture
def accumulator(config_holder, scheduler):
    """A listening accumulator on a virtual clock with default settings."""
    acc = TranscriptAccumulator(config_holder, scheduler=scheduler, finalize_delay_s=0.6)
    acc.begin()
    return acc


@pytest.fixture
def engine():
    return RecordingEngine()
