"""Usage analytics events for the captioning front end.

WHY: Product decisions (is the settings panel used, how long do people
caption) rely on a handful of engagement events. The presentation layer
emits them; the transcript core never does.

HOW: track_event() fans an event out to every registered sink. The
default sink writes the event to the log; deployments can register
another callable (a metrics client, a message queue) with add_sink().

RULES:
- Event names are snake_case; params always carry event_category and event_label
- A failing sink is logged and never interrupts the caller or other sinks
- Only front-end code (the CLI here) calls these helpers
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Dict, List

from hearbuddy.core.models import PunctuationConfig

logger = logging.getLogger(__name__)

AnalyticsSink = Callable[[str, Dict[str, Any]], None]


def log_sink(event_name: str, params: Dict[str, Any]) -> None:
    logger.info("analytics event %s %s", event_name, params)


_sinks: List[AnalyticsSink] = [log_sink]


def add_sink(sink: AnalyticsSink) -> None:
    if sink not in _sinks:
        _sinks.append(sink)


def remove_sink(sink: AnalyticsSink) -> None:
    if sink in _sinks:
        _sinks.remove(sink)


def track_event(event_name: str, params: Dict[str, Any] | None = None) -> None:
    """Send one analytics event to every registered sink."""
    payload = dict(params or {})
    for sink in list(_sinks):
        try:
            sink(event_name, payload)
        except Exception:
            logger.exception("Analytics sink failed for event %s", event_name)


def track_start_listening() -> None:
    track_event("start_listening", {
        "event_category": "captions",
        "event_label": "start",
        "value": 1,
    })


def track_stop_listening() -> None:
    track_event("stop_listening", {
        "event_category": "captions",
        "event_label": "stop",
        "value": 1,
    })


def track_settings_change(config: PunctuationConfig) -> None:
    track_event("settings_change", {
        "event_category": "engagement",
        "event_label": "punctuation_settings",
        "settings": config.model_dump(by_alias=True),
    })
