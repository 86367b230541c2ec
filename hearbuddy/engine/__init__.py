"""Recognition engine interface and implementations.

WHY: The host recognizer is an external capability. Keeping its interface
in one package lets the session run against any implementation,
including the scripted engine used by the CLI and the tests.

RULES:
- The session controller depends only on RecognitionEngine
- Adding an engine = one new module subclassing RecognitionEngine
"""

from hearbuddy.engine.base import EngineStateError, RecognitionEngine
from hearbuddy.engine.scripted import ScriptedEngine, ScriptFormatError, ScriptStep

__all__ = [
    "EngineStateError",
    "RecognitionEngine",
    "ScriptFormatError",
    "ScriptStep",
    "ScriptedEngine",
]
