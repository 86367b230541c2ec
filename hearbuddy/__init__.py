"""HearBuddy: live speech captions with client-side punctuation.

WHY: Browser speech recognition streams unpunctuated, lowercase, and
sometimes repeated text. Readable captions need sentence casing, question
marks, and a transcript that never shows the same fragment twice.

HOW: Three layers: core (pure text rules plus the transcript
accumulator), engine (injectable recognition engines), and session (the
controller that drives an engine and feeds the accumulator). The CLI,
analytics, and contact form sit on top and are never called by the core.

RULES:
- The core has no I/O and no engine dependency
- Engines are injected; nothing is hard-wired to one platform API
- Failures surface as status text, never as exceptions from the session
"""

__version__ = "0.1.0"
