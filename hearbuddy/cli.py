"""Command-line interface for the HearBuddy caption engine.

WHY: The transcript engine is easiest to inspect, tune, and demo from a
terminal: replay a recorded recognition session and see the captions it
produces, try the punctuation rules on a sentence, or send feedback
through the contact form.

HOW: argparse subcommands:
  replay: load an event script, run it through a RecognitionSession
    on a virtual clock, print the committed transcript
  punctuate: run add_punctuation() on the given text
  contact: submit the contact form via ContactClient
Status messages go to stderr; results go to stdout so output can be piped.

RULES:
- Settings precedence: env defaults < --settings file < explicit flags
- --finalize-delay-ms and --dedupe-capacity default to the config values
- Input errors (bad script, bad settings, missing access key) exit with status 1
- Out-of-range numeric options are rejected by argparse (exit status 2)
- replay always stops the session before printing, so trailing interim text is committed
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from hearbuddy import analytics
from hearbuddy.config import (
    DEDUPE_CAPACITY,
    FINALIZE_DELAY_MS,
    default_punctuation_config,
    load_settings_file,
)
from hearbuddy.contact import ContactClient, ContactMessage, ContactResult, ContactSubmissionError
from hearbuddy.core.models import PunctuationConfig, TranscriptState
from hearbuddy.core.normalizer import add_punctuation
from hearbuddy.core.scheduler import ManualScheduler
from hearbuddy.engine.scripted import ScriptedEngine, ScriptFormatError
from hearbuddy.session import RecognitionSession


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_config(args: argparse.Namespace) -> PunctuationConfig:
    """Combine env defaults, an optional settings file, and explicit flags."""
    if args.settings:
        config = load_settings_file(Path(args.settings))
    else:
        config = default_punctuation_config()

    overrides = {}
    if args.punctuation is not None:
        overrides["auto_punctuation"] = args.punctuation
    if args.questions is not None:
        overrides["detect_questions"] = args.questions
    if args.periods is not None:
        overrides["add_periods"] = args.periods
    if overrides:
        config = config.model_copy(update=overrides)
    if args.settings or overrides:
        analytics.track_settings_change(config)
    return config


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must be 0 or greater, got {}".format(number))
    return number


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be 1 or greater, got {}".format(number))
    return number


def _report_status(message: str) -> None:
    if message:
        _status("Status: {}".format(message))


def _print_follow(state: TranscriptState) -> None:
    line = state.committed + ("[{}]".format(state.interim) if state.interim else "")
    _status("  | {}".format(line.strip()))


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_replay(args: argparse.Namespace) -> None:
    try:
        config = _resolve_config(args)
        engine = ScriptedEngine.from_file(Path(args.script))
    except (ScriptFormatError, ValidationError, OSError) as e:
        _fail(str(e))
        return

    _status("Replaying {} step(s) from {}".format(len(engine.steps), Path(args.script).name))

    scheduler = ManualScheduler()
    with RecognitionSession(
        engine,
        config=config,
        scheduler=scheduler,
        finalize_delay_s=args.finalize_delay_ms / 1000.0,
        dedupe_capacity=args.dedupe_capacity,
        on_status=_report_status,
    ) as session:
        if args.follow:
            session.subscribe(_print_follow)

        session.start_listening()
        if not session.listening:
            _fail(session.status or "Could not start listening")
            return
        analytics.track_start_listening()

        delivered = engine.replay(scheduler)
        session.stop_listening()
        analytics.track_stop_listening()

        _status("Delivered {} step(s)".format(delivered))
        print(session.committed.strip())


def _cmd_punctuate(args: argparse.Namespace) -> None:
    try:
        config = _resolve_config(args)
    except (ValidationError, OSError) as e:
        _fail(str(e))
        return
    text = " ".join(args.text)
    print(add_punctuation(text, config, is_new=not args.continuation))


async def _send_contact(message: ContactMessage) -> ContactResult:
    async with ContactClient() as client:
        return await client.submit(message)


def _cmd_contact(args: argparse.Namespace) -> None:
    try:
        message = ContactMessage(name=args.name, email=args.email, message=args.message)
    except ValidationError as e:
        _fail(str(e))
        return

    _status("Sending....")
    try:
        result = asyncio.run(_send_contact(message))
    except (ValueError, ContactSubmissionError) as e:
        # Missing access key or unusable service reply
        _fail(str(e))
        return

    _status(result.message)
    if not result.success:
        sys.exit(1)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_punctuation_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--settings",
        default=None,
        help="JSON settings file (autoPunctuation, detectQuestions, addPeriods, addCommas).",
    )
    parser.add_argument(
        "--punctuation",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable automatic punctuation (default: from settings/env).",
    )
    parser.add_argument(
        "--questions",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Detect questions and end them with '?' (default: from settings/env).",
    )
    parser.add_argument(
        "--periods",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="End statements with '.' (default: from settings/env).",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    RULES:
    - Subcommands: replay, punctuate, contact (one is required)
    - Punctuation flags are shared by replay and punctuate
    """
    parser = argparse.ArgumentParser(
        prog="hearbuddy",
        description="Live caption engine: punctuation, question detection, "
                    "and duplicate-free transcript merging for speech recognition results.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay = subparsers.add_parser(
        "replay",
        help="Replay a recorded recognition event script and print the captions.",
    )
    replay.add_argument("script", help="Path to the JSON event script.")
    _add_punctuation_flags(replay)
    replay.add_argument(
        "--finalize-delay-ms",
        type=_non_negative_int,
        default=FINALIZE_DELAY_MS,
        help="Commit unchanged interim text after this many ms (default: %(default)s).",
    )
    replay.add_argument(
        "--dedupe-capacity",
        type=_positive_int,
        default=DEDUPE_CAPACITY,
        help="Number of fragment keys kept for duplicate suppression (default: %(default)s).",
    )
    replay.add_argument(
        "--follow",
        action="store_true",
        help="Print the caption line to stderr after every change.",
    )
    replay.set_defaults(handler=_cmd_replay)

    punctuate = subparsers.add_parser(
        "punctuate",
        help="Capitalize and punctuate a piece of text.",
    )
    punctuate.add_argument("text", nargs="+", help="Text to normalize.")
    punctuate.add_argument(
        "--continuation",
        action="store_true",
        help="Treat the text as continuing a sentence (no capitalization).",
    )
    _add_punctuation_flags(punctuate)
    punctuate.set_defaults(handler=_cmd_punctuate)

    contact = subparsers.add_parser(
        "contact",
        help="Send a message through the contact form.",
    )
    contact.add_argument("--name", required=True, help="Your name.")
    contact.add_argument("--email", required=True, help="Reply address.")
    contact.add_argument("--message", required=True, help="Message body.")
    contact.set_defaults(handler=_cmd_contact)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    args.handler(args)


if __name__ == "__main__":
    main()
