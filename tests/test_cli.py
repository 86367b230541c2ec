"""Tests for the command-line interface.

CLI tests call main(argv) directly and read stdout/stderr with capsys.
Nothing touches the network: the contact command gets a ContactClient
wired to httpx.MockTransport.
"""

import json
from pathlib import Path

import httpx
import pytest

from hearbuddy import cli
from hearbuddy.contact import ContactClient

SCRIPT = {
    "steps": [
        {"delay_ms": 0, "results": [{"transcript": "hello there", "isFinal": True}]},
        {"delay_ms": 100, "results": [{"transcript": "hello there", "isFinal": True}]},
        {"delay_ms": 100, "results": [{"transcript": "where are you going", "isFinal": False}]},
    ],
}


@pytest.fixture
def script_path(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps(SCRIPT), encoding="utf-8")
    return path


class TestParser:

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_replay_defaults(self):
        args = cli.build_parser().parse_args(["replay", "x.json"])
        assert args.finalize_delay_ms == cli.FINALIZE_DELAY_MS
        assert args.dedupe_capacity == cli.DEDUPE_CAPACITY
        assert args.punctuation is None
        assert args.follow is False

    def test_zero_finalize_delay_allowed(self):
        args = cli.build_parser().parse_args(["replay", "x.json", "--finalize-delay-ms", "0"])
        assert args.finalize_delay_ms == 0

    @pytest.mark.parametrize("argv", [
        ["replay", "x.json", "--finalize-delay-ms", "-1"],
        ["replay", "x.json", "--dedupe-capacity", "0"],
        ["replay", "x.json", "--dedupe-capacity", "many"],
    ])
    def test_out_of_range_numbers_rejected(self, argv, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.build_parser().parse_args(argv)
        assert excinfo.value.code == 2
        assert "Traceback" not in capsys.readouterr().err

    def test_bad_capacity_never_reaches_session(self, script_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["replay", "--dedupe-capacity", "0", str(script_path)])
        assert excinfo.value.code == 2
        assert "must be 1 or greater" in capsys.readouterr().err

    def test_boolean_flags(self):
        args = cli.build_parser().parse_args(["punctuate", "hi", "--no-periods", "--questions"])
        assert args.periods is False
        assert args.questions is True


class TestPunctuate:

    def test_question(self, capsys):
        cli.main(["punctuate", "where", "are", "you"])
        assert capsys.readouterr().out == "Where are you?\n"

    def test_continuation(self, capsys):
        cli.main(["punctuate", "--continuation", "hello there"])
        assert capsys.readouterr().out == "hello there.\n"

    def test_flags_override(self, capsys):
        cli.main(["punctuate", "--no-questions", "where are you"])
        assert capsys.readouterr().out == "Where are you.\n"

    def test_punctuation_off(self, capsys):
        cli.main(["punctuate", "--no-punctuation", "where are you"])
        assert capsys.readouterr().out == "Where are you\n"

    def test_settings_file(self, tmp_path, capsys):
        settings = tmp_path / "settings.json"
        settings.write_text(json.dumps({"addPeriods": False}), encoding="utf-8")
        cli.main(["punctuate", "--settings", str(settings), "hello there"])
        assert capsys.readouterr().out == "Hello there\n"

    def test_bad_settings_file(self, tmp_path, capsys):
        settings = tmp_path / "settings.json"
        settings.write_text(json.dumps({"addPeriods": [1]}), encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["punctuate", "--settings", str(settings), "hello"])
        assert excinfo.value.code == 1
        assert "Error:" in capsys.readouterr().err


class TestReplay:

    def test_prints_deduplicated_transcript(self, script_path, capsys):
        cli.main(["replay", str(script_path)])
        captured = capsys.readouterr()
        # trailing interim is committed when the session stops
        assert captured.out == "Hello there. Where are you going?\n"
        assert "Delivered 3 step(s)" in captured.err

    def test_follow_prints_progress(self, script_path, capsys):
        cli.main(["replay", "--follow", str(script_path)])
        err = capsys.readouterr().err
        assert "| Hello there. [Where are you going]" in err

    def test_punctuation_flags_apply(self, script_path, capsys):
        cli.main(["replay", "--no-punctuation", str(script_path)])
        assert capsys.readouterr().out == "Hello there where are you going\n"

    def test_status_reported(self, tmp_path, capsys):
        path = tmp_path / "denied.json"
        path.write_text(json.dumps({"steps": [{"error": "not-allowed"}]}), encoding="utf-8")
        cli.main(["replay", str(path)])
        assert "Status: Microphone access denied" in capsys.readouterr().err

    def test_invalid_script(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"steps": [{"delay_ms": 5}]}), encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["replay", str(path)])
        assert excinfo.value.code == 1
        assert "Invalid event script" in capsys.readouterr().err

    def test_missing_script(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["replay", str(tmp_path / "missing.json")])
        assert excinfo.value.code == 1


class TestContact:

    def _patch_client(self, monkeypatch, response):
        def factory():
            transport = httpx.MockTransport(lambda request: response)
            return ContactClient(access_key="key-123", endpoint="https://forms.test/submit", transport=transport)

        monkeypatch.setattr(cli, "ContactClient", factory)

    def test_success(self, monkeypatch, capsys):
        self._patch_client(monkeypatch, httpx.Response(200, json={"success": True}))
        cli.main(["contact", "--name", "Ada", "--email", "ada@example.com", "--message", "hi"])
        assert "Form Submitted Successfully" in capsys.readouterr().err

    def test_rejected(self, monkeypatch, capsys):
        self._patch_client(monkeypatch, httpx.Response(200, json={"success": False}))
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["contact", "--name", "Ada", "--email", "ada@example.com", "--message", "hi"])
        assert excinfo.value.code == 1
        assert "Error submitting form" in capsys.readouterr().err

    def test_invalid_email(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["contact", "--name", "Ada", "--email", "nope", "--message", "hi"])
        assert excinfo.value.code == 1

    def test_missing_access_key(self, monkeypatch, capsys):
        monkeypatch.delenv("WEB3FORMS_ACCESS_KEY", raising=False)
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["contact", "--name", "Ada", "--email", "ada@example.com", "--message", "hi"])
        assert excinfo.value.code == 1
        assert "WEB3FORMS_ACCESS_KEY" in capsys.readouterr().err


class TestSamples:

    SAMPLES = Path(__file__).resolve().parent.parent / "samples"

    def test_mobile_redelivery_sample(self, capsys):
        cli.main([
            "replay",
            "--settings", str(self.SAMPLES / "settings.json"),
            str(self.SAMPLES / "mobile_redelivery.json"),
        ])
        captured = capsys.readouterr()
        assert captured.out == "Hello there. Is it raining? That was fun right?\n"
        assert "Status: Mic error: no-speech" in captured.err
