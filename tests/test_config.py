"""Tests for configuration defaults and settings-file loading."""

import json

import pytest
from pydantic import ValidationError

from hearbuddy import config
from hearbuddy.core.models import PunctuationConfig


class TestEnvFlag:

    def test_true_values(self, monkeypatch):
        monkeypatch.setenv("HEARBUDDY_TEST_FLAG", " TRUE ")
        assert config._env_flag("HEARBUDDY_TEST_FLAG", "false") is True

    def test_other_values_are_false(self, monkeypatch):
        monkeypatch.setenv("HEARBUDDY_TEST_FLAG", "yes")
        assert config._env_flag("HEARBUDDY_TEST_FLAG", "true") is False

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("HEARBUDDY_TEST_FLAG", raising=False)
        assert config._env_flag("HEARBUDDY_TEST_FLAG", "true") is True


class TestDefaults:

    def test_default_config_follows_module_defaults(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_ADD_PERIODS", False)
        monkeypatch.setattr(config, "DEFAULT_ADD_COMMAS", True)
        result = config.default_punctuation_config()
        assert result.add_periods is False
        assert result.add_commas is True
        assert result.auto_punctuation is config.DEFAULT_AUTO_PUNCTUATION

    def test_numeric_defaults_are_positive(self):
        assert config.FINALIZE_DELAY_MS >= 0
        assert config.DEDUPE_CAPACITY >= 1


class TestLoadSettingsFile:

    def _write(self, tmp_path, data):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def test_camel_case_keys(self, tmp_path):
        path = self._write(tmp_path, {"autoPunctuation": True, "addPeriods": False})
        result = config.load_settings_file(path)
        assert result.add_periods is False
        assert result.auto_punctuation is True

    def test_snake_case_keys(self, tmp_path):
        path = self._write(tmp_path, {"detect_questions": False})
        assert config.load_settings_file(path).detect_questions is False

    def test_missing_keys_fall_back_to_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_DETECT_QUESTIONS", False)
        path = self._write(tmp_path, {"addPeriods": False})
        result = config.load_settings_file(path)
        assert result.detect_questions is False
        assert result.add_periods is False

    def test_unknown_keys_ignored(self, tmp_path):
        path = self._write(tmp_path, {"theme": "dark"})
        assert config.load_settings_file(path) == config.default_punctuation_config()

    def test_invalid_value(self, tmp_path):
        path = self._write(tmp_path, {"addPeriods": [1, 2]})
        with pytest.raises(ValidationError):
            config.load_settings_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            config.load_settings_file(tmp_path / "nope.json")

    def test_result_is_frozen(self, tmp_path):
        path = self._write(tmp_path, {})
        result = config.load_settings_file(path)
        assert isinstance(result, PunctuationConfig)
        with pytest.raises(ValidationError):
            result.add_periods = False


class TestContactAccessKey:

    def test_loaded_from_environment(self, monkeypatch):
        monkeypatch.setenv("WEB3FORMS_ACCESS_KEY", "  abc123 ")
        assert config.load_contact_access_key() == "abc123"

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("WEB3FORMS_ACCESS_KEY", raising=False)
        with pytest.raises(ValueError, match="WEB3FORMS_ACCESS_KEY"):
            config.load_contact_access_key()

    def test_blank_key(self, monkeypatch):
        monkeypatch.setenv("WEB3FORMS_ACCESS_KEY", "   ")
        with pytest.raises(ValueError):
            config.load_contact_access_key()
