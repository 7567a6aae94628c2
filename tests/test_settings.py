#!/usr/bin/env python3
"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from sdprompt_viewer.settings import Settings


def test_defaults():
    settings = Settings()
    assert settings.dir == Path.cwd()
    assert settings.pattern == "*.png"
    assert settings.port == 7863
    assert settings.parameters_key == "parameters"
    assert settings.max_input_size == 32 * 1024
    assert settings.max_unknowns == 64
    assert settings.show_unknown_params is True
    assert settings.log_level == "INFO"
    assert settings.log_file is None


def test_dir_is_resolved(tmp_path):
    settings = Settings(dir=str(tmp_path / "sub" / ".."))
    assert settings.dir == tmp_path.resolve()


def test_log_level_is_normalized():
    assert Settings(log_level="debug").log_level == "DEBUG"


@pytest.mark.parametrize("field,value", [
    ("port", 0),
    ("port", 70000),
    ("max_input_size", 0),
    ("max_unknowns", 0),
    ("parameters_key", ""),
    ("parameters_key", "a\x00b"),
    ("log_level", "LOUD"),
])
def test_invalid_values_are_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})


class TestLoadFromYaml:
    """Tests for Settings.load_from_yaml."""

    def test_reads_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SDPROMPT_DIR", raising=False)
        monkeypatch.delenv("SDPROMPT_PARAMETERS_KEY", raising=False)
        config = tmp_path / "config.yml"
        config.write_text(
            f"dir: {tmp_path}\nport: 9000\nparameters_key: Comment\nshow_unknown_params: false\n",
            encoding="utf-8")

        settings = Settings.load_from_yaml(config)

        assert settings.dir == tmp_path.resolve()
        assert settings.port == 9000
        assert settings.parameters_key == "Comment"
        assert settings.show_unknown_params is False

    def test_missing_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SDPROMPT_DIR", raising=False)
        monkeypatch.delenv("SDPROMPT_PARAMETERS_KEY", raising=False)
        settings = Settings.load_from_yaml(tmp_path / "missing.yml")
        assert settings.port == 7863

    def test_broken_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SDPROMPT_DIR", raising=False)
        monkeypatch.delenv("SDPROMPT_PARAMETERS_KEY", raising=False)
        config = tmp_path / "config.yml"
        config.write_text("port: [unclosed\n", encoding="utf-8")
        assert Settings.load_from_yaml(config).port == 7863

    def test_env_overrides(self, tmp_path, monkeypatch):
        config = tmp_path / "config.yml"
        config.write_text("dir: /nonexistent\nparameters_key: parameters\n", encoding="utf-8")
        monkeypatch.setenv("SDPROMPT_DIR", str(tmp_path))
        monkeypatch.setenv("SDPROMPT_PARAMETERS_KEY", "Description")

        settings = Settings.load_from_yaml(config)

        assert settings.dir == tmp_path.resolve()
        assert settings.parameters_key == "Description"
