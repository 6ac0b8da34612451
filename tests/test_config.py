"""Tests for configuration loading."""

import json
from pathlib import Path

import pytest

from mediaflow import config
from mediaflow.config import RuntimeConfig


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch):
    path = tmp_path / "configuration.json"
    monkeypatch.setenv("MEDIAFLOW_CONFIG", str(path))
    return path


def test_defaults_when_file_is_missing(config_file, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    assert config.get_mediaflow_config() == {}
    assert config.get_preferred_model() == config.DEFAULT_MODEL
    assert config.get_fallback_model() == config.DEFAULT_FALLBACK_MODEL
    assert config.get_api_key() is None
    assert config.get_ffmpeg_binary() == "ffmpeg"


def test_values_are_read_from_file(config_file, monkeypatch, tmp_path):
    config_file.write_text(
        json.dumps(
            {
                "llm": {
                    "model": "openai/gpt-4o-mini",
                    "fallback_model": None,
                    "api_key_env_var": "OPENAI_API_KEY",
                    "max_tokens": 512,
                },
                "media": {"ffmpeg": "/opt/ffmpeg", "http_timeout": 5},
                "storage_path": str(tmp_path / "store"),
            }
        )
    )
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    runtime_config = RuntimeConfig()

    assert runtime_config.model == "openai/gpt-4o-mini"
    assert runtime_config.fallback_model is None
    assert runtime_config.api_key == "sk-test"
    assert runtime_config.max_tokens == 512
    assert runtime_config.ffmpeg == "/opt/ffmpeg"
    assert runtime_config.http_timeout == 5.0
    assert runtime_config.storage_path == tmp_path / "store"


def test_unreadable_file_is_treated_as_empty(config_file):
    config_file.write_text("{broken")

    assert config.get_mediaflow_config() == {}
