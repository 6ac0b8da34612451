"""Shared mediaflow configuration utilities.

Reads ~/.mediaflow/configuration.json (or the file named by the
MEDIAFLOW_CONFIG environment variable) so the CLI, the runtime and the
processors share one implementation.

Example configuration::

    {
      "llm": {
        "model": "gemini/gemini-2.5-flash",
        "fallback_model": "gemini/gemini-2.5-flash-lite",
        "api_key_env_var": "GEMINI_API_KEY",
        "max_tokens": 2048
      },
      "media": {"ffmpeg": "/usr/bin/ffmpeg", "http_timeout": 30},
      "storage_path": "~/.mediaflow/storage"
    }
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_MODEL = "gemini/gemini-2.5-flash"
DEFAULT_FALLBACK_MODEL = "gemini/gemini-2.5-flash-lite"
DEFAULT_API_KEY_ENV_VAR = "GEMINI_API_KEY"
DEFAULT_MAX_TOKENS = 2048
DEFAULT_HTTP_TIMEOUT = 30.0

# ---------------------------------------------------------------------------
# Low-level config file access
# ---------------------------------------------------------------------------

MEDIAFLOW_HOME = Path.home() / ".mediaflow"
MEDIAFLOW_CONFIG_FILE = MEDIAFLOW_HOME / "configuration.json"


def get_config_path() -> Path:
    """Return the active configuration file path."""
    override = os.environ.get("MEDIAFLOW_CONFIG")
    return Path(override).expanduser() if override else MEDIAFLOW_CONFIG_FILE


def get_mediaflow_config() -> dict[str, Any]:
    """Load the configuration file, returning {} when missing or unreadable."""
    path = get_config_path()
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8-sig") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


# ---------------------------------------------------------------------------
# Derived helpers
# ---------------------------------------------------------------------------


def get_preferred_model() -> str:
    """Return the LiteLLM model string used by llm nodes."""
    return get_mediaflow_config().get("llm", {}).get("model", DEFAULT_MODEL)


def get_fallback_model() -> str | None:
    """Return the model tried when the preferred one is unavailable."""
    return get_mediaflow_config().get("llm", {}).get("fallback_model", DEFAULT_FALLBACK_MODEL)


def get_max_tokens() -> int:
    return get_mediaflow_config().get("llm", {}).get("max_tokens", DEFAULT_MAX_TOKENS)


def get_api_key() -> str | None:
    """Return the API key from the environment variable named in configuration."""
    llm = get_mediaflow_config().get("llm", {})
    return os.environ.get(llm.get("api_key_env_var") or DEFAULT_API_KEY_ENV_VAR)


def get_http_timeout() -> float:
    return float(get_mediaflow_config().get("media", {}).get("http_timeout", DEFAULT_HTTP_TIMEOUT))


def get_ffmpeg_binary() -> str:
    return get_mediaflow_config().get("media", {}).get("ffmpeg", "ffmpeg")


def get_ffprobe_binary() -> str:
    return get_mediaflow_config().get("media", {}).get("ffprobe", "ffprobe")


def get_storage_path() -> Path:
    """Return the base directory for saved workflows and run history."""
    configured = get_mediaflow_config().get("storage_path")
    return Path(configured).expanduser() if configured else MEDIAFLOW_HOME / "storage"


# ---------------------------------------------------------------------------
# RuntimeConfig – shared by the processors and the CLI
# ---------------------------------------------------------------------------


@dataclass
class RuntimeConfig:
    """Processor and storage settings loaded from the configuration file."""

    model: str = field(default_factory=get_preferred_model)
    fallback_model: str | None = field(default_factory=get_fallback_model)
    temperature: float = 0.7
    max_tokens: int = field(default_factory=get_max_tokens)
    api_key: str | None = field(default_factory=get_api_key)
    api_base: str | None = None
    http_timeout: float = field(default_factory=get_http_timeout)
    ffmpeg: str = field(default_factory=get_ffmpeg_binary)
    ffprobe: str = field(default_factory=get_ffprobe_binary)
    storage_path: Path = field(default_factory=get_storage_path)
