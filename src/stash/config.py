"""
Configuration for stash.

Read-only; the file lives at ``$XDG_CONFIG_HOME/stash/config.toml``::

    [notes]
    dir = "~/notes"

    [ai]
    api_key = "sk-..."
    model = "gpt-4o-mini"
    base_url = "https://api.openai.com/v1"
    timeout = 10.0

Environment:
    STASH_HOME      notes directory when ``[notes] dir`` is not set
    OPENAI_API_KEY  API key when ``[ai] api_key`` is not set
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from stash.errors import ConfigError

DEFAULT_CONFIG_HOME = Path.home() / ".config"
DEFAULT_NOTES_DIR = Path.home() / ".stash" / "notes"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class StashConfig:
    notes_dir: Path = DEFAULT_NOTES_DIR
    api_key: str | None = None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT


def get_config_path() -> Path:
    """Get the path to config.toml (XDG_CONFIG_HOME/stash/config.toml)."""
    base = Path(os.environ.get("XDG_CONFIG_HOME") or DEFAULT_CONFIG_HOME)
    return base / "stash" / "config.toml"


def get_notes_dir() -> Path:
    """Get the notes directory from STASH_HOME, else the default."""
    if env_home := os.environ.get("STASH_HOME"):
        return Path(env_home).expanduser()
    return DEFAULT_NOTES_DIR


def _get(table: dict[str, Any], key: str, kind: type | tuple[type, ...], section: str) -> Any:
    value = table.get(key)
    if value is not None and (not isinstance(value, kind) or isinstance(value, bool)):
        raise ConfigError(f"[{section}] {key} has the wrong type: {value!r}")
    return value


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    table = data.get(name, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{name}] must be a table")
    return table


def load_config(path: Path | None = None) -> StashConfig:
    """
    Load configuration from config.toml.

    Returns defaults (plus environment overrides) if the file doesn't exist.
    """
    path = Path(path) if path is not None else get_config_path()
    data: dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"cannot read {path}: {exc}") from exc

    notes = _section(data, "notes")
    ai = _section(data, "ai")

    notes_dir = _get(notes, "dir", str, "notes")
    timeout = _get(ai, "timeout", (int, float), "ai")

    return StashConfig(
        notes_dir=Path(notes_dir).expanduser() if notes_dir else get_notes_dir(),
        api_key=_get(ai, "api_key", str, "ai") or os.environ.get("OPENAI_API_KEY") or None,
        model=_get(ai, "model", str, "ai") or DEFAULT_MODEL,
        base_url=_get(ai, "base_url", str, "ai") or DEFAULT_BASE_URL,
        timeout=float(timeout) if timeout is not None else DEFAULT_TIMEOUT,
    )
