"""User configuration persistence and logging setup."""
from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict

from shipbuild.data.paths import get_definitions_path

_DEFAULT_LOG_LEVEL = "WARNING"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

Config = Dict[str, str | None]


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "ShipBuild"
        return Path.home() / "ShipBuild"
    return Path.home() / ".config" / "shipbuild"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def default_config() -> Config:
    return {"log_level": _DEFAULT_LOG_LEVEL, "definitions_path": None}


def _normalize_log_level(value: object) -> str:
    if isinstance(value, str) and value.upper() in _LOG_LEVELS:
        return value.upper()
    return _DEFAULT_LOG_LEVEL


def _normalize_definitions_path(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def load_config(path: Path | None = None) -> Config:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return default_config()
    if not isinstance(raw, dict):
        return default_config()
    return {
        "log_level": _normalize_log_level(raw.get("log_level")),
        "definitions_path": _normalize_definitions_path(raw.get("definitions_path")),
    }


def resolve_definitions_path(config: Config | None = None) -> Path:
    """Return the catalog directory named in config, or the bundled one."""
    return get_definitions_path((config or default_config()).get("definitions_path"))


def save_config(config: Config, path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "log_level": _normalize_log_level(config.get("log_level")),
        "definitions_path": _normalize_definitions_path(config.get("definitions_path")),
    }
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")


def configure_logging(config: Config | None = None) -> None:
    """Route package log records to stdout at the configured level."""
    level_name = _normalize_log_level((config or default_config()).get("log_level"))
    logging.basicConfig(level=getattr(logging, level_name), format=LOG_FORMAT, stream=sys.stdout)
    logging.getLogger("shipbuild").setLevel(level_name)
