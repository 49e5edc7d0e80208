"""Client configuration: explicit arguments, environment, YAML file and saved profile."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .logging_config import StructuredLogger

logger = StructuredLogger(__name__)

_PROFILE_ENV = "HOOKCATS_PROFILE_PATH"
_CONFIG_ENV = "HOOKCATS_CONFIG_FILE"
_HOOKCATS_DIR = Path.home() / ".hookcats"
_PROFILE_DEFAULT = _HOOKCATS_DIR / "profile.json"
_CONFIG_DEFAULT = _HOOKCATS_DIR / "config.yaml"
_PROFILE_KEYS = ("base_url", "api_key", "token", "scope", "team_id")

DEFAULT_BASE_URL = "http://127.0.0.1:3000"

_ENV_KEYS = {
    "base_url": "HOOKCATS_BASE_URL",
    "api_key": "HOOKCATS_API_KEY",
    "token": "HOOKCATS_TOKEN",
    "timeout_seconds": "HOOKCATS_TIMEOUT_SECONDS",
    "parallel_endpoint_resolution": "HOOKCATS_PARALLEL_RESOLUTION",
    "log_level": "HOOKCATS_LOG_LEVEL",
    "log_format": "HOOKCATS_LOG_FORMAT",
}


def normalize_base_url(base_url: str | None) -> str:
    raw = (base_url or DEFAULT_BASE_URL).strip().rstrip("/")
    parsed = urlparse(raw)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("HookCats base URL must be an absolute URL, e.g. https://hooks.example.com")
    if raw.endswith("/api"):
        return raw
    return f"{raw}/api"


class ClientSettings(BaseModel):
    base_url: str = Field(DEFAULT_BASE_URL, validate_default=True)
    api_key: str | None = None
    token: str | None = None
    timeout_seconds: float = Field(30.0, gt=0)
    parallel_endpoint_resolution: bool = False
    log_level: str = "WARNING"
    log_format: str = "json"

    @field_validator("base_url")
    def validate_base_url(cls, v):
        return normalize_base_url(v)

    @field_validator("api_key", "token")
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("log_level")
    def validate_log_level(cls, v):
        level = str(v).strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level '{v}'")
        return level

    @field_validator("log_format")
    def validate_log_format(cls, v):
        fmt = str(v).strip().lower()
        if fmt not in ("json", "rich"):
            raise ValueError(f"Unknown log format '{v}', expected json or rich")
        return fmt


# --- Profile (login state + scope selection) ---

def profile_path() -> Path:
    raw = (os.getenv(_PROFILE_ENV) or "").strip()
    if raw:
        return Path(raw).expanduser()
    return _PROFILE_DEFAULT


def load_profile() -> dict[str, Any]:
    path = profile_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable profile", path=str(path), error=str(exc))
        return {}
    if not isinstance(data, dict):
        return {}
    return {key: data[key] for key in _PROFILE_KEYS if data.get(key) not in (None, "")}


def save_profile(updates: Mapping[str, Any]) -> Path:
    """Merge ``updates`` into the profile file. A ``None`` value removes the key."""
    path = profile_path()
    current = load_profile()
    for key, value in updates.items():
        if key not in _PROFILE_KEYS:
            raise ConfigError(f"Unknown profile key '{key}'")
        if value is None:
            current.pop(key, None)
        else:
            current[key] = value
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(current, ensure_ascii=True, indent=2, sort_keys=True) + "\n"
    with open(path, "w", encoding="utf-8") as fp:
        fp.write(text)
    try:
        os.chmod(path, 0o600)
    except OSError:
        pass
    return path


# --- YAML config file ---

def config_file_path() -> Path:
    raw = (os.getenv(_CONFIG_ENV) or "").strip()
    if raw:
        return Path(raw).expanduser()
    return _CONFIG_DEFAULT


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    path = path or config_file_path()
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid configuration file {path}: {exc}") from exc
    if raw_data is None:
        return {}
    if not isinstance(raw_data, dict):
        raise ConfigError(f"Invalid configuration file {path}: expected a mapping")
    logger.debug("Loaded configuration file", path=str(path), keys=sorted(raw_data))
    return raw_data


def _env_values() -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, env_name in _ENV_KEYS.items():
        raw = (os.getenv(env_name) or "").strip()
        if not raw:
            continue
        if key == "parallel_endpoint_resolution":
            values[key] = raw.lower() in ("1", "true", "yes", "on")
        else:
            values[key] = raw
    return values


def load_settings(**overrides: Any) -> ClientSettings:
    """Resolve settings: overrides > environment > config file > profile > defaults."""
    profile = load_profile()
    merged: dict[str, Any] = {
        key: profile[key] for key in ("base_url", "api_key", "token") if key in profile
    }
    merged.update(load_config_file())
    merged.update(_env_values())
    merged.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return ClientSettings(**merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid HookCats settings: {exc}") from exc
