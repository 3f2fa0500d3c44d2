# file: kodysu/config.py
"""
Configuration loader.

Design goals:
- No access keys committed to the repo.
- Support `.env` for local development.
- Support YAML for non-secret defaults.
- Validate configuration with pydantic.

Precedence (highest to lowest):
1. OS environment variables
2. `.env` values
3. YAML config file values
4. Code defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, Field, ValidationError
from pydantic import ConfigDict as PydanticConfigDict

from kodysu.errors import KodySuConfigurationError
from kodysu.net.http import HttpClientConfig


class KodySuSettings(BaseModel):
    model_config = PydanticConfigDict(extra="ignore")

    # API
    base_url: str = "https://www.kody.su"
    api_key: str | None = Field(default=None, repr=False)

    # Logging
    log_level: str = "INFO"
    json_logging: bool = False

    # HTTP
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    http_max_retries: int = Field(default=2, ge=0)
    http_backoff_base_seconds: float = 0.5
    http_backoff_max_seconds: float = 8.0
    http_rate_limit_per_host_per_second: float = 0.0
    http_user_agent: str = "kodysu-client/1.0"

    # Cache
    cache_enabled: bool = False
    cache_ttl_seconds: int = 600
    cache_max_entries: int = Field(default=1000, gt=0)

    def http_config(self) -> HttpClientConfig:
        return HttpClientConfig(
            timeout_seconds=self.http_timeout_seconds,
            max_retries=self.http_max_retries,
            backoff_base_seconds=self.http_backoff_base_seconds,
            backoff_max_seconds=self.http_backoff_max_seconds,
            rate_limit_per_host_per_second=self.http_rate_limit_per_host_per_second,
            user_agent=self.http_user_agent,
        )


_ENV_MAP: dict[str, str] = {
    "KODYSU_BASE_URL": "base_url",
    "KODYSU_API_KEY": "api_key",
    "KODYSU_LOG_LEVEL": "log_level",
    "KODYSU_JSON_LOGGING": "json_logging",
    "KODYSU_HTTP_TIMEOUT_SECONDS": "http_timeout_seconds",
    "KODYSU_HTTP_MAX_RETRIES": "http_max_retries",
    "KODYSU_HTTP_BACKOFF_BASE_SECONDS": "http_backoff_base_seconds",
    "KODYSU_HTTP_BACKOFF_MAX_SECONDS": "http_backoff_max_seconds",
    "KODYSU_HTTP_RATE_LIMIT_PER_HOST_PER_SECOND": "http_rate_limit_per_host_per_second",
    "KODYSU_HTTP_USER_AGENT": "http_user_agent",
    "KODYSU_CACHE_ENABLED": "cache_enabled",
    "KODYSU_CACHE_TTL_SECONDS": "cache_ttl_seconds",
    "KODYSU_CACHE_MAX_ENTRIES": "cache_max_entries",
}


def _read_yaml(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        return {}
    # Allow settings to live under a `kodysu:` section of a shared config file.
    section = raw.get("kodysu")
    return section if isinstance(section, dict) else raw


def _read_dotenv(path: Path) -> dict[str, str]:
    # dotenv_values does not mutate os.environ; it just parses the file.
    values = dotenv_values(path)
    return {k: v for k, v in values.items() if isinstance(k, str) and isinstance(v, str)}


def _overlay_env(target: dict[str, Any], env: dict[str, str]) -> None:
    for env_key, field_name in _ENV_MAP.items():
        if env_key in env:
            target[field_name] = env[env_key]


def load_settings(
    *, yaml_path: Path | None = None, env_path: Path | None = None
) -> KodySuSettings:
    """
    Load settings from YAML and .env, with OS env overrides.

    Args:
        yaml_path: Optional YAML config path (falls back to `KODYSU_CONFIG`).
        env_path: Optional .env path (default: `.env` if present).

    Raises:
        KodySuConfigurationError: if the merged values fail validation.
    """

    data: dict[str, Any] = {}

    if env_path is None:
        maybe = Path(".env")
        env_path = maybe if maybe.exists() else None

    dotenv = _read_dotenv(env_path) if env_path is not None and env_path.exists() else {}

    if yaml_path is None:
        cfg = os.environ.get("KODYSU_CONFIG") or dotenv.get("KODYSU_CONFIG")
        if cfg:
            yaml_path = Path(cfg)

    if yaml_path is not None and yaml_path.exists():
        data.update(_read_yaml(yaml_path))

    if dotenv:
        _overlay_env(data, dotenv)

    os_env = {k: v for k, v in os.environ.items() if k in _ENV_MAP}
    _overlay_env(data, os_env)

    try:
        return KodySuSettings.model_validate(data)
    except ValidationError as exc:
        raise KodySuConfigurationError(f"Invalid kody.su settings: {exc}") from exc
