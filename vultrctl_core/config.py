"""Application configuration management for the vultrctl CLI."""

from __future__ import annotations

import configparser
import os
from contextlib import suppress
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError, field_validator

DEFAULT_ENDPOINT = "https://api.vultr.com/v1"


class _EnvConfig(BaseModel):
    """Validation schema for environment-provided configuration values."""

    api_key: Optional[str] = None
    endpoint: Optional[str] = None

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.startswith(("http://", "https://")):
            raise ValueError("endpoint must be an http(s) URL")
        return value


@dataclass(slots=True)
class AppConfig:
    """Application configuration resolved at runtime."""

    api_key: Optional[str]
    endpoint: Optional[str] = None

    @property
    def base_url(self) -> str:
        return self.endpoint or DEFAULT_ENDPOINT

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load configuration from environment variables."""
        try:
            data = _EnvConfig(
                api_key=_get_env("VULTR_API_KEY"),
                endpoint=_get_env("VULTR_ENDPOINT"),
            )
        except ValidationError as exc:
            raise RuntimeError("Failed to validate environment configuration") from exc
        return cls(**data.model_dump())

    @classmethod
    def from_sources(cls, *, ini_path: Path | None = None) -> "AppConfig":
        """Load configuration from ini file and environment variables."""

        merged: dict[str, Optional[str]] = {}
        if ini_path and ini_path.exists():
            merged.update(_load_ini_values(ini_path))

        env_config = cls.from_env()
        for field in _CONFIG_FIELDS:
            value = getattr(env_config, field)
            if value is not None:
                merged[field] = value

        return cls(**{name: merged.get(name) for name in _CONFIG_FIELDS})


def resolve_config_path() -> Path:
    """Resolve configuration file path, honoring environment overrides."""

    override = os.getenv("VULTRCTL_CONFIG_PATH")
    if override:
        return Path(override).expanduser()
    return Path("~/.config/vultrctl/config.ini").expanduser()


def resolve_config(
    interactive: bool = True,
    *,
    config_path: Path | None = None,
) -> AppConfig:
    """Build application configuration, prompting for the API key when it is missing."""

    path = config_path or resolve_config_path()
    config = AppConfig.from_sources(ini_path=path)
    if not interactive or config.api_key:
        return config

    from ui.menus import prompt_app_config  # Imported lazily to avoid cycles

    return prompt_app_config(config, path)


def with_overrides(config: AppConfig, **overrides: Optional[str]) -> AppConfig:
    """Return new configuration instance with the provided field overrides."""

    return replace(config, **overrides)


def save_config_to_ini(config: AppConfig, path: Path) -> None:
    """Persist configuration values to an ini file, separating secrets."""

    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str  # Preserve field case

    general: dict[str, str] = {}
    secrets: dict[str, str] = {}

    for field in _CONFIG_FIELDS:
        value = getattr(config, field)
        if not value:
            continue
        target = secrets if field in _SENSITIVE_FIELDS else general
        target[field] = value

    parser[CONFIG_SECTION] = general
    if secrets:
        parser[SECRETS_SECTION] = secrets

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        parser.write(handle)

    with suppress(PermissionError, NotImplementedError):
        os.chmod(path, 0o600)


def _get_env(key: str) -> Optional[str]:
    """Return environment variable value with blank strings normalized to None."""
    value = os.getenv(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


CONFIG_SECTION = "vultrctl"
SECRETS_SECTION = "vultrctl.secrets"
_CONFIG_FIELDS = (
    "api_key",
    "endpoint",
)
_SENSITIVE_FIELDS = {
    "api_key",
}


def _load_ini_values(path: Path) -> dict[str, Optional[str]]:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str
    if not parser.read(path, encoding="utf-8"):
        return {}

    values: dict[str, Optional[str]] = {}
    for field in _CONFIG_FIELDS:
        section = SECRETS_SECTION if field in _SENSITIVE_FIELDS else CONFIG_SECTION
        if parser.has_option(section, field):
            raw = parser.get(section, field)
            values[field] = raw.strip() or None
    return values
