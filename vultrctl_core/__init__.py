"""Core helpers used by the vultrctl CLI."""

from .config import (
    DEFAULT_ENDPOINT,
    AppConfig,
    resolve_config,
    resolve_config_path,
    save_config_to_ini,
    with_overrides,
)

__all__ = [
    "DEFAULT_ENDPOINT",
    "AppConfig",
    "resolve_config",
    "resolve_config_path",
    "save_config_to_ini",
    "with_overrides",
]
