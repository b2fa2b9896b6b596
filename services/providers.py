"""Factory helpers for constructing service implementations from configuration."""

from __future__ import annotations

from requests import Session

from vultrctl_core import AppConfig
from vultrlib import Client


def build_client(config: AppConfig, *, session: Session | None = None) -> Client:
    """Instantiate a Vultr API client matching application configuration."""

    if not config.api_key:
        raise ValueError("Vultr API key not configured")
    return Client(config.api_key, base_url=config.base_url, session=session)
