"""Interactive questionary-based menus for the vultrctl CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import questionary
from rich.console import Console

from vultrctl_core import AppConfig, save_config_to_ini, with_overrides
from ui.formatters import config_summary_table

_PROMPT_LOOP_NOTE = (
    "Provide required values. Leave blank to skip or keep the current value."
)


@dataclass(frozen=True)
class _ConfigField:
    """Description of a configuration field prompt."""

    name: str
    label: str
    secret: bool = False
    optional: bool = True

    def message(self, current_value: Optional[str]) -> str:
        """Build a prompt message including optionality hints."""

        suffix = " (optional)" if self.optional else ""
        if self.secret and current_value:
            return f"{self.label}{suffix} - leave blank to keep existing value"
        if current_value:
            return f"{self.label}{suffix} (current: {current_value})"
        return f"{self.label}{suffix}"


_FIELDS: tuple[_ConfigField, ...] = (
    _ConfigField("api_key", "Vultr API key", secret=True, optional=False),
    _ConfigField("endpoint", "API endpoint URL", secret=False),
)


def prompt_app_config(
    config: AppConfig,
    path: Path,
    console: Optional[Console] = None,
) -> AppConfig:
    """Prompt user for configuration values and offer to persist them."""

    console = console or Console()
    console.print("[bold]vultrctl configuration[/bold]")
    console.print(_PROMPT_LOOP_NOTE)

    current = config
    while True:
        overrides: dict[str, Optional[str]] = {}
        for field in _FIELDS:
            overrides[field.name] = _prompt_field(field, current)

        updated = with_overrides(current, **overrides)
        console.print(config_summary_table(updated))
        confirmed = questionary.confirm(
            "Accept the configuration above?",
            default=True,
        ).ask()
        if confirmed:
            break
        console.print("[yellow]Reopening configuration prompts...[/yellow]")
        current = updated

    _maybe_persist_config(updated, path, console)
    return updated


def _prompt_field(field: _ConfigField, config: AppConfig) -> Optional[str]:
    """Prompt user for a single configuration field."""

    current_value = getattr(config, field.name)
    asker: Callable[..., Optional[str]]
    kwargs: dict[str, object] = {}
    if field.secret:
        asker = questionary.password
    else:
        asker = questionary.text
        if current_value:
            kwargs["default"] = current_value

    answer = asker(field.message(current_value), **kwargs).ask()
    if answer is None:
        return current_value

    normalized = answer.strip()
    if normalized == "":
        return current_value if field.secret else None
    return normalized


def _maybe_persist_config(config: AppConfig, path: Path, console: Console) -> None:
    should_save = questionary.confirm(
        f"Save configuration (including the API key) to {path}?",
        default=False,
    ).ask()
    if not should_save:
        return

    try:
        save_config_to_ini(config, path)
    except OSError as exc:
        console.print(f"[yellow][WARN] Failed to save configuration: {exc}[/yellow]")
