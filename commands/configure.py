"""CLI helpers for managing vultrctl configuration files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import typer

from vultrctl_core import resolve_config_path

app = typer.Typer(help="Manage vultrctl configuration files")

_TEMPLATE = """[vultrctl]
# endpoint = https://api.vultr.com/v1

[vultrctl.secrets]
# api_key =
"""


def register(app_root: typer.Typer) -> None:
    """Attach configuration-related subcommands to the CLI."""

    app_root.add_typer(app, name="config")


@app.command("init")
def init_config(
    path: Optional[Path] = typer.Option(None, "--path", help="Destination for the ini file"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Overwrite when the file already exists"),
) -> None:
    """Create a template configuration file with explanatory comments."""

    destination = (path or resolve_config_path()).expanduser()
    if destination.exists() and not overwrite:
        typer.secho(
            f"Configuration file already exists: {destination}",
            fg=typer.colors.YELLOW,
        )
        raise typer.Exit(code=1)

    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(_TEMPLATE, encoding="ascii")

    try:
        os.chmod(destination, 0o600)
    except (PermissionError, NotImplementedError):  # pragma: no cover - platform specific
        pass

    typer.secho(f"Template saved to {destination}", fg=typer.colors.GREEN)
