"""Subpackage with CLI command implementations for vultrctl."""

from __future__ import annotations

import typer


def register(app: typer.Typer) -> None:
	"""Register all CLI commands on the provided Typer application."""

	from . import configure, servers

	servers.register(app)
	configure.register(app)
