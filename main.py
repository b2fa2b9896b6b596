"""Entry point for the vultrctl CLI."""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from commands import register as register_commands


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _build_app() -> typer.Typer:
    """Create the Typer application with every command registered."""

    application = typer.Typer(help="Manage servers on a Vultr account")

    @application.callback()
    def _root(
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    ) -> None:
        _configure_logging(verbose)

    register_commands(application)
    return application


app = _build_app()


def main() -> None:
    """Execute the Typer application."""

    app()


if __name__ == "__main__":
    main()
