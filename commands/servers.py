"""Typer commands managing Vultr servers."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import questionary
import typer
from rich.console import Console

from services.providers import build_client
from ui.formatters import (
    bandwidth_table,
    iso_status_table,
    os_table,
    server_detail_table,
    servers_table,
)
from vultrctl_core import resolve_config
from vultrlib import Client, ServerOptions, VultrError

logger = logging.getLogger(__name__)

app = typer.Typer(help="Manage Vultr servers")


def register(app_root: typer.Typer) -> None:
    """Attach server subcommands to the CLI."""

    app_root.add_typer(app, name="servers")


def _load_client() -> Client:
    config = resolve_config(interactive=sys.stdin.isatty())
    try:
        return build_client(config)
    except ValueError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1)


@contextmanager
def _api_call(action: str) -> Iterator[None]:
    """Turn API and validation errors into a red message and exit code 1."""

    try:
        yield
    except (VultrError, ValueError) as exc:
        logger.debug("Command failed", extra={"action": action}, exc_info=exc)
        typer.secho(f"Failed to {action}: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


@app.command("list")
def list_servers(
    tag: Optional[str] = typer.Option(None, "--tag", help="Only list servers carrying this tag"),
) -> None:
    """List servers on the account."""

    client = _load_client()
    with _api_call("list servers"):
        servers = client.servers.get_by_tag(tag) if tag else client.servers.get_all()
    if not servers:
        typer.secho("No servers found", fg=typer.colors.YELLOW)
        return
    Console().print(servers_table(servers))


@app.command("show")
def show_server(server_id: str = typer.Argument(..., help="Server SUBID")) -> None:
    """Show details of a single server."""

    client = _load_client()
    with _api_call("fetch server"):
        server = client.servers.get(server_id)
    Console().print(server_detail_table(server))


@app.command("create")
def create_server(
    name: str = typer.Option(..., "--name", help="Server label"),
    region_id: int = typer.Option(..., "--region", help="Region (DCID)"),
    plan_id: int = typer.Option(..., "--plan", help="Plan (VPSPLANID)"),
    os_id: int = typer.Option(..., "--os", help="Operating system (OSID)"),
    ipxe_chain_url: str = typer.Option("", "--ipxe-url", help="iPXE chain URL to boot from"),
    iso: int = typer.Option(0, "--iso", help="ISO to mount (ISOID)"),
    script: int = typer.Option(0, "--script", help="Startup script (SCRIPTID)"),
    user_data_file: Optional[Path] = typer.Option(None, "--user-data-file", help="File with user data"),
    snapshot: str = typer.Option("", "--snapshot", help="Snapshot to restore (SNAPSHOTID)"),
    ssh_key: str = typer.Option("", "--ssh-key", help="SSH key to install (SSHKEYID)"),
    ipv6: bool = typer.Option(False, "--ipv6", help="Enable IPv6"),
    private_networking: bool = typer.Option(False, "--private-networking", help="Enable private networking"),
    auto_backups: bool = typer.Option(False, "--auto-backups", help="Enable automatic backups"),
    notify: bool = typer.Option(True, "--notify/--no-notify", help="Send the activation e-mail"),
) -> None:
    """Create a new server."""

    user_data = ""
    if user_data_file is not None:
        try:
            user_data = user_data_file.read_text(encoding="utf-8")
        except OSError as exc:
            typer.secho(f"Failed to read user data: {exc}", fg=typer.colors.RED)
            raise typer.Exit(code=1)

    options = ServerOptions(
        ipxe_chain_url=ipxe_chain_url,
        iso=iso,
        script=script,
        user_data=user_data,
        snapshot=snapshot,
        ssh_key=ssh_key,
        ipv6=ipv6,
        private_networking=private_networking,
        auto_backups=auto_backups,
        dont_notify_on_activate=not notify,
    )

    client = _load_client()
    with _api_call("create server"):
        server = client.servers.create(name, region_id, plan_id, os_id, options)
    typer.secho(f"Server {server.name} created with SUBID {server.id}", fg=typer.colors.GREEN)


@app.command("rename")
def rename_server(
    server_id: str = typer.Argument(..., help="Server SUBID"),
    name: str = typer.Argument(..., help="New label"),
) -> None:
    """Change the label of a server."""

    client = _load_client()
    with _api_call("rename server"):
        client.servers.rename(server_id, name)
    typer.secho(f"Server {server_id} renamed to {name}", fg=typer.colors.GREEN)


def _power_command(action: str, past_tense: str, help_text: str) -> None:
    def command(server_id: str = typer.Argument(..., help="Server SUBID")) -> None:
        client = _load_client()
        with _api_call(f"{action} server"):
            getattr(client.servers, action)(server_id)
        typer.secho(f"Server {server_id} {past_tense}", fg=typer.colors.GREEN)

    command.__doc__ = help_text
    app.command(action)(command)


_power_command("start", "started", "Start a server.")
_power_command("halt", "halted", "Halt a server.")
_power_command("reboot", "rebooted", "Reboot a server.")
_power_command("reinstall", "is being reinstalled", "Reinstall the operating system of a server.")


@app.command("os-change")
def change_os(
    server_id: str = typer.Argument(..., help="Server SUBID"),
    os_id: int = typer.Argument(..., help="Target operating system (OSID)"),
) -> None:
    """Switch a server to another operating system."""

    client = _load_client()
    with _api_call("change operating system"):
        client.servers.change_os(server_id, os_id)
    typer.secho(f"Server {server_id} is switching to OS {os_id}", fg=typer.colors.GREEN)


@app.command("os-list")
def list_os_changes(server_id: str = typer.Argument(..., help="Server SUBID")) -> None:
    """List operating systems a server can switch to."""

    client = _load_client()
    with _api_call("list operating systems"):
        systems = client.servers.list_os_changes(server_id)
    Console().print(os_table(systems))


@app.command("iso-attach")
def attach_iso(
    server_id: str = typer.Argument(..., help="Server SUBID"),
    iso_id: int = typer.Argument(..., help="ISO to attach (ISOID)"),
) -> None:
    """Attach an ISO to a server."""

    client = _load_client()
    with _api_call("attach ISO"):
        client.servers.attach_iso(server_id, iso_id)
    typer.secho(f"ISO {iso_id} attached to server {server_id}", fg=typer.colors.GREEN)


@app.command("iso-detach")
def detach_iso(server_id: str = typer.Argument(..., help="Server SUBID")) -> None:
    """Detach the ISO currently attached to a server."""

    client = _load_client()
    with _api_call("detach ISO"):
        client.servers.detach_iso(server_id)
    typer.secho(f"ISO detached from server {server_id}", fg=typer.colors.GREEN)


@app.command("iso-status")
def iso_status(server_id: str = typer.Argument(..., help="Server SUBID")) -> None:
    """Show the ISO attachment state of a server."""

    client = _load_client()
    with _api_call("fetch ISO status"):
        status = client.servers.iso_status(server_id)
    Console().print(iso_status_table(status))


@app.command("delete")
def delete_server(
    server_id: str = typer.Argument(..., help="Server SUBID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Destroy a server. All data on it is lost."""

    if not yes and not questionary.confirm(
        f"Destroy server {server_id}? This cannot be undone.",
        default=False,
    ).ask():
        typer.secho("Operation cancelled", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)

    client = _load_client()
    with _api_call("delete server"):
        client.servers.delete(server_id)
    typer.secho(f"Server {server_id} deleted", fg=typer.colors.GREEN)


@app.command("bandwidth")
def bandwidth(server_id: str = typer.Argument(..., help="Server SUBID")) -> None:
    """Show daily bandwidth usage of a server."""

    client = _load_client()
    with _api_call("fetch bandwidth"):
        records = client.servers.bandwidth(server_id)
    if not records:
        typer.secho("No bandwidth data available", fg=typer.colors.YELLOW)
        return
    Console().print(bandwidth_table(records))
