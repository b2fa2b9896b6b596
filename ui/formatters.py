"""Formatting helpers for rich-rendered CLI output."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Sequence

from rich import box
from rich.table import Table

from vultrlib.decoding import NIL_TEXT

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from vultrctl_core import AppConfig
    from vultrlib import OS, BandwidthRecord, ISOStatus, Server

_SECRET_PLACEHOLDER = "•••••"


def config_summary_table(config: "AppConfig") -> Table:
    """Return a Rich table summarising the current application configuration."""

    table = Table(title="Configuration", box=box.ROUNDED, show_header=False)
    table.add_column("Key", style="bold cyan")
    table.add_column("Value", overflow="fold")

    table.add_row("Vultr API key", _format_config_value(config.api_key, True))
    table.add_row("API endpoint", config.base_url)
    return table


def servers_table(servers: Iterable["Server"]) -> Table:
    """Return a table with one row per server."""

    table = Table(title="Servers", box=box.ROUNDED)
    table.add_column("SUBID", style="bold cyan", no_wrap=True)
    table.add_column("Label")
    table.add_column("Main IP", no_wrap=True)
    table.add_column("Status")
    table.add_column("Location")
    table.add_column("vCPUs", justify="right")
    table.add_column("RAM")
    table.add_column("Tag")

    for server in servers:
        table.add_row(
            server.id,
            _display(server.name),
            _display(server.main_ip),
            f"{_display(server.status)} / {_display(server.power_status)}",
            _display(server.location),
            str(server.vcpus),
            _display(server.ram),
            _display(server.tag),
        )
    return table


def server_detail_table(server: "Server") -> Table:
    """Return a two-column table describing a single server."""

    table = Table(title=f"Server {server.id}", box=box.ROUNDED, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")

    rows: Sequence[tuple[str, str]] = (
        ("Label", server.name),
        ("OS", server.os),
        ("RAM", server.ram),
        ("Disk", server.disk),
        ("vCPUs", str(server.vcpus)),
        ("Main IP", server.main_ip),
        ("Netmask / gateway", f"{_display(server.netmask_v4)} / {_display(server.gateway_v4)}"),
        ("Internal IP", server.internal_ip),
        ("Location", f"{_display(server.location)} (DCID {server.region_id})"),
        ("Plan", str(server.plan_id)),
        ("Status", server.status),
        ("Power", server.power_status),
        ("State", server.server_state),
        ("Created", server.created),
        ("Cost per month", server.cost),
        ("Pending charges", f"{server.pending_charges:.2f}"),
        ("Bandwidth (GB)", f"{server.current_bandwidth:g} / {server.allowed_bandwidth:g}"),
        ("Auto backups", server.auto_backups),
        ("Tag", server.tag),
    )
    for label, value in rows:
        table.add_row(label, _display(value))
    for network in server.v6_networks:
        table.add_row(
            "IPv6",
            f"{network.main_ip} ({network.network}/{network.network_size})",
        )
    return table


def bandwidth_table(records: Iterable["BandwidthRecord"]) -> Table:
    """Return a table listing daily incoming and outgoing traffic."""

    table = Table(title="Bandwidth", box=box.ROUNDED)
    table.add_column("Date", style="bold cyan", no_wrap=True)
    table.add_column("Incoming bytes", justify="right")
    table.add_column("Outgoing bytes", justify="right")
    for record in records:
        table.add_row(record.date, record.incoming or "-", record.outgoing or "-")
    return table


def os_table(systems: Iterable["OS"]) -> Table:
    """Return a table of operating systems."""

    table = Table(title="Operating systems", box=box.ROUNDED)
    table.add_column("OSID", style="bold cyan", justify="right")
    table.add_column("Name")
    table.add_column("Arch")
    table.add_column("Family")
    table.add_column("Surcharge", justify="right")
    for item in systems:
        table.add_row(str(item.id), item.name, _display(item.arch), _display(item.family), _display(item.surcharge))
    return table


def iso_status_table(status: "ISOStatus") -> Table:
    table = Table(box=box.ROUNDED, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("State", _display(status.state))
    table.add_row("ISOID", _display(status.iso_id))
    return table


def _display(value: str) -> str:
    """Return value for display, dimming fields the API did not send."""

    if not value or value == NIL_TEXT:
        return "[dim]n/a[/dim]"
    return value


def _format_config_value(value: str | None, secret: bool) -> str:
    """Return formatted configuration value for display."""

    if not value:
        return "[dim]n/a[/dim]"
    if secret:
        return _SECRET_PLACEHOLDER
    return value
