"""Server (virtual machine) entities and the operations acting on them."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

from . import decoding
from .decoding import render
from .exceptions import MalformedPayload
from .operating_systems import OS, decode_os_map

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .client import Client

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class V6Network:
    """IPv6 network assigned to a server."""

    network: str
    main_ip: str
    network_size: str


@dataclass(frozen=True, slots=True)
class Server:
    """A virtual machine on the Vultr account.

    Text fields hold whatever the API sent rendered as a string; a field the
    API omitted or sent as ``null`` holds :data:`vultrlib.decoding.NIL_TEXT`.
    Numeric fields are always numbers, with missing values read as zero.
    """

    id: str
    name: str
    os: str
    ram: str
    disk: str
    main_ip: str
    vcpus: int
    location: str
    region_id: int
    default_password: str
    created: str
    pending_charges: float
    status: str
    cost: str
    current_bandwidth: float
    allowed_bandwidth: float
    netmask_v4: str
    gateway_v4: str
    power_status: str
    server_state: str
    plan_id: int
    v6_networks: tuple[V6Network, ...]
    internal_ip: str
    kvm_url: str
    auto_backups: str
    tag: str


@dataclass(frozen=True, slots=True)
class ISOStatus:
    """ISO image attachment state of a server."""

    state: str
    iso_id: str


@dataclass(frozen=True, slots=True)
class BandwidthRecord:
    """Incoming and outgoing traffic of a server for one day."""

    date: str
    incoming: Optional[str]
    outgoing: Optional[str] = None

    def to_dict(self) -> dict[str, str]:
        """Return the record as a mapping, leaving out an unset ``outgoing`` value."""

        result = {"date": self.date}
        if self.incoming is not None:
            result["incoming"] = self.incoming
        if self.outgoing is not None:
            result["outgoing"] = self.outgoing
        return result


@dataclass(slots=True)
class ServerOptions:
    """Optional parameters used during server creation."""

    ipxe_chain_url: str = ""
    iso: int = 0
    script: int = 0
    user_data: str = ""
    snapshot: str = ""
    ssh_key: str = ""
    ipv6: bool = False
    private_networking: bool = False
    auto_backups: bool = False
    dont_notify_on_activate: bool = False

    def to_form(self) -> dict[str, str]:
        """Return the form values these options add to a create request."""

        values: dict[str, str] = {}
        if self.ipxe_chain_url:
            values["ipxe_chain_url"] = self.ipxe_chain_url
        if self.iso:
            values["ISOID"] = str(self.iso)
        if self.script:
            values["SCRIPTID"] = str(self.script)
        if self.user_data:
            values["userdata"] = base64.b64encode(self.user_data.encode("utf-8")).decode("ascii")
        if self.snapshot:
            values["SNAPSHOTID"] = self.snapshot
        if self.ssh_key:
            values["SSHKEYID"] = self.ssh_key
        values["enable_ipv6"] = _yes_no(self.ipv6)
        values["enable_private_network"] = _yes_no(self.private_networking)
        values["auto_backups"] = _yes_no(self.auto_backups)
        values["notify_activate"] = _yes_no(not self.dont_notify_on_activate)
        return values


def decode_server(raw: bytes | str | Mapping[str, Any]) -> Server:
    """Build a :class:`Server` from a raw server object.

    Raises :class:`~vultrlib.exceptions.MalformedPayload` when ``raw`` is not
    a JSON object and :class:`~vultrlib.exceptions.FieldCoercionError` when a
    numeric field holds something that is not a number.
    """

    fields = decoding.parse_payload(raw)

    def text(key: str) -> str:
        return decoding.text(fields, key)

    return Server(
        id=text("SUBID"),
        name=text("label"),
        os=text("os"),
        ram=text("ram"),
        disk=text("disk"),
        main_ip=text("main_ip"),
        vcpus=decoding.integer(fields, "vcpu_count"),
        location=text("location"),
        region_id=decoding.integer(fields, "DCID"),
        default_password=text("default_password"),
        created=text("date_created"),
        pending_charges=decoding.number(fields, "pending_charges"),
        status=text("status"),
        cost=text("cost_per_month"),
        current_bandwidth=decoding.number(fields, "current_bandwidth_gb"),
        allowed_bandwidth=decoding.number(fields, "allowed_bandwidth_gb"),
        netmask_v4=text("netmask_v4"),
        gateway_v4=text("gateway_v4"),
        power_status=text("power_status"),
        server_state=text("server_state"),
        plan_id=decoding.integer(fields, "VPSPLANID"),
        v6_networks=_decode_v6_networks(decoding.lookup(fields, "v6_networks")),
        internal_ip=text("internal_ip"),
        kvm_url=text("kvm_url"),
        auto_backups=text("auto_backups"),
        tag=text("tag"),
    )


def decode_server_map(raw: bytes | str) -> list[Server]:
    """Decode a ``server/list`` response keyed by SUBID."""

    return [decode_server(item) for item in decoding.keyed_values(decoding.load_json(raw))]


def decode_iso_status(raw: bytes | str | Mapping[str, Any]) -> ISOStatus:
    fields = decoding.parse_payload(raw)
    return ISOStatus(
        state=decoding.text(fields, "state"),
        iso_id=decoding.text(fields, "ISOID"),
    )


def _decode_v6_networks(value: Any) -> tuple[V6Network, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(
        V6Network(
            network=decoding.text(item, "v6_network"),
            main_ip=decoding.text(item, "v6_main_ip"),
            network_size=decoding.text(item, "v6_network_size"),
        )
        for item in value
        if isinstance(item, dict)
    )


def join_bandwidth(
    incoming: Sequence[Sequence[Any]],
    outgoing: Sequence[Sequence[Any]],
) -> list[BandwidthRecord]:
    """Merge incoming and outgoing ``(date, value)`` series into daily records.

    The incoming series drives the result: one record per incoming entry, in
    incoming order. An outgoing value is attached to the first record with the
    same date. Dates that only appear in the outgoing series are dropped.
    """

    dates: list[str] = []
    incoming_values: list[str] = []
    first_index: dict[str, int] = {}
    for date, value in incoming:
        first_index.setdefault(date, len(dates))
        dates.append(date)
        incoming_values.append(value)

    outgoing_values: dict[int, str] = {}
    for date, value in outgoing:
        index = first_index.get(date)
        if index is not None:
            outgoing_values[index] = value

    return [
        BandwidthRecord(date=date, incoming=incoming_values[index], outgoing=outgoing_values.get(index))
        for index, date in enumerate(dates)
    ]


def decode_bandwidth(raw: bytes | str | Mapping[str, Any]) -> list[BandwidthRecord]:
    """Decode a ``server/bandwidth`` response into joined daily records."""

    fields = decoding.parse_payload(raw)
    return join_bandwidth(
        _decode_series(fields, "incoming_bytes"),
        _decode_series(fields, "outgoing_bytes"),
    )


def _decode_series(fields: Mapping[str, Any], key: str) -> list[tuple[str, str]]:
    series = fields.get(key)
    if series is None:
        return []
    if not isinstance(series, list):
        raise MalformedPayload(f"Bandwidth series {key!r} is not an array")
    result: list[tuple[str, str]] = []
    for entry in series:
        if not isinstance(entry, list) or len(entry) < 2:
            raise MalformedPayload(f"Bandwidth series {key!r} holds an entry that is not a [date, value] pair")
        result.append((render(entry[0]), render(entry[1])))
    return result


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def _require(value: Any, name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValueError(f"{name} is required")
    return text


class ServersClient:
    """Server operations of the Vultr v1 API."""

    def __init__(self, client: "Client") -> None:
        self._client = client

    def get_all(self) -> list[Server]:
        logger.debug("Listing servers")
        return self._client.get("server/list", decode=decode_server_map)

    def get_by_tag(self, tag: str) -> list[Server]:
        tag = _require(tag, "tag")
        logger.debug("Listing servers by tag", extra={"tag": tag})
        return self._client.get("server/list", params={"tag": tag}, decode=decode_server_map)

    def get(self, server_id: str) -> Server:
        server_id = _require(server_id, "server_id")
        logger.debug("Fetching server", extra={"server_id": server_id})
        return self._client.get("server/list", params={"SUBID": server_id}, decode=decode_server)

    def create(
        self,
        name: str,
        region_id: int,
        plan_id: int,
        os_id: int,
        options: ServerOptions | None = None,
    ) -> Server:
        """Create a server and return it with ``name``, ``region_id`` and ``plan_id`` filled in.

        The API only answers with the new SUBID, so every other field of the
        returned entity carries the placeholder text or zero.
        """

        values = {
            "label": name,
            "DCID": str(region_id),
            "VPSPLANID": str(plan_id),
            "OSID": str(os_id),
        }
        if options is not None:
            values.update(options.to_form())

        logger.info(
            "Creating server",
            extra={"server_name": name, "region_id": region_id, "plan_id": plan_id, "os_id": os_id},
        )
        server = self._client.post("server/create", values, decode=decode_server)
        return replace(server, name=name, region_id=region_id, plan_id=plan_id)

    def rename(self, server_id: str, name: str) -> None:
        server_id = _require(server_id, "server_id")
        logger.info("Renaming server", extra={"server_id": server_id, "server_name": name})
        self._client.post("server/label_set", {"SUBID": server_id, "label": name})

    def start(self, server_id: str) -> None:
        self._power_action("start", server_id)

    def halt(self, server_id: str) -> None:
        self._power_action("halt", server_id)

    def reboot(self, server_id: str) -> None:
        self._power_action("reboot", server_id)

    def reinstall(self, server_id: str) -> None:
        self._power_action("reinstall", server_id)

    def change_os(self, server_id: str, os_id: int) -> None:
        server_id = _require(server_id, "server_id")
        logger.info("Changing server OS", extra={"server_id": server_id, "os_id": os_id})
        self._client.post("server/os_change", {"SUBID": server_id, "OSID": str(os_id)})

    def list_os_changes(self, server_id: str) -> list[OS]:
        server_id = _require(server_id, "server_id")
        logger.debug("Listing OS changes", extra={"server_id": server_id})
        return self._client.get("server/os_change_list", params={"SUBID": server_id}, decode=decode_os_map)

    def attach_iso(self, server_id: str, iso_id: int) -> None:
        server_id = _require(server_id, "server_id")
        logger.info("Attaching ISO", extra={"server_id": server_id, "iso_id": iso_id})
        self._client.post("server/iso_attach", {"SUBID": server_id, "ISOID": str(iso_id)})

    def detach_iso(self, server_id: str) -> None:
        server_id = _require(server_id, "server_id")
        logger.info("Detaching ISO", extra={"server_id": server_id})
        self._client.post("server/iso_detach", {"SUBID": server_id})

    def iso_status(self, server_id: str) -> ISOStatus:
        server_id = _require(server_id, "server_id")
        return self._client.get("server/iso_status", params={"SUBID": server_id}, decode=decode_iso_status)

    def delete(self, server_id: str) -> None:
        server_id = _require(server_id, "server_id")
        logger.info("Deleting server", extra={"server_id": server_id})
        self._client.post("server/destroy", {"SUBID": server_id})

    def bandwidth(self, server_id: str) -> list[BandwidthRecord]:
        server_id = _require(server_id, "server_id")
        logger.debug("Fetching bandwidth", extra={"server_id": server_id})
        return self._client.get("server/bandwidth", params={"SUBID": server_id}, decode=decode_bandwidth)

    def _power_action(self, action: str, server_id: str) -> None:
        server_id = _require(server_id, "server_id")
        logger.info("Server power action", extra={"server_id": server_id, "action": action})
        self._client.post(f"server/{action}", {"SUBID": server_id})
