"""Operating system entries offered by the Vultr API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from . import decoding


@dataclass(frozen=True, slots=True)
class OS:
    """An operating system a server can be installed with."""

    id: int
    name: str
    arch: str
    family: str
    windows: bool
    surcharge: str


def decode_os(raw: bytes | str | Mapping[str, Any]) -> OS:
    fields = decoding.parse_payload(raw)
    return OS(
        id=decoding.integer(fields, "OSID"),
        name=decoding.text(fields, "name"),
        arch=decoding.text(fields, "arch"),
        family=decoding.text(fields, "family"),
        windows=decoding.boolean(fields, "windows"),
        surcharge=decoding.text(fields, "surcharge"),
    )


def decode_os_map(raw: bytes | str) -> list[OS]:
    """Decode an object keyed by OSID into a list of :class:`OS` entries."""

    return [decode_os(item) for item in decoding.keyed_values(decoding.load_json(raw))]

