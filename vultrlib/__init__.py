"""Client binding for the server endpoints of the Vultr v1 API."""

from __future__ import annotations

from .client import Client
from .exceptions import (
    DecodeError,
    FieldCoercionError,
    MalformedPayload,
    TransportError,
    VultrError,
)
from .operating_systems import OS
from .servers import (
    BandwidthRecord,
    ISOStatus,
    Server,
    ServerOptions,
    V6Network,
    decode_bandwidth,
    decode_server,
    join_bandwidth,
)

__all__ = [
    "BandwidthRecord",
    "Client",
    "DecodeError",
    "FieldCoercionError",
    "ISOStatus",
    "MalformedPayload",
    "OS",
    "Server",
    "ServerOptions",
    "TransportError",
    "V6Network",
    "VultrError",
    "decode_bandwidth",
    "decode_server",
    "join_bandwidth",
]
