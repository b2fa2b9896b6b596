"""Error taxonomy raised by the Vultr API binding."""

from __future__ import annotations

from typing import Any


class VultrError(Exception):
    """Base class for every error raised by ``vultrlib``."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(VultrError):
    """Represents a failed HTTP exchange with the Vultr API."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(VultrError):
    """A response body could not be turned into the expected structure."""


class MalformedPayload(DecodeError):
    """The top-level JSON document is unparseable or has the wrong shape."""


class FieldCoercionError(DecodeError):
    """A present field value cannot be parsed as its numeric type."""

    def __init__(self, field: str, value: Any, target: type) -> None:
        super().__init__(
            f"Field {field!r} holds {value!r}, which is not a valid {target.__name__}"
        )
        self.field = field
        self.value = value
        self.target = target
