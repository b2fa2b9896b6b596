"""Minimal HTTP client for the Vultr v1 API."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, TypeVar

import requests
from requests import Response, Session
from requests import exceptions as requests_exceptions

from .decoding import load_json
from .exceptions import TransportError
from .servers import ServersClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

Decoder = Callable[[bytes], T]


class Client:
    """Authenticated transport shared by the resource clients.

    ``get`` and ``post`` return the decoded JSON body. When a ``decode``
    callable is supplied it receives the raw response bytes instead and its
    result is returned, which lets entity decoders plug straight into the
    transport.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.vultr.com/v1",
        timeout: int = 30,
        session: Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "API-Key": self.api_key,
                "Accept": "application/json",
            }
        )
        self.servers = ServersClient(self)

    def get(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        decode: Optional[Decoder[T]] = None,
    ) -> Any:
        return self._request("GET", path, params=params, decode=decode)

    def post(
        self,
        path: str,
        data: Optional[Mapping[str, Any]] = None,
        *,
        decode: Optional[Decoder[T]] = None,
    ) -> Any:
        return self._request("POST", path, data=data, decode=decode)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        decode: Optional[Decoder[T]] = None,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("Vultr API request", extra={"method": method, "path": path})

        try:
            response = self._session.request(
                method,
                url,
                params=params,
                data=data,
                timeout=self.timeout,
            )
        except requests_exceptions.RequestException as exc:
            logger.error("HTTP request to Vultr failed", exc_info=exc)
            raise TransportError("Failed to communicate with Vultr API") from exc

        return self._handle_response(response, decode)

    def _handle_response(self, response: Response, decode: Optional[Decoder[T]]) -> Any:
        if response.status_code >= 400:
            # v1 reports errors as plain text rather than JSON.
            message = (response.text or "").strip() or response.reason
            logger.error(
                "Vultr API responded with an error",
                extra={"status_code": response.status_code, "response": message},
            )
            raise TransportError(message, status_code=response.status_code)

        if decode is not None:
            return decode(response.content)

        if not response.content:
            return None
        return load_json(response.content)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Client(base_url={self.base_url!r})"
