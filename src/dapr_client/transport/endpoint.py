"""Sidecar endpoint descriptors and stream connectors."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

from dapr_client.transport.constants import STREAM_LIMIT_BYTES

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class SidecarEndpoint:
    """Describes how to reach the sidecar.

    Attributes:
        transport: ``tcp`` or ``socket``.
        address: Hostname for tcp, filesystem path for socket.
        port: TCP port; ``None`` for socket transport.
        tls: Whether the TCP stream is wrapped in TLS.
    """

    transport: str
    address: str
    port: int | None = None
    tls: bool = False

    @classmethod
    def parse(cls, url: str) -> SidecarEndpoint:
        """Parse ``http://host:port``, ``https://host:port`` or ``unix:///path``."""
        parts = urlsplit(url)
        if parts.scheme == "unix":
            path = parts.path or parts.netloc
            if not path:
                msg = f"Unix endpoint {url!r} has no socket path"
                raise ValueError(msg)
            return cls(transport="socket", address=path)
        if parts.scheme not in _DEFAULT_PORTS:
            msg = f"Unsupported endpoint scheme {parts.scheme!r} in {url!r}"
            raise ValueError(msg)
        if not parts.hostname:
            msg = f"Endpoint {url!r} has no host"
            raise ValueError(msg)
        return cls(
            transport="tcp",
            address=parts.hostname,
            port=parts.port or _DEFAULT_PORTS[parts.scheme],
            tls=parts.scheme == "https",
        )

    def describe(self) -> str:
        if self.transport == "socket":
            return f"unix://{self.address}"
        scheme = "https" if self.tls else "http"
        return f"{scheme}://{self.address}:{self.port}"


async def open_stream(
    endpoint: SidecarEndpoint,
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Open a stream to *endpoint* sized for the framing limit."""
    if endpoint.transport == "socket":
        reader, writer = await asyncio.open_unix_connection(
            endpoint.address,
            limit=STREAM_LIMIT_BYTES,
        )
    else:
        reader, writer = await asyncio.open_connection(
            endpoint.address,
            endpoint.port,
            ssl=True if endpoint.tls else None,
            limit=STREAM_LIMIT_BYTES,
        )
    logger.debug("Connected to sidecar at %s", endpoint.describe())
    return reader, writer


__all__ = ["SidecarEndpoint", "open_stream"]
