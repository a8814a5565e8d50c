"""RPC transport to the sidecar: wire contracts, endpoints, and the JSON-lines client."""

from __future__ import annotations

from dapr_client.transport.base import RpcTransport
from dapr_client.transport.client import SidecarTransport, create_transport
from dapr_client.transport.contracts import BoxedValue, SidecarRequest, SidecarResponse
from dapr_client.transport.endpoint import SidecarEndpoint

__all__ = [
    "BoxedValue",
    "RpcTransport",
    "SidecarEndpoint",
    "SidecarRequest",
    "SidecarResponse",
    "SidecarTransport",
    "create_transport",
]
