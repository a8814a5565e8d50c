"""Client library for the application sidecar: pub/sub, invocation, bindings, and state."""

from __future__ import annotations

from dapr_client.api import BindingApi, DaprClient, InvocationApi, PublishApi, StateApi
from dapr_client.builder import DaprClientBuilder
from dapr_client.config import ClientSettings, SerializationOptions
from dapr_client.errors import (
    DaprError,
    InvalidArgumentError,
    RemoteRejectionError,
    SerializationError,
    TransportError,
)
from dapr_client.models import (
    ConcurrencyMode,
    ConsistencyMode,
    ETag,
    RetryMode,
    RetryOptions,
    StateEntry,
    StateOptions,
)
from dapr_client.operations import SidecarOperations
from dapr_client.version import __version__

__all__ = [
    "BindingApi",
    "ClientSettings",
    "ConcurrencyMode",
    "ConsistencyMode",
    "DaprClient",
    "DaprClientBuilder",
    "DaprError",
    "ETag",
    "InvalidArgumentError",
    "InvocationApi",
    "PublishApi",
    "RemoteRejectionError",
    "RetryMode",
    "RetryOptions",
    "SerializationError",
    "SerializationOptions",
    "SidecarOperations",
    "StateApi",
    "StateEntry",
    "StateOptions",
    "TransportError",
    "__version__",
]
