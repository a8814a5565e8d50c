"""Client configuration: endpoint resolution and serialization options."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dapr_client.transport.endpoint import SidecarEndpoint

DEFAULT_GRPC_PORT = "52918"
GRPC_PORT_ENV = "DAPR_GRPC_PORT"
_DEFAULT_HOST = "127.0.0.1"
_DEFAULT_TIMEOUT_SECONDS = 30.0
_SUPPORTED_SCHEMES = ("http://", "https://", "unix://")


def default_endpoint() -> str:
    """Return the local sidecar address, honouring ``DAPR_GRPC_PORT``."""
    port = os.environ.get(GRPC_PORT_ENV) or DEFAULT_GRPC_PORT
    return f"http://{_DEFAULT_HOST}:{port}"


class SerializationOptions(BaseModel):
    """Options applied by the envelope codec when (de)serializing payloads."""

    model_config = ConfigDict(frozen=True)

    by_alias: bool = Field(default=True, description="Serialize models using field aliases")
    exclude_none: bool = Field(default=False, description="Drop None-valued fields from models")
    strict: bool = Field(default=False, description="Reject type coercion when decoding")
    content_type: str = Field(
        default="application/json",
        description="Type discriminator written into boxed payloads",
    )


class ClientSettings(BaseModel):
    """Settings fixed for the lifetime of one client."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(
        default_factory=default_endpoint,
        description="Sidecar address (http://host:port, https://host:port or unix:///path)",
    )
    timeout_seconds: float = Field(
        default=_DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Default per-call timeout when the caller passes none",
    )
    serialization: SerializationOptions = Field(default_factory=SerializationOptions)

    @field_validator("endpoint")
    @classmethod
    def _validate_endpoint(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(_SUPPORTED_SCHEMES):
            msg = f"Unsupported sidecar endpoint {value!r}; expected one of {_SUPPORTED_SCHEMES}"
            raise ValueError(msg)
        # Host, port and socket path must parse now rather than at connect time.
        SidecarEndpoint.parse(value)
        return value

    @classmethod
    def from_env(cls) -> ClientSettings:
        """Build settings from the process environment."""
        return cls(endpoint=default_endpoint())


__all__ = [
    "DEFAULT_GRPC_PORT",
    "GRPC_PORT_ENV",
    "ClientSettings",
    "SerializationOptions",
    "default_endpoint",
]
