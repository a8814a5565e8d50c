"""Fluent construction of a sidecar-backed ``DaprClient``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dapr_client.api import DaprClient
from dapr_client.config import ClientSettings
from dapr_client.operations import SidecarOperations
from dapr_client.transport.client import create_transport

if TYPE_CHECKING:
    from dapr_client.config import SerializationOptions
    from dapr_client.transport.base import RpcTransport

logger = logging.getLogger(__name__)


class DaprClientBuilder:
    """Collects endpoint and serialization settings, then builds a client.

    The default endpoint is ``http://127.0.0.1:$DAPR_GRPC_PORT``.
    """

    def __init__(self, settings: ClientSettings | None = None) -> None:
        self._settings = settings or ClientSettings.from_env()
        self._transport: RpcTransport | None = None

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    def use_endpoint(self, endpoint: str) -> DaprClientBuilder:
        """Override the sidecar endpoint."""
        return self._update(endpoint=endpoint)

    def use_serialization_options(self, options: SerializationOptions) -> DaprClientBuilder:
        return self._update(serialization=options)

    def use_timeout(self, seconds: float) -> DaprClientBuilder:
        return self._update(timeout_seconds=seconds)

    def use_transport(self, transport: RpcTransport) -> DaprClientBuilder:
        """Use a preconstructed transport instead of connecting to the endpoint.

        The caller keeps ownership: closing the built client leaves it open.
        """
        self._transport = transport
        return self

    def _update(self, **changes: object) -> DaprClientBuilder:
        self._settings = ClientSettings.model_validate({**dict(self._settings), **changes})
        return self

    def build(self) -> DaprClient:
        owned = self._transport is None
        transport = self._transport or create_transport(
            self._settings.endpoint,
            timeout=self._settings.timeout_seconds,
        )
        operations = SidecarOperations(transport, serialization=self._settings.serialization)
        logger.debug("Built sidecar client for %s", self._settings.endpoint)
        return DaprClient(
            publish=operations,
            state=operations,
            invocation=operations,
            bindings=operations,
            transport=transport if owned else None,
        )


__all__ = ["DaprClientBuilder"]
