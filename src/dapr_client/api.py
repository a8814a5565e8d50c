"""Capability interfaces that application code depends on.

Each capability group is its own protocol, so a client can be assembled from
different implementations, for example the sidecar for publishing and an
in-memory store for state in tests.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dapr_client.models import ConsistencyMode, ETag, StateEntry, StateOptions
    from dapr_client.transport.base import RpcTransport

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PublishApi(Protocol):
    async def publish_event(
        self,
        topic: str,
        data: object | None = None,
        *,
        timeout: float | None = None,
    ) -> None: ...


class BindingApi(Protocol):
    async def invoke_binding(
        self,
        name: str,
        data: object | None = None,
        *,
        metadata: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> None: ...


class InvocationApi(Protocol):
    async def invoke_method(
        self,
        app_id: str,
        method: str,
        data: object | None = None,
        *,
        metadata: Mapping[str, str] | None = None,
        response_type: type[T] | None = None,
        timeout: float | None = None,
    ) -> T | None: ...


class StateApi(Protocol):
    """Key/value state with ETag-based optimistic concurrency."""

    async def get_state(
        self,
        store_name: str,
        key: str,
        *,
        consistency: ConsistencyMode | None = None,
        value_type: Any = Any,
        timeout: float | None = None,
    ) -> Any: ...

    async def get_state_and_etag(
        self,
        store_name: str,
        key: str,
        *,
        consistency: ConsistencyMode | None = None,
        value_type: Any = Any,
        timeout: float | None = None,
    ) -> tuple[Any, ETag]: ...

    async def get_state_entry(
        self,
        store_name: str,
        key: str,
        *,
        consistency: ConsistencyMode | None = None,
        value_type: Any = Any,
        timeout: float | None = None,
    ) -> StateEntry[Any]: ...

    async def save_state(
        self,
        store_name: str,
        key: str,
        value: object | None,
        *,
        options: StateOptions | None = None,
        metadata: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> None: ...

    async def try_save_state(
        self,
        store_name: str,
        key: str,
        value: object | None,
        etag: ETag,
        *,
        options: StateOptions | None = None,
        metadata: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> bool: ...

    async def delete_state(
        self,
        store_name: str,
        key: str,
        *,
        options: StateOptions | None = None,
        timeout: float | None = None,
    ) -> None: ...

    async def try_delete_state(
        self,
        store_name: str,
        key: str,
        etag: ETag | None = None,
        *,
        options: StateOptions | None = None,
        timeout: float | None = None,
    ) -> bool: ...


class DaprClient:
    """Entry point grouping one implementation per capability.

    Usage::

        async with DaprClientBuilder().build() as client:
            await client.state.save_state("kv", "k1", {"n": 1})
            await client.publish.publish_event("orders", order)
    """

    def __init__(
        self,
        *,
        publish: PublishApi,
        state: StateApi,
        invocation: InvocationApi,
        bindings: BindingApi,
        transport: RpcTransport | None = None,
    ) -> None:
        self._publish = publish
        self._state = state
        self._invocation = invocation
        self._bindings = bindings
        self._transport = transport

    async def __aenter__(self) -> DaprClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    @property
    def publish(self) -> PublishApi:
        return self._publish

    @property
    def state(self) -> StateApi:
        return self._state

    @property
    def invocation(self) -> InvocationApi:
        return self._invocation

    @property
    def bindings(self) -> BindingApi:
        return self._bindings

    async def close(self) -> None:
        """Close the owned transport, if any."""
        if self._transport is not None:
            await self._transport.close()
            logger.debug("Client transport closed")


__all__ = [
    "BindingApi",
    "DaprClient",
    "InvocationApi",
    "PublishApi",
    "StateApi",
]
