"""Operation layer: validates calls, builds envelopes, and decodes responses.

``SidecarOperations`` is the production implementation of every capability
protocol in :mod:`dapr_client.api`. Each public method is one RPC:

- arguments are validated first, raising ``InvalidArgumentError`` before any
  transport activity;
- payloads are boxed by the :class:`~dapr_client.serialization.EnvelopeCodec`
  and state options are mapped by :mod:`dapr_client.options`;
- responses are decoded back into application types, with empty payloads
  becoming ``None``.

Failures propagate, except from ``try_save_state`` and ``try_delete_state``
which report whether the write took effect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from dapr_client.errors import ensure_not_empty
from dapr_client.models import ETag, StateEntry
from dapr_client.options import map_consistency, map_state_options
from dapr_client.serialization import EnvelopeCodec
from dapr_client.transport import constants
from dapr_client.transport.contracts import (
    DeleteStateEnvelope,
    GetStateEnvelope,
    GetStateResponseEnvelope,
    InvokeBindingEnvelope,
    InvokeServiceEnvelope,
    InvokeServiceResponseEnvelope,
    PublishEventEnvelope,
    SaveStateEnvelope,
    StateRequest,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Mapping

    from dapr_client.config import SerializationOptions
    from dapr_client.models import ConsistencyMode, StateOptions
    from dapr_client.transport.base import RpcTransport
    from dapr_client.transport.contracts import BoxedValue

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class CallOutcome:
    """Result of an RPC exchange whose failure the caller chose not to raise."""

    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


async def capture_outcome(call: Awaitable[object]) -> CallOutcome:
    """Await *call*, turning any raised ``Exception`` into a failed outcome.

    Task cancellation is not an ``Exception`` and still propagates.
    """
    try:
        await call
    except Exception as exc:
        return CallOutcome(error=exc)
    return CallOutcome()


def _metadata(metadata: Mapping[str, str] | None) -> dict[str, str]:
    return dict(metadata) if metadata is not None else {}


class SidecarOperations:
    """Sends publish, binding, invocation, and state calls to the sidecar."""

    def __init__(
        self,
        transport: RpcTransport,
        *,
        serialization: SerializationOptions | None = None,
    ) -> None:
        self._transport = transport
        self._codec = EnvelopeCodec(serialization)

    @property
    def transport(self) -> RpcTransport:
        return self._transport

    @property
    def codec(self) -> EnvelopeCodec:
        return self._codec

    def _box(self, payload: object | None) -> BoxedValue | None:
        return self._codec.encode(payload) if payload is not None else None

    # -- publish ----------------------------------------------------------

    async def publish_event(
        self,
        topic: str,
        data: object | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        """Publish *data* to *topic*. ``None`` publishes an event without data."""
        ensure_not_empty(topic, "topic")
        envelope = PublishEventEnvelope(topic=topic, data=self._box(data))
        await self._transport.call(constants.PUBLISH_EVENT, envelope, timeout=timeout)

    # -- bindings ---------------------------------------------------------

    async def invoke_binding(
        self,
        name: str,
        data: object | None = None,
        *,
        metadata: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> None:
        """Send *data* to the output binding *name*; the response is not read."""
        ensure_not_empty(name, "name")
        envelope = InvokeBindingEnvelope(
            name=name,
            data=self._box(data),
            metadata=_metadata(metadata),
        )
        await self._transport.call(constants.INVOKE_BINDING, envelope, timeout=timeout)

    # -- service invocation -----------------------------------------------

    async def invoke_method(
        self,
        app_id: str,
        method: str,
        data: object | None = None,
        *,
        metadata: Mapping[str, str] | None = None,
        response_type: type[T] | None = None,
        timeout: float | None = None,
    ) -> T | None:
        """Invoke *method* on the service *app_id*.

        Without *response_type* the response body is discarded undecoded and
        ``None`` is returned. With it, an empty body yields ``None``.
        """
        ensure_not_empty(app_id, "app_id")
        ensure_not_empty(method, "method")
        envelope = InvokeServiceEnvelope(
            id=app_id,
            method=method,
            data=self._box(data),
            metadata=_metadata(metadata),
        )
        if response_type is None:
            await self._transport.call(constants.INVOKE_SERVICE, envelope, timeout=timeout)
            return None
        response = await self._transport.call(
            constants.INVOKE_SERVICE,
            envelope,
            InvokeServiceResponseEnvelope,
            timeout=timeout,
        )
        return self._codec.decode(response.data, response_type)

    # -- state ------------------------------------------------------------

    async def _get_state_response(
        self,
        store_name: str,
        key: str,
        consistency: ConsistencyMode | None,
        timeout: float | None,
    ) -> GetStateResponseEnvelope:
        envelope = GetStateEnvelope(
            store_name=store_name,
            key=key,
            consistency=map_consistency(consistency),
        )
        return await self._transport.call(
            constants.GET_STATE,
            envelope,
            GetStateResponseEnvelope,
            timeout=timeout,
        )

    async def get_state(
        self,
        store_name: str,
        key: str,
        *,
        consistency: ConsistencyMode | None = None,
        value_type: Any = Any,
        timeout: float | None = None,
    ) -> Any:
        """Read *key* from *store_name*; a missing or empty value reads as ``None``."""
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        response = await self._get_state_response(store_name, key, consistency, timeout)
        return self._codec.decode(response.data, value_type)

    async def get_state_and_etag(
        self,
        store_name: str,
        key: str,
        *,
        consistency: ConsistencyMode | None = None,
        value_type: Any = Any,
        timeout: float | None = None,
    ) -> tuple[Any, ETag]:
        """Read *key* together with its ETag.

        The ETag is returned even when the value is absent, so it can guard a
        first conditional write.
        """
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        response = await self._get_state_response(store_name, key, consistency, timeout)
        return self._codec.decode(response.data, value_type), ETag(response.etag)

    async def get_state_entry(
        self,
        store_name: str,
        key: str,
        *,
        consistency: ConsistencyMode | None = None,
        value_type: Any = Any,
        timeout: float | None = None,
    ) -> StateEntry[Any]:
        value, etag = await self.get_state_and_etag(
            store_name,
            key,
            consistency=consistency,
            value_type=value_type,
            timeout=timeout,
        )
        return StateEntry(store_name=store_name, key=key, value=value, etag=etag)

    def _save_state_envelope(
        self,
        store_name: str,
        key: str,
        value: object | None,
        etag: ETag | None,
        options: StateOptions | None,
        metadata: Mapping[str, str] | None,
    ) -> SaveStateEnvelope:
        request = StateRequest(
            key=key,
            value=self._box(value),
            etag=etag.value if etag is not None else None,
            metadata=_metadata(metadata),
            options=map_state_options(options),
        )
        return SaveStateEnvelope(store_name=store_name, requests=[request])

    async def save_state(
        self,
        store_name: str,
        key: str,
        value: object | None,
        *,
        options: StateOptions | None = None,
        metadata: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> None:
        """Write *value* unconditionally."""
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        envelope = self._save_state_envelope(store_name, key, value, None, options, metadata)
        await self._transport.call(constants.SAVE_STATE, envelope, timeout=timeout)

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
    ) -> bool:
        """Write *value* only if the stored record still matches *etag*.

        Returns ``False`` when the write did not take effect for any reason.
        """
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        envelope = self._save_state_envelope(store_name, key, value, etag, options, metadata)
        outcome = await capture_outcome(
            self._transport.call(constants.SAVE_STATE, envelope, timeout=timeout)
        )
        if not outcome.succeeded:
            logger.debug("Conditional save of %s/%s failed: %s", store_name, key, outcome.error)
        return outcome.succeeded

    def _delete_state_envelope(
        self,
        store_name: str,
        key: str,
        etag: ETag | None,
        options: StateOptions | None,
    ) -> DeleteStateEnvelope:
        return DeleteStateEnvelope(
            store_name=store_name,
            key=key,
            etag=etag.value if etag is not None else None,
            options=map_state_options(options),
        )

    async def delete_state(
        self,
        store_name: str,
        key: str,
        *,
        options: StateOptions | None = None,
        timeout: float | None = None,
    ) -> None:
        """Delete *key* unconditionally."""
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        envelope = self._delete_state_envelope(store_name, key, None, options)
        await self._transport.call(constants.DELETE_STATE, envelope, timeout=timeout)

    async def try_delete_state(
        self,
        store_name: str,
        key: str,
        etag: ETag | None = None,
        *,
        options: StateOptions | None = None,
        timeout: float | None = None,
    ) -> bool:
        """Delete *key* if it still matches *etag*; ``False`` when it did not happen."""
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        envelope = self._delete_state_envelope(store_name, key, etag, options)
        outcome = await capture_outcome(
            self._transport.call(constants.DELETE_STATE, envelope, timeout=timeout)
        )
        if not outcome.succeeded:
            logger.debug("Conditional delete of %s/%s failed: %s", store_name, key, outcome.error)
        return outcome.succeeded


__all__ = ["CallOutcome", "SidecarOperations", "capture_outcome"]
