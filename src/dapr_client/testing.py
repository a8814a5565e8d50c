"""In-memory ``StateApi`` implementation for application tests.

Swap it into a ``DaprClient`` in place of the sidecar-backed state API::

    client = DaprClient(
        publish=operations,
        state=InMemoryStateStore(),
        invocation=operations,
        bindings=operations,
    )

Values go through the same envelope codec as the real client, so a value
that would not serialize for the sidecar fails here too. ETags are
per-key version counters; an empty ETag matches only a missing key.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from dapr_client.errors import ensure_not_empty
from dapr_client.models import ETag, StateEntry
from dapr_client.serialization import EnvelopeCodec

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dapr_client.config import SerializationOptions
    from dapr_client.models import ConsistencyMode, StateOptions
    from dapr_client.transport.contracts import BoxedValue

logger = logging.getLogger(__name__)


class InMemoryStateStore:
    """Dictionary-backed state store keyed by ``(store_name, key)``."""

    def __init__(self, *, serialization: SerializationOptions | None = None) -> None:
        self._codec = EnvelopeCodec(serialization)
        self._records: dict[tuple[str, str], tuple[BoxedValue, int]] = {}

    def __len__(self) -> int:
        return len(self._records)

    def keys(self, store_name: str) -> list[str]:
        """Keys currently held for *store_name*, in insertion order."""
        return [key for store, key in self._records if store == store_name]

    def _current_etag(self, store_name: str, key: str) -> ETag:
        record = self._records.get((store_name, key))
        return ETag(str(record[1])) if record is not None else ETag("")

    async def get_state(
        self,
        store_name: str,
        key: str,
        *,
        consistency: ConsistencyMode | None = None,
        value_type: Any = Any,
        timeout: float | None = None,
    ) -> Any:
        value, _ = await self.get_state_and_etag(
            store_name,
            key,
            consistency=consistency,
            value_type=value_type,
            timeout=timeout,
        )
        return value

    async def get_state_and_etag(
        self,
        store_name: str,
        key: str,
        *,
        consistency: ConsistencyMode | None = None,
        value_type: Any = Any,
        timeout: float | None = None,
    ) -> tuple[Any, ETag]:
        del consistency, timeout
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        record = self._records.get((store_name, key))
        if record is None:
            return None, ETag("")
        boxed, version = record
        return self._codec.decode(boxed, value_type), ETag(str(version))

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

    def _write(self, store_name: str, key: str, value: object | None) -> None:
        record = self._records.get((store_name, key))
        version = record[1] + 1 if record is not None else 1
        self._records[(store_name, key)] = (self._codec.encode(value), version)

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
        del options, metadata, timeout
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        self._write(store_name, key, value)

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
        del options, metadata, timeout
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        if etag != self._current_etag(store_name, key):
            logger.debug("Rejecting stale write to %s/%s", store_name, key)
            return False
        self._write(store_name, key, value)
        return True

    async def delete_state(
        self,
        store_name: str,
        key: str,
        *,
        options: StateOptions | None = None,
        timeout: float | None = None,
    ) -> None:
        del options, timeout
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        self._records.pop((store_name, key), None)

    async def try_delete_state(
        self,
        store_name: str,
        key: str,
        etag: ETag | None = None,
        *,
        options: StateOptions | None = None,
        timeout: float | None = None,
    ) -> bool:
        del options, timeout
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        if etag is not None and etag != self._current_etag(store_name, key):
            logger.debug("Rejecting stale delete of %s/%s", store_name, key)
            return False
        self._records.pop((store_name, key), None)
        return True


__all__ = ["InMemoryStateStore"]
