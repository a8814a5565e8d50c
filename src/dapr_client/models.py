"""Value objects used by the state, publish, and invocation APIs."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from datetime import timedelta

    from dapr_client.api import StateApi


T = TypeVar("T")


class ConsistencyMode(StrEnum):
    """Read/write visibility guarantee requested from the state store."""

    EVENTUAL = "eventual"
    STRONG = "strong"


class ConcurrencyMode(StrEnum):
    """Conflict resolution requested for concurrent writers."""

    FIRST_WRITE = "first-write"
    LAST_WRITE = "last-write"


class RetryMode(StrEnum):
    """Backoff shape the store applies when retrying a state operation."""

    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True, slots=True)
class ETag:
    """Opaque version token returned by the state store.

    An empty value means the store holds no record for the key.
    """

    value: str

    @property
    def is_empty(self) -> bool:
        return not self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class RetryOptions:
    """Retry directives forwarded to the store. Never executed locally."""

    retry_mode: RetryMode | None = None
    retry_interval: timedelta | None = None
    retry_threshold: int | None = None


@dataclass(frozen=True, slots=True)
class StateOptions:
    """Consistency, concurrency, and retry directives for a state operation."""

    consistency: ConsistencyMode | None = None
    concurrency: ConcurrencyMode | None = None
    retry_options: RetryOptions | None = None


@dataclass(frozen=True)
class StateEntry(Generic[T]):
    """A state value together with the ETag it was read at.

    Entries are immutable; use :meth:`with_value` to prepare a write.
    """

    store_name: str
    key: str
    value: T | None = None
    etag: ETag | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def with_value(self, value: T | None) -> StateEntry[T]:
        """Return a copy carrying *value* and the same ETag."""
        return replace(self, value=value)

    async def save(
        self,
        state: StateApi,
        *,
        options: StateOptions | None = None,
        timeout: float | None = None,
    ) -> None:
        """Write the value unconditionally."""
        await state.save_state(
            self.store_name,
            self.key,
            self.value,
            options=options,
            metadata=self.metadata,
            timeout=timeout,
        )

    async def try_save(
        self,
        state: StateApi,
        *,
        options: StateOptions | None = None,
        timeout: float | None = None,
    ) -> bool:
        """Write the value only if the stored record still matches :attr:`etag`."""
        return await state.try_save_state(
            self.store_name,
            self.key,
            self.value,
            self.etag or ETag(""),
            options=options,
            metadata=self.metadata,
            timeout=timeout,
        )

    async def delete(
        self,
        state: StateApi,
        *,
        options: StateOptions | None = None,
        timeout: float | None = None,
    ) -> None:
        await state.delete_state(self.store_name, self.key, options=options, timeout=timeout)

    async def try_delete(
        self,
        state: StateApi,
        *,
        options: StateOptions | None = None,
        timeout: float | None = None,
    ) -> bool:
        return await state.try_delete_state(
            self.store_name,
            self.key,
            self.etag,
            options=options,
            timeout=timeout,
        )


__all__ = [
    "ConcurrencyMode",
    "ConsistencyMode",
    "ETag",
    "RetryMode",
    "RetryOptions",
    "StateEntry",
    "StateOptions",
]
