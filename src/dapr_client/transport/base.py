"""The narrow interface the operation layer needs from an RPC transport."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar, overload

if TYPE_CHECKING:
    from dapr_client.transport.contracts import WireModel

M = TypeVar("M", bound="WireModel")


class RpcTransport(Protocol):
    """Sends one envelope to the sidecar and returns the decoded response.

    Implementations raise ``TransportError`` for channel failures and
    ``RemoteRejectionError`` when the sidecar rejects the call.
    """

    @overload
    async def call(
        self,
        method: str,
        envelope: WireModel,
        response_type: None = None,
        *,
        timeout: float | None = None,
    ) -> None: ...

    @overload
    async def call(
        self,
        method: str,
        envelope: WireModel,
        response_type: type[M],
        *,
        timeout: float | None = None,
    ) -> M: ...

    async def close(self) -> None: ...


__all__ = ["RpcTransport"]
