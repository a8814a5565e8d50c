"""JSON-lines RPC transport to the sidecar."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from dapr_client.errors import RemoteRejectionError, TransportError
from dapr_client.transport.constants import MAX_LINE_BYTES
from dapr_client.transport.contracts import SidecarRequest, SidecarResponse
from dapr_client.transport.endpoint import SidecarEndpoint, open_stream

if TYPE_CHECKING:
    from dapr_client.transport.contracts import WireModel

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30.0


class SidecarTransport:
    """Async transport that multiplexes RPCs over one sidecar connection.

    Each request carries a ``requestId``; a background reader task matches
    response lines to waiting callers, so concurrent calls never wait on each
    other and a cancelled call cannot leave a stale response behind.

    Usage::

        transport = SidecarTransport(SidecarEndpoint.parse("http://127.0.0.1:52918"))
        response = await transport.call("GetState", envelope, GetStateResponseEnvelope)
        await transport.close()

    Or as an async context manager::

        async with SidecarTransport(endpoint) as transport:
            await transport.call("PublishEvent", envelope)
    """

    def __init__(
        self,
        endpoint: SidecarEndpoint,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._pending: dict[str, asyncio.Future[SidecarResponse]] = {}
        self._connect_lock = asyncio.Lock()

    async def __aenter__(self) -> SidecarTransport:
        await self.connect()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    @property
    def endpoint(self) -> SidecarEndpoint:
        return self._endpoint

    @property
    def is_connected(self) -> bool:
        """Whether the transport currently holds an open connection."""
        return self._writer is not None and not self._writer.is_closing()

    async def connect(self) -> None:
        """Open the connection if it is not already open."""
        if self.is_connected:
            return
        async with self._connect_lock:
            if self.is_connected:
                return
            try:
                reader, writer = await asyncio.wait_for(
                    open_stream(self._endpoint),
                    timeout=self._timeout,
                )
            except TimeoutError as exc:
                msg = f"Timed out connecting to sidecar at {self._endpoint.describe()}"
                raise TransportError(msg) from exc
            except OSError as exc:
                msg = f"Cannot connect to sidecar at {self._endpoint.describe()}: {exc}"
                raise TransportError(msg) from exc
            self._reader, self._writer = reader, writer
            self._reader_task = asyncio.create_task(
                self._read_responses(reader, writer),
                name="sidecar-transport-reader",
            )

    async def close(self) -> None:
        """Close the connection and fail any call still waiting."""
        task, self._reader_task = self._reader_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        writer, self._writer = self._writer, None
        self._reader = None
        if writer is not None:
            try:
                writer.close()
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass
            logger.debug("Sidecar transport closed")
        self._fail_pending(TransportError("Transport closed"))

    async def call(
        self,
        method: str,
        envelope: WireModel,
        response_type: type[WireModel] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send *envelope* to *method* and wait for the response.

        Returns the response validated as *response_type*, or ``None`` when no
        response type is requested.

        Raises:
            TransportError: On connection failure, timeout, or a malformed response.
            RemoteRejectionError: When the sidecar rejects the call.
        """
        await self.connect()
        writer = self._writer
        if writer is None:
            msg = "Transport is not connected"
            raise TransportError(msg)

        request = SidecarRequest(method=method, envelope=envelope.to_wire())
        line = (request.model_dump_json(by_alias=True) + "\n").encode("utf-8")
        if len(line) > MAX_LINE_BYTES:
            msg = f"{method} request exceeds the {MAX_LINE_BYTES}-byte frame limit"
            raise TransportError(msg)

        future: asyncio.Future[SidecarResponse] = asyncio.get_running_loop().create_future()
        self._pending[request.request_id] = future
        effective_timeout = self._timeout if timeout is None else timeout
        logger.debug("Sidecar call %s request_id=%s", method, request.request_id)

        try:
            writer.write(line)
            await writer.drain()
            response = await asyncio.wait_for(future, timeout=effective_timeout)
        except TransportError:
            raise
        except TimeoutError as exc:
            msg = f"{method} timed out after {effective_timeout}s"
            raise TransportError(msg) from exc
        except (ConnectionError, OSError) as exc:
            msg = f"{method} failed: {exc}"
            raise TransportError(msg) from exc
        finally:
            self._pending.pop(request.request_id, None)

        if not response.ok:
            error = response.error
            raise RemoteRejectionError(
                error.message if error is not None else "Request rejected",
                code=error.code if error is not None else "UNKNOWN",
                method=method,
            )
        if response_type is None:
            return None
        try:
            return response_type.model_validate(response.result or {})
        except ValidationError as exc:
            msg = f"Invalid {method} response from sidecar"
            raise TransportError(msg) from exc

    async def _read_responses(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        """Route response lines to waiting callers until the stream ends."""
        error = TransportError("Connection closed by sidecar")
        try:
            while True:
                raw = await reader.readline()
                if not raw:
                    break
                if len(raw) > MAX_LINE_BYTES:
                    error = TransportError("Sidecar response exceeded max line size")
                    break
                try:
                    response = SidecarResponse.model_validate_json(raw)
                except ValidationError:
                    logger.warning("Dropping malformed frame from sidecar (%d bytes)", len(raw))
                    continue
                future = self._pending.get(response.request_id)
                if future is None or future.done():
                    logger.debug("Dropping response for unknown request %s", response.request_id)
                    continue
                future.set_result(response)
        except ValueError:
            error = TransportError("Sidecar response exceeded stream framing limit")
        except (ConnectionError, OSError) as exc:
            error = TransportError(f"Connection to sidecar lost: {exc}")
        finally:
            if self._writer is writer:
                writer.close()
            self._fail_pending(error)

    def _fail_pending(self, error: TransportError) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(TransportError(str(error)))
        self._pending.clear()


def create_transport(endpoint: str, *, timeout: float = _DEFAULT_TIMEOUT) -> SidecarTransport:
    """Build a transport from an endpoint URL."""
    return SidecarTransport(SidecarEndpoint.parse(endpoint), timeout=timeout)


__all__ = ["SidecarTransport", "create_transport"]
