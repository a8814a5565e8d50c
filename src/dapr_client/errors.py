"""Error types raised by the sidecar client."""

from __future__ import annotations


class DaprError(Exception):
    """Base for every error raised by this package."""


class InvalidArgumentError(DaprError, ValueError):
    """Raised when a required identifier is missing or empty.

    Always raised before any transport activity.
    """

    def __init__(self, argument: str) -> None:
        super().__init__(f"The value of '{argument}' cannot be None or empty.")
        self.argument = argument


class TransportError(DaprError, ConnectionError):
    """Connectivity, framing, or timeout failure talking to the sidecar."""


class RemoteRejectionError(DaprError):
    """The sidecar processed the request and rejected it.

    ``code`` is machine-readable (e.g. ``ETAG_MISMATCH``, ``STORE_NOT_FOUND``).
    """

    def __init__(self, message: str, *, code: str, method: str | None = None) -> None:
        self.message = message
        self.code = code
        self.method = method
        super().__init__(f"[{code}] {message}")


class SerializationError(DaprError, ValueError):
    """A payload could not be encoded to or decoded from the wire."""


def ensure_not_empty(value: str | None, argument: str) -> str:
    """Return *value* unchanged, or raise ``InvalidArgumentError`` when empty."""
    if not value:
        raise InvalidArgumentError(argument)
    return value


__all__ = [
    "DaprError",
    "InvalidArgumentError",
    "RemoteRejectionError",
    "SerializationError",
    "TransportError",
    "ensure_not_empty",
]
