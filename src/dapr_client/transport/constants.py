"""Framing limits and RPC method names shared by the transport."""

from __future__ import annotations

MAX_LINE_BYTES = 4 * 1024 * 1024  # 4 MiB per JSON line (without framing overhead)
STREAM_LIMIT_BYTES = MAX_LINE_BYTES + 1  # Include trailing newline separator.

PUBLISH_EVENT = "PublishEvent"
INVOKE_BINDING = "InvokeBinding"
INVOKE_SERVICE = "InvokeService"
GET_STATE = "GetState"
SAVE_STATE = "SaveState"
DELETE_STATE = "DeleteState"

__all__ = [
    "DELETE_STATE",
    "GET_STATE",
    "INVOKE_BINDING",
    "INVOKE_SERVICE",
    "MAX_LINE_BYTES",
    "PUBLISH_EVENT",
    "SAVE_STATE",
    "STREAM_LIMIT_BYTES",
]
