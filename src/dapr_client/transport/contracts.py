"""Wire envelopes exchanged with the sidecar, and the frames that carry them."""

from __future__ import annotations

import base64
from datetime import timedelta
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


def _new_request_id() -> str:
    return uuid4().hex


class WireModel(BaseModel):
    """Base for every wire message.

    Fields are camelCase on the wire; payload bytes travel as base64.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump with aliases, leaving unset optional fields off the envelope."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BoxedValue(WireModel):
    """Generic ``any`` container: an opaque payload plus a type discriminator.

    A zero-length ``value`` is the absence marker.
    """

    type_url: str = Field(default="", description="Discriminator for the payload format")
    value: bytes = Field(default=b"", description="Serialized payload")

    @field_validator("value", mode="before")
    @classmethod
    def _decode_base64(cls, value: object) -> object:
        if isinstance(value, str):
            return base64.b64decode(value, validate=True)
        return value

    @field_serializer("value", when_used="json")
    def _encode_base64(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")

    @property
    def is_empty(self) -> bool:
        return not self.value

    @staticmethod
    def empty() -> BoxedValue:
        return BoxedValue()


class WireDuration(WireModel):
    """Duration as whole seconds plus nanoseconds."""

    seconds: int = 0
    nanos: int = 0

    @staticmethod
    def from_timedelta(delta: timedelta) -> WireDuration:
        total_micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
        seconds, micros = divmod(total_micros, 1_000_000)
        if seconds < 0 and micros:
            # Sign of nanos must match seconds.
            seconds += 1
            micros -= 1_000_000
        return WireDuration(seconds=seconds, nanos=micros * 1_000)

    def to_timedelta(self) -> timedelta:
        return timedelta(seconds=self.seconds, microseconds=self.nanos // 1_000)


class RetryPolicyEnvelope(WireModel):
    pattern: str | None = None
    interval: WireDuration | None = None
    threshold: int | None = None


class StateRequestOptions(WireModel):
    """State directives. ``consistency`` also carries the concurrency mode."""

    consistency: str | None = None
    retry_policy: RetryPolicyEnvelope | None = None


class PublishEventEnvelope(WireModel):
    topic: str
    data: BoxedValue | None = None


class InvokeBindingEnvelope(WireModel):
    name: str
    data: BoxedValue | None = None
    metadata: dict[str, str] = Field(default_factory=dict)


class InvokeServiceEnvelope(WireModel):
    id: str
    method: str
    data: BoxedValue | None = None
    metadata: dict[str, str] = Field(default_factory=dict)


class InvokeServiceResponseEnvelope(WireModel):
    data: BoxedValue = Field(default_factory=BoxedValue.empty)


class GetStateEnvelope(WireModel):
    store_name: str
    key: str
    consistency: str | None = None


class GetStateResponseEnvelope(WireModel):
    data: BoxedValue = Field(default_factory=BoxedValue.empty)
    etag: str = ""


class StateRequest(WireModel):
    key: str
    value: BoxedValue | None = None
    etag: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    options: StateRequestOptions | None = None


class SaveStateEnvelope(WireModel):
    store_name: str
    requests: list[StateRequest] = Field(default_factory=list)


class DeleteStateEnvelope(WireModel):
    store_name: str
    key: str
    etag: str | None = None
    options: StateRequestOptions | None = None


class SidecarRequest(WireModel):
    """Frame for one RPC sent to the sidecar."""

    request_id: str = Field(
        default_factory=_new_request_id,
        description="Unique identifier used to match the response",
    )
    method: str = Field(description="RPC method name (e.g. 'GetState')")
    envelope: dict[str, Any] = Field(
        default_factory=dict,
        description="Method-specific envelope in wire form",
    )


class SidecarErrorDetail(WireModel):
    """Structured rejection returned inside a ``SidecarResponse``."""

    code: str = Field(description="Machine-readable error code (e.g. 'ETAG_MISMATCH')")
    message: str = Field(description="Human-readable error description")


class SidecarResponse(WireModel):
    """Frame for one RPC response.

    ``ok`` is *True* when the call succeeded; ``result`` then carries the
    response envelope (absent for methods without a body). Otherwise ``error``
    describes the rejection.
    """

    request_id: str
    ok: bool
    result: dict[str, Any] | None = None
    error: SidecarErrorDetail | None = None

    @staticmethod
    def success(request_id: str, result: dict[str, Any] | None = None) -> SidecarResponse:
        return SidecarResponse(request_id=request_id, ok=True, result=result)

    @staticmethod
    def failure(request_id: str, *, code: str, message: str) -> SidecarResponse:
        return SidecarResponse(
            request_id=request_id,
            ok=False,
            error=SidecarErrorDetail(code=code, message=message),
        )


__all__ = [
    "BoxedValue",
    "DeleteStateEnvelope",
    "GetStateEnvelope",
    "GetStateResponseEnvelope",
    "InvokeBindingEnvelope",
    "InvokeServiceEnvelope",
    "InvokeServiceResponseEnvelope",
    "PublishEventEnvelope",
    "RetryPolicyEnvelope",
    "SaveStateEnvelope",
    "SidecarErrorDetail",
    "SidecarRequest",
    "SidecarResponse",
    "StateRequest",
    "StateRequestOptions",
    "WireDuration",
    "WireModel",
]
