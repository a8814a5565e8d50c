"""Publish, binding, and service-invocation operations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import pytest
from pydantic import ValidationError

from dapr_client.errors import InvalidArgumentError, RemoteRejectionError, SerializationError
from dapr_client.operations import SidecarOperations
from dapr_client.serialization import encode
from dapr_client.transport.contracts import BoxedValue, WireModel
from tests.helpers.sidecar import InMemorySidecar

pytestmark = pytest.mark.unit


@dataclass
class Order:
    id: int
    item: str


# -- publish ---------------------------------------------------------------


async def test_publish_event_sends_boxed_payload(
    operations: SidecarOperations, sidecar: InMemorySidecar
) -> None:
    await operations.publish_event("orders", Order(id=1, item="tea"))

    [event] = sidecar.published
    assert event.topic == "orders"
    assert event.data is not None
    assert json.loads(event.data.value) == {"id": 1, "item": "tea"}


async def test_publish_event_without_payload_omits_data(
    operations: SidecarOperations, sidecar: InMemorySidecar
) -> None:
    await operations.publish_event("heartbeat")

    assert sidecar.calls == [("PublishEvent", {"topic": "heartbeat"})]
    assert sidecar.published[0].data is None


async def test_publish_event_requires_topic(
    operations: SidecarOperations, sidecar: InMemorySidecar
) -> None:
    with pytest.raises(InvalidArgumentError):
        await operations.publish_event("", {"a": 1})

    assert sidecar.calls == []


async def test_publish_event_propagates_rejection(
    operations: SidecarOperations, sidecar: InMemorySidecar
) -> None:
    sidecar.reject_next("PublishEvent", code="TOPIC_NOT_ALLOWED")

    with pytest.raises(RemoteRejectionError):
        await operations.publish_event("orders", {"a": 1})


# -- bindings --------------------------------------------------------------


async def test_invoke_binding_sends_payload_and_metadata(
    operations: SidecarOperations, sidecar: InMemorySidecar
) -> None:
    await operations.invoke_binding(
        "queue",
        {"body": "hi"},
        metadata={"priority": "high", "correlation": "c-1"},
    )

    [binding] = sidecar.bindings
    assert binding.name == "queue"
    assert binding.metadata == {"priority": "high", "correlation": "c-1"}
    assert list(sidecar.calls[0][1]["metadata"]) == ["priority", "correlation"]
    assert binding.data is not None
    assert json.loads(binding.data.value) == {"body": "hi"}


async def test_invoke_binding_without_payload_or_metadata(
    operations: SidecarOperations, sidecar: InMemorySidecar
) -> None:
    await operations.invoke_binding("cron")

    assert sidecar.calls == [("InvokeBinding", {"name": "cron", "metadata": {}})]


async def test_invoke_binding_requires_name(
    operations: SidecarOperations, sidecar: InMemorySidecar
) -> None:
    with pytest.raises(InvalidArgumentError):
        await operations.invoke_binding("")

    assert sidecar.calls == []


# -- service invocation ----------------------------------------------------


async def test_invoke_method_without_payload_or_response(
    operations: SidecarOperations, sidecar: InMemorySidecar
) -> None:
    result = await operations.invoke_method("cart", "clear")

    assert result is None
    assert sidecar.calls == [("InvokeService", {"id": "cart", "method": "clear", "metadata": {}})]


async def test_invoke_method_with_payload_and_typed_response(
    operations: SidecarOperations, sidecar: InMemorySidecar
) -> None:
    def _price(data: BoxedValue | None, metadata: dict[str, str]) -> BoxedValue:
        assert data is not None
        order = json.loads(data.value)
        return encode({"id": order["id"], "item": order["item"].upper()})

    sidecar.services[("shop", "normalize")] = _price

    result = await operations.invoke_method(
        "shop",
        "normalize",
        Order(id=3, item="tea"),
        metadata={"tenant": "t1"},
        response_type=Order,
    )

    assert result == Order(id=3, item="TEA")
    assert sidecar.calls[0][1]["metadata"] == {"tenant": "t1"}


async def test_invoke_method_typed_response_without_payload(
    operations: SidecarOperations, sidecar: InMemorySidecar
) -> None:
    sidecar.services[("clock", "now")] = lambda data, metadata: encode(1700000000)

    assert await operations.invoke_method("clock", "now", response_type=int) == 1700000000


async def test_invoke_method_empty_response_yields_none(
    operations: SidecarOperations, sidecar: InMemorySidecar
) -> None:
    sidecar.services[("cart", "find")] = lambda data, metadata: None

    assert await operations.invoke_method("cart", "find", {"id": 9}, response_type=Order) is None


async def test_invoke_method_without_response_type_never_decodes(
    operations: SidecarOperations, sidecar: InMemorySidecar
) -> None:
    # A body that would fail any decoding attempt.
    sidecar.services[("cart", "add")] = lambda data, metadata: BoxedValue(value=b"not json")

    assert await operations.invoke_method("cart", "add", {"id": 1}) is None

    with pytest.raises(SerializationError):
        await operations.invoke_method("cart", "add", {"id": 1}, response_type=Order)


class _UnreadableBodyTransport:
    """Answers every call with a response body that is not valid base64."""

    def __init__(self) -> None:
        self.response_types: list[type[WireModel] | None] = []

    async def call(
        self,
        method: str,
        envelope: WireModel,
        response_type: type[WireModel] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        self.response_types.append(response_type)
        if response_type is None:
            return None
        return response_type.model_validate({"data": {"typeUrl": "x", "value": "not base64!"}})

    async def close(self) -> None:
        pass


async def test_invoke_method_without_response_type_skips_response_validation() -> None:
    transport = _UnreadableBodyTransport()
    operations = SidecarOperations(transport)

    assert await operations.invoke_method("cart", "add", {"id": 1}) is None
    assert transport.response_types == [None]

    with pytest.raises(ValidationError):
        await operations.invoke_method("cart", "add", {"id": 1}, response_type=Order)


@pytest.mark.parametrize(("app_id", "method"), [("", "m"), ("svc", ""), (None, "m")])
async def test_invoke_method_requires_target_and_method(
    operations: SidecarOperations,
    sidecar: InMemorySidecar,
    app_id: str,
    method: str,
) -> None:
    with pytest.raises(InvalidArgumentError):
        await operations.invoke_method(app_id, method)

    assert sidecar.calls == []
