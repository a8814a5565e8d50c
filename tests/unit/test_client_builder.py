"""Client settings, builder, and endpoint parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dapr_client.api import DaprClient
from dapr_client.builder import DaprClientBuilder
from dapr_client.config import ClientSettings, SerializationOptions, default_endpoint
from dapr_client.operations import SidecarOperations
from dapr_client.transport.client import SidecarTransport
from dapr_client.transport.endpoint import SidecarEndpoint
from tests.helpers.sidecar import InMemorySidecar

pytestmark = pytest.mark.unit


def test_default_endpoint_uses_well_known_port() -> None:
    assert default_endpoint() == "http://127.0.0.1:52918"


def test_default_endpoint_honours_port_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DAPR_GRPC_PORT", "50001")

    assert ClientSettings.from_env().endpoint == "http://127.0.0.1:50001"


def test_settings_reject_unknown_scheme() -> None:
    with pytest.raises(ValidationError):
        ClientSettings(endpoint="ftp://127.0.0.1:1")


@pytest.mark.parametrize("url", ["http://", "http://127.0.0.1:abc", "https://h:70000", "unix://"])
def test_settings_reject_unparseable_endpoint(url: str) -> None:
    with pytest.raises(ValidationError):
        ClientSettings(endpoint=url)


def test_settings_reject_malformed_port_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DAPR_GRPC_PORT", "abc")

    with pytest.raises(ValidationError):
        DaprClientBuilder()


def test_settings_reject_non_positive_timeout() -> None:
    with pytest.raises(ValidationError):
        ClientSettings(timeout_seconds=0)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        (
            "http://127.0.0.1:52918",
            SidecarEndpoint(transport="tcp", address="127.0.0.1", port=52918),
        ),
        (
            "https://sidecar.local",
            SidecarEndpoint(transport="tcp", address="sidecar.local", port=443, tls=True),
        ),
        ("unix:///tmp/sidecar.sock", SidecarEndpoint(transport="socket", address="/tmp/sidecar.sock")),
    ],
)
def test_endpoint_parsing(url: str, expected: SidecarEndpoint) -> None:
    assert SidecarEndpoint.parse(url) == expected


@pytest.mark.parametrize("url", ["grpc://host:1", "http://:80", "unix://"])
def test_endpoint_parsing_rejects_bad_urls(url: str) -> None:
    with pytest.raises(ValueError):
        SidecarEndpoint.parse(url)


def test_endpoint_describe_round_trips() -> None:
    for url in ("http://127.0.0.1:52918", "https://h:9", "unix:///tmp/s.sock"):
        assert SidecarEndpoint.parse(url).describe() == url


def test_builder_creates_sidecar_transport() -> None:
    client = DaprClientBuilder().use_endpoint("http://127.0.0.1:6000").use_timeout(2.5).build()

    assert isinstance(client, DaprClient)
    assert isinstance(client.state, SidecarOperations)
    transport = client.state.transport
    assert isinstance(transport, SidecarTransport)
    assert transport.endpoint == SidecarEndpoint(transport="tcp", address="127.0.0.1", port=6000)


def test_builder_rejects_bad_endpoint() -> None:
    with pytest.raises(ValidationError):
        DaprClientBuilder().use_endpoint("localhost:6000")


def test_builder_applies_serialization_options() -> None:
    options = SerializationOptions(exclude_none=True)

    client = DaprClientBuilder().use_serialization_options(options).build()

    assert isinstance(client.publish, SidecarOperations)
    assert client.publish.codec.options == options


async def test_client_close_leaves_injected_transport_open() -> None:
    sidecar = InMemorySidecar()

    async with DaprClientBuilder().use_transport(sidecar).build() as client:
        await client.invocation.invoke_method("svc", "ping")

    assert not sidecar.closed
    assert sidecar.methods() == ["InvokeService"]


async def test_client_close_closes_owned_transport() -> None:
    sidecar = InMemorySidecar()
    operations = SidecarOperations(sidecar)

    async with DaprClient(
        publish=operations,
        state=operations,
        invocation=operations,
        bindings=operations,
        transport=sidecar,
    ):
        pass

    assert sidecar.closed
