"""Pytest fixtures for sidecar client tests."""

from __future__ import annotations

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from dapr_client.operations import SidecarOperations
from tests.helpers.sidecar import InMemorySidecar

settings.register_profile(
    "ci",
    max_examples=100,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)
settings.register_profile(
    "dev",
    max_examples=20,
    deadline=500,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture(autouse=True)
def _isolate_sidecar_port(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's DAPR_GRPC_PORT from leaking into endpoint defaults."""
    monkeypatch.delenv("DAPR_GRPC_PORT", raising=False)


@pytest.fixture
def sidecar() -> InMemorySidecar:
    """In-memory sidecar acting as the RPC transport."""
    return InMemorySidecar()


@pytest.fixture
def operations(sidecar: InMemorySidecar) -> SidecarOperations:
    """Operation layer wired to the in-memory sidecar."""
    return SidecarOperations(sidecar)
