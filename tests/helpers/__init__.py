"""Test helpers package."""

from tests.helpers.sidecar import InMemorySidecar, SidecarServer, serve_sidecar
from tests.helpers.wait import wait_until

__all__ = [
    "InMemorySidecar",
    "SidecarServer",
    "serve_sidecar",
    "wait_until",
]
