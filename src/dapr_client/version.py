"""Package version lookup."""

from __future__ import annotations

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "dapr-sidecar-client"


@lru_cache(maxsize=1)
def get_client_version() -> str:
    """Return the installed distribution version, or 'dev' when metadata is unavailable."""
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "dev"


__version__ = get_client_version()

__all__ = ["DISTRIBUTION_NAME", "__version__", "get_client_version"]
