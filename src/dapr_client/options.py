"""Map state option value objects onto their wire representation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dapr_client.transport.contracts import (
    RetryPolicyEnvelope,
    StateRequestOptions,
    WireDuration,
)

if TYPE_CHECKING:
    from dapr_client.models import ConcurrencyMode, ConsistencyMode, RetryOptions, StateOptions

logger = logging.getLogger(__name__)


def map_consistency(mode: ConsistencyMode | None) -> str | None:
    """Return the lowercase wire string, or ``None`` when no mode was given."""
    if mode is None:
        return None
    return mode.value


def map_concurrency(mode: ConcurrencyMode | None) -> str | None:
    """Return ``first-write`` / ``last-write``, or ``None`` when no mode was given."""
    if mode is None:
        return None
    return mode.value


def map_retry_policy(retry: RetryOptions | None) -> RetryPolicyEnvelope | None:
    """Copy only the retry fields that are set."""
    if retry is None:
        return None
    return RetryPolicyEnvelope(
        pattern=retry.retry_mode.value if retry.retry_mode is not None else None,
        interval=(
            WireDuration.from_timedelta(retry.retry_interval)
            if retry.retry_interval is not None
            else None
        ),
        threshold=retry.retry_threshold,
    )


def map_state_options(options: StateOptions | None) -> StateRequestOptions | None:
    """Build the wire options block for a save or delete request.

    Consistency and concurrency share the single ``consistency`` wire field.
    When both are set the concurrency mode is the value that is sent.
    """
    if options is None:
        return None

    consistency = map_consistency(options.consistency)
    concurrency = map_concurrency(options.concurrency)
    if concurrency is not None:
        if consistency is not None:
            logger.debug(
                "Concurrency mode %s replaces consistency mode %s on the wire",
                concurrency,
                consistency,
            )
        consistency = concurrency

    return StateRequestOptions(
        consistency=consistency,
        retry_policy=map_retry_policy(options.retry_options),
    )


__all__ = [
    "map_concurrency",
    "map_consistency",
    "map_retry_policy",
    "map_state_options",
]
