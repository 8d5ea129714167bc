"""Concurrent fan-out of one prompt to every provider adapter."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from chorus.errors import CredentialError
from chorus.providers._errors import (
    TRANSPORT_FAILURE_PREFIX,
    describe_exception,
    redact,
)
from chorus.types import ProviderId, ProviderResult

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chorus.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


async def fan_out(
    prompt: str,
    adapters: Mapping[ProviderId, ProviderAdapter],
    credentials: Mapping[ProviderId, str],
) -> dict[ProviderId, ProviderResult]:
    """Call every adapter concurrently and return all settled results.

    This is a wait-for-all join: no adapter's failure cancels or alters any
    other. Adapters are contractually non-raising; an adapter that raises
    anyway, or returns a pending result, is recorded as FAILED for its own
    provider only.

    Args:
        prompt: The user's prompt, sent unchanged to every provider.
        adapters: Adapter per provider; result order follows this mapping.
        credentials: Secret per provider.

    Returns:
        Settled result per provider, in adapter order.

    Raises:
        CredentialError: If any provider lacks a credential; no call is made.
    """
    providers = list(adapters)
    missing = [p for p in providers if not credentials.get(p)]
    if missing:
        raise CredentialError(
            f"Missing credentials for: {', '.join(p.value for p in missing)}",
            hint="Every provider needs its API key before a turn can start.",
        )

    start = time.perf_counter()
    logger.debug("Fanning out to %d provider(s)", len(providers))

    tasks = [
        asyncio.create_task(adapters[p].call(prompt, credentials[p]))
        for p in providers
    ]
    # Collect *all* outcomes before inspecting any of them.
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    results: dict[ProviderId, ProviderResult] = {}
    for provider, outcome in zip(providers, outcomes, strict=True):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            message = redact(describe_exception(outcome), credentials[provider])
            logger.warning(
                "%s adapter raised instead of returning a result: %s",
                provider.label,
                message,
            )
            results[provider] = ProviderResult.failed(
                f"{TRANSPORT_FAILURE_PREFIX}{message}"
            )
            continue
        if not isinstance(outcome, ProviderResult) or outcome.is_pending:
            logger.warning(
                "%s adapter returned an unsettled result: %r", provider.label, outcome
            )
            results[provider] = ProviderResult.failed(
                f"{TRANSPORT_FAILURE_PREFIX}invalid adapter result"
            )
            continue
        results[provider] = outcome

    logger.debug(
        "Fan-out settled in %.2fs: %s",
        time.perf_counter() - start,
        ", ".join(f"{p.value}={r.status.value}" for p, r in results.items()),
    )
    return results
