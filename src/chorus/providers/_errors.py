"""Shared provider-side error helpers.

Adapters raise `ProviderError` subclasses while talking to their upstream and
convert them into ``FAILED`` results at the adapter boundary with the helpers
here, so every provider words the same failure kind the same way.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from chorus.errors import ProviderError, TransportError, _walk_exception_chain
from chorus.types import ProviderResult

TRANSPORT_FAILURE_PREFIX = "오류가 발생했습니다: "
UNKNOWN_ERROR_TEXT = "알 수 없는 오류"
REDACTED = "[REDACTED]"


def redact(text: str, secret: str | None) -> str:
    """Replace every occurrence of *secret* in *text*."""
    if not secret:
        return text
    return text.replace(secret, REDACTED)


def describe_exception(exc: BaseException) -> str:
    """Return the most specific non-empty message along the exception chain."""
    for e in _walk_exception_chain(exc):
        message = str(e).strip()
        if message:
            return message
    return type(exc).__name__


def upstream_error_text(error: Any) -> str:
    """Extract a readable message from a provider's ``error`` payload.

    Providers send either an object with a ``message`` field or a bare string.
    """
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message
        return UNKNOWN_ERROR_TEXT
    if isinstance(error, str) and error.strip():
        return error
    return UNKNOWN_ERROR_TEXT


def wrap_transport_error(exc: BaseException, *, provider: str) -> TransportError:
    """Map an httpx/decoding exception into TransportError."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    if isinstance(exc, TransportError):
        if exc.provider is None:
            exc.provider = provider
        return exc

    status_code: int | None = None
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code

    return TransportError(
        f"{TRANSPORT_FAILURE_PREFIX}{describe_exception(exc)}",
        provider=provider,
        status_code=status_code,
    )


def failure_result(err: ProviderError, *, secret: str | None) -> ProviderResult:
    """Convert a provider error into a FAILED result without leaking *secret*."""
    return ProviderResult.failed(redact(str(err), secret))
