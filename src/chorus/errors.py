"""Exception hierarchy for Chorus."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class ChorusError(Exception):
    """Base exception for all Chorus errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(ChorusError):
    """Configuration validation or resolution failed."""


class CredentialError(ChorusError):
    """A required provider credential is absent."""


class TranscriptError(ChorusError):
    """Transcript records are malformed or an update broke turn invariants."""


class InternalError(ChorusError):
    """A Chorus internal error (bug) or invariant violation."""


class ProviderError(ChorusError):
    """A provider call failed.

    Adapters raise subclasses internally and convert them into ``FAILED``
    results at their boundary, so these never reach the orchestrator.
    """

    kind = "provider"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.provider = provider
        self.status_code = status_code


class TransportError(ProviderError):
    """The HTTP exchange itself failed (network, timeout, undecodable body)."""

    kind = "transport"


class UpstreamError(ProviderError):
    """The provider answered with a structured error payload."""

    kind = "upstream"


class MalformedResponseError(ProviderError):
    """The provider answered successfully but without the expected fields."""

    kind = "malformed"


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
