"""Provider adapter protocol and the shared HTTP adapter base."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from chorus.errors import ProviderError
from chorus.providers._errors import (
    describe_exception,
    failure_result,
    redact,
    wrap_transport_error,
)
from chorus.types import ProviderId, ProviderResult

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


@runtime_checkable
class ProviderAdapter(Protocol):
    """Minimal adapter protocol: one stateless, single-turn call."""

    provider: ProviderId

    async def call(self, prompt: str, credential: str) -> ProviderResult:
        """Send *prompt* upstream and return a settled result. Never raises."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...


class HTTPAdapter:
    """Base for adapters that issue exactly one JSON POST per call.

    Subclasses implement ``_generate`` and raise `ProviderError` subclasses
    for every failure; ``call`` turns those into ``FAILED`` results.
    """

    provider: ProviderId

    def __init__(
        self,
        *,
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize with a request timeout and an optional custom transport."""
        self._timeout_s = timeout_s
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Lazily initialize and return the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout_s, transport=self._transport
            )
        return self._client

    @property
    def label(self) -> str:
        return self.provider.label

    async def call(self, prompt: str, credential: str) -> ProviderResult:
        """Call the provider once and normalize every outcome."""
        try:
            text = await self._generate(prompt, credential)
        except asyncio.CancelledError:
            raise
        except ProviderError as e:
            logger.warning(
                "%s call failed (%s): %s", self.label, e.kind, redact(str(e), credential)
            )
            return failure_result(e, secret=credential)
        except Exception as e:
            err = wrap_transport_error(e, provider=self.provider.value)
            logger.warning(
                "%s call failed unexpectedly: %s",
                self.label,
                redact(describe_exception(e), credential),
            )
            return failure_result(err, secret=credential)
        return ProviderResult.done(text)

    async def _generate(self, prompt: str, credential: str) -> str:
        raise NotImplementedError

    async def _post_json(
        self,
        url: str,
        *,
        body: dict[str, Any],
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> tuple[httpx.Response, Any]:
        """POST *body* and return the response with its decoded JSON payload.

        Raises:
            TransportError: When the request fails or the body is not JSON.
        """
        client = self._get_client()
        try:
            response = await client.post(
                url,
                json=body,
                headers={"Content-Type": "application/json", **(headers or {})},
                params=params,
            )
            payload = response.json()
        except asyncio.CancelledError:
            raise
        except (httpx.HTTPError, ValueError) as e:
            raise wrap_transport_error(e, provider=self.provider.value) from e
        return response, payload

    def _log_raw(self, message: str, payload: Any, credential: str) -> None:
        """Log a raw payload at DEBUG level with the credential removed."""
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s: %s", message, redact(repr(payload), credential))

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        client = self._client
        if client is None:
            return
        self._client = None
        await client.aclose()
