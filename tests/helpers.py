"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off adapter classes as coverage expands.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import json
from typing import TYPE_CHECKING, Any

import httpx

from chorus.types import ProviderId, ProviderResult

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from chorus.types import Turn


@dataclass
class FakeAdapter:
    """Adapter double with a scripted outcome.

    Records every call; optionally blocks on ``gate`` so tests can observe
    the session while a turn is in flight.
    """

    provider: ProviderId
    result: ProviderResult | None = None
    error: BaseException | None = None
    gate: asyncio.Event | None = None
    calls: list[tuple[str, str]] = field(default_factory=list)
    finished: bool = False
    closed: bool = False

    async def call(self, prompt: str, credential: str) -> ProviderResult:
        self.calls.append((prompt, credential))
        if self.gate is not None:
            await self.gate.wait()
        self.finished = True
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return ProviderResult.done(f"{self.provider.value}:{prompt}")

    async def aclose(self) -> None:
        self.closed = True


def fake_adapters(**overrides: FakeAdapter) -> dict[ProviderId, FakeAdapter]:
    """Return one FakeAdapter per provider, replacing any given by value name."""
    adapters = {p: FakeAdapter(p) for p in ProviderId}
    for name, adapter in overrides.items():
        adapters[ProviderId(name)] = adapter
    return adapters


@dataclass
class RecordingSink:
    """Render sink that keeps every frame it was asked to show."""

    frames: list[tuple[list[Turn], bool]] = field(default_factory=list)
    credential_requests: list[list[ProviderId]] = field(default_factory=list)

    def render(self, turns: Sequence[Turn], *, awaiting: bool) -> None:
        self.frames.append((list(turns), awaiting))

    def request_credentials(self, missing: Sequence[ProviderId]) -> None:
        self.credential_requests.append(list(missing))


async def wait_until(predicate: Callable[[], bool], *, attempts: int = 100) -> None:
    """Yield to the event loop until *predicate* holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@dataclass
class RecordingTransport:
    """Routes requests to a handler and keeps them for wire assertions."""

    handler: Callable[[httpx.Request], httpx.Response]
    requests: list[httpx.Request] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)
