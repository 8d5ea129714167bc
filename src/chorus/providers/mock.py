"""Mock adapter for offline sessions and tests."""

from __future__ import annotations

from chorus.types import ProviderId, ProviderResult


class MockAdapter:
    """Mock adapter that answers without any network call.

    Echoes the prompt back, labelled with the provider it stands in for.
    """

    def __init__(self, provider: ProviderId) -> None:
        self.provider = provider

    async def call(self, prompt: str, credential: str) -> ProviderResult:  # noqa: ARG002
        """Return a deterministic echo reply."""
        return ProviderResult.done(f"echo({self.provider.label}): {prompt[:100]}")

    async def aclose(self) -> None:
        """Nothing to release."""
