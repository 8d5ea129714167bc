"""Provider adapter implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from chorus.types import ProviderId

from .anthropic import ClaudeAdapter
from .base import HTTPAdapter, ProviderAdapter
from .gemini import GeminiAdapter
from .mock import MockAdapter
from .openai import OpenAIAdapter

if TYPE_CHECKING:
    import httpx

    from chorus.config import Config


def build_adapters(
    config: Config, *, transport: httpx.AsyncBaseTransport | None = None
) -> dict[ProviderId, ProviderAdapter]:
    """Build one adapter per provider, in display order."""
    if config.use_mock:
        return {p: MockAdapter(p) for p in ProviderId}

    timeout_s = config.request_timeout_s
    return {
        ProviderId.OPENAI: OpenAIAdapter(
            model=config.openai_model,
            max_tokens=config.max_tokens,
            base_url=config.openai_base_url,
            timeout_s=timeout_s,
            transport=transport,
        ),
        ProviderId.GEMINI: GeminiAdapter(
            model=config.gemini_model,
            base_url=config.gemini_base_url,
            timeout_s=timeout_s,
            transport=transport,
        ),
        ProviderId.CLAUDE: ClaudeAdapter(
            relay_url=config.claude_relay_url,
            timeout_s=timeout_s,
            transport=transport,
        ),
    }


__all__ = [
    "ClaudeAdapter",
    "GeminiAdapter",
    "HTTPAdapter",
    "MockAdapter",
    "OpenAIAdapter",
    "ProviderAdapter",
    "build_adapters",
]
