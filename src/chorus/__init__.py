"""Chorus: one prompt, three AI providers, answers side by side.

Public API:
    - ChatSession: per-session context with submit/clear handlers
    - fan_out(): concurrent wait-for-all call of every provider adapter
    - Config: configuration dataclass
    - build_adapters(): OpenAI, Gemini and Claude adapters for a Config
"""

from __future__ import annotations

import logging

from chorus.config import Config
from chorus.credentials import (
    CredentialStore,
    JSONCredentialStore,
    MemoryCredentialStore,
    missing_credentials,
)
from chorus.errors import (
    ChorusError,
    ConfigurationError,
    CredentialError,
    InternalError,
    MalformedResponseError,
    ProviderError,
    TranscriptError,
    TransportError,
    UpstreamError,
)
from chorus.fanout import fan_out
from chorus.providers import build_adapters
from chorus.session import ChatSession, SubmitOutcome
from chorus.transcript import JSONTranscriptStore, MemoryTranscriptStore, TranscriptStore
from chorus.types import (
    AssistantTurn,
    ProviderId,
    ProviderResult,
    ResultStatus,
    Turn,
    UserTurn,
)

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("chorus-chat")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("chorus").addHandler(logging.NullHandler())

__all__ = [
    "AssistantTurn",
    "ChatSession",
    "ChorusError",
    "Config",
    "ConfigurationError",
    "CredentialError",
    "CredentialStore",
    "InternalError",
    "JSONCredentialStore",
    "JSONTranscriptStore",
    "MalformedResponseError",
    "MemoryCredentialStore",
    "MemoryTranscriptStore",
    "ProviderError",
    "ProviderId",
    "ProviderResult",
    "ResultStatus",
    "SubmitOutcome",
    "TranscriptError",
    "TranscriptStore",
    "TransportError",
    "Turn",
    "UpstreamError",
    "build_adapters",
    "fan_out",
    "missing_credentials",
]
