"""Configuration: frozen Config resolved from arguments, env vars and ``.env``."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv

from chorus.errors import ConfigurationError
from chorus.types import ProviderId

load_dotenv()

# Provider-specific API key environment variable names
API_KEY_ENV_VARS: dict[ProviderId, str] = {
    ProviderId.OPENAI: "OPENAI_API_KEY",
    ProviderId.GEMINI: "GEMINI_API_KEY",
    ProviderId.CLAUDE: "ANTHROPIC_API_KEY",
}


def _env(name: str, default: str) -> str:
    value = os.environ.get(name)
    return value if value else default


def _default_data_dir() -> Path:
    raw = os.environ.get("CHORUS_DATA_DIR")
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".chorus"


@dataclass(frozen=True)
class Config:
    """Immutable configuration for a Chorus session.

    Every field has a working default; ``CHORUS_*`` environment variables
    override model names and endpoints, and provider API keys found in the
    environment are collected into ``env_api_keys`` for seeding the
    credential store.

    Example:
        config = Config(use_mock=True)
        # credentials.json and transcript.json live under config.data_dir
    """

    openai_model: str = field(
        default_factory=lambda: _env("CHORUS_OPENAI_MODEL", "gpt-4o-mini")
    )
    gemini_model: str = field(
        default_factory=lambda: _env("CHORUS_GEMINI_MODEL", "gemini-2.0-flash")
    )
    claude_model: str = field(
        default_factory=lambda: _env("CHORUS_CLAUDE_MODEL", "claude-3-5-sonnet-latest")
    )
    max_tokens: int = 1000
    openai_base_url: str = field(
        default_factory=lambda: _env(
            "CHORUS_OPENAI_BASE_URL", "https://api.openai.com/v1"
        )
    )
    gemini_base_url: str = field(
        default_factory=lambda: _env(
            "CHORUS_GEMINI_BASE_URL",
            "https://generativelanguage.googleapis.com/v1beta",
        )
    )
    #: The Claude adapter never calls Anthropic directly; it posts to this relay.
    claude_relay_url: str = field(
        default_factory=lambda: _env(
            "CHORUS_CLAUDE_RELAY_URL", "http://127.0.0.1:8787/api/claude"
        )
    )
    request_timeout_s: float = 60.0
    data_dir: Path = field(default_factory=_default_data_dir)
    use_mock: bool = False
    #: Auto-resolved from ``OPENAI_API_KEY``/``GEMINI_API_KEY``/``ANTHROPIC_API_KEY``.
    env_api_keys: dict[ProviderId, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Resolve environment keys and validate configuration."""
        if self.max_tokens < 1:
            raise ConfigurationError(
                f"max_tokens must be ≥ 1, got {self.max_tokens}",
                hint="This caps the length of each provider reply.",
            )
        if self.request_timeout_s <= 0:
            raise ConfigurationError(
                f"request_timeout_s must be > 0, got {self.request_timeout_s}",
                hint="This is the per-request HTTP timeout applied by each adapter.",
            )

        for name in ("openai_model", "gemini_model", "claude_model"):
            if not str(getattr(self, name)).strip():
                raise ConfigurationError(
                    f"{name} must be a non-empty model name",
                    hint=f"Pass Config({name}=...) or set CHORUS_{name.upper()}.",
                )

        for name in ("openai_base_url", "gemini_base_url", "claude_relay_url"):
            url = getattr(self, name)
            parsed = urlparse(url)
            if parsed.scheme not in {"http", "https"} or not parsed.netloc:
                raise ConfigurationError(
                    f"{name} must be an http(s) URL, got {url!r}",
                    hint=f"Pass Config({name}=...) or set CHORUS_{name.upper()}.",
                )

        object.__setattr__(self, "data_dir", Path(self.data_dir).expanduser())

        if not self.env_api_keys:
            resolved: dict[ProviderId, str] = {}
            for provider, env_var in API_KEY_ENV_VARS.items():
                value = os.environ.get(env_var, "").strip()
                if value:
                    resolved[provider] = value
            object.__setattr__(self, "env_api_keys", resolved)

    @property
    def credentials_path(self) -> Path:
        """Location of the persisted credential file."""
        return self.data_dir / "credentials.json"

    @property
    def transcript_path(self) -> Path:
        """Location of the persisted transcript file."""
        return self.data_dir / "transcript.json"

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        keys = ", ".join(f"{p.value}=[REDACTED]" for p in self.env_api_keys)
        return (
            f"Config(openai_model={self.openai_model!r}, "
            f"gemini_model={self.gemini_model!r}, "
            f"claude_model={self.claude_model!r}, "
            f"claude_relay_url={self.claude_relay_url!r}, "
            f"data_dir={str(self.data_dir)!r}, use_mock={self.use_mock}, "
            f"env_api_keys={{{keys}}})"
        )

    __repr__ = __str__
