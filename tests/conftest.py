"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, and automatic API
test skipping. Fixtures marked autouse apply to every test.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os

import pytest

from chorus.config import Config
from chorus.credentials import MemoryCredentialStore
from chorus.transcript import MemoryTranscriptStore
from chorus.types import ProviderId

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_provider_env(request, monkeypatch):
    """Ensure a clean provider environment for each test.

    Clears provider key and CHORUS_* env vars to prevent test pollution.
    Opt-out: @pytest.mark.allow_env_pollution or @pytest.mark.api
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith(("GEMINI_", "OPENAI_", "ANTHROPIC_", "CHORUS_")):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require ENABLE_API_TESTS=1"


def _api_tests_enabled() -> bool:
    return bool(os.getenv("ENABLE_API_TESTS"))


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if _api_tests_enabled():
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)


# =============================================================================
# Shared Fixtures
# =============================================================================

TEST_KEYS: dict[ProviderId, str] = {
    ProviderId.OPENAI: "sk-test-openai-0001",
    ProviderId.GEMINI: "AIza-test-gemini-0002",
    ProviderId.CLAUDE: "sk-ant-test-claude-0003",
}


@pytest.fixture
def keys() -> dict[ProviderId, str]:
    """Return a fresh copy of the three test API keys."""
    return dict(TEST_KEYS)


@pytest.fixture
def credentials(keys: dict[ProviderId, str]) -> MemoryCredentialStore:
    """Credential store holding every provider's key."""
    return MemoryCredentialStore(keys)


@pytest.fixture
def transcript() -> MemoryTranscriptStore:
    return MemoryTranscriptStore()


@pytest.fixture
def config(tmp_path) -> Config:
    """Config rooted in a temporary data directory."""
    return Config(
        data_dir=tmp_path / "chorus",
        openai_base_url="https://openai.test/v1",
        gemini_base_url="https://gemini.test/v1beta",
        claude_relay_url="http://relay.test/api/claude",
    )
