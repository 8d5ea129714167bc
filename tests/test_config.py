"""Configuration boundary tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from chorus.config import Config
from chorus.errors import ConfigurationError
from chorus.types import ProviderId

pytestmark = pytest.mark.unit


def test_defaults_match_the_three_provider_contracts(tmp_path: Path) -> None:
    cfg = Config(data_dir=tmp_path)

    assert cfg.openai_model == "gpt-4o-mini"
    assert cfg.max_tokens == 1000
    assert cfg.openai_base_url == "https://api.openai.com/v1"
    assert cfg.gemini_base_url == "https://generativelanguage.googleapis.com/v1beta"
    assert cfg.claude_relay_url == "http://127.0.0.1:8787/api/claude"
    assert cfg.use_mock is False
    assert cfg.env_api_keys == {}


def test_store_paths_live_under_data_dir(tmp_path: Path) -> None:
    cfg = Config(data_dir=tmp_path)

    assert cfg.credentials_path == tmp_path / "credentials.json"
    assert cfg.transcript_path == tmp_path / "transcript.json"


def test_data_dir_defaults_to_env_then_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("CHORUS_DATA_DIR", str(tmp_path / "from-env"))
    assert Config().data_dir == tmp_path / "from-env"

    monkeypatch.delenv("CHORUS_DATA_DIR")
    assert Config().data_dir == Path.home() / ".chorus"


def test_env_overrides_models_and_endpoints(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("CHORUS_GEMINI_MODEL", "gemini-1.5-pro")
    monkeypatch.setenv("CHORUS_CLAUDE_RELAY_URL", "https://relay.example.com/api/claude")

    cfg = Config(data_dir=tmp_path)

    assert cfg.gemini_model == "gemini-1.5-pro"
    assert cfg.claude_relay_url == "https://relay.example.com/api/claude"


def test_explicit_values_take_precedence_over_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("CHORUS_OPENAI_MODEL", "gpt-env")

    cfg = Config(data_dir=tmp_path, openai_model="gpt-explicit")

    assert cfg.openai_model == "gpt-explicit"


def test_api_keys_are_collected_from_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "  sk-ant-env  ")
    monkeypatch.setenv("GEMINI_API_KEY", "   ")

    cfg = Config(data_dir=tmp_path)

    assert cfg.env_api_keys == {
        ProviderId.OPENAI: "sk-env",
        ProviderId.CLAUDE: "sk-ant-env",
    }


@pytest.mark.parametrize(
    ("overrides", "match"),
    [
        ({"max_tokens": 0}, "max_tokens"),
        ({"request_timeout_s": 0}, "request_timeout_s"),
        ({"openai_model": "  "}, "openai_model"),
        ({"gemini_base_url": "ftp://example.com"}, "gemini_base_url"),
        ({"claude_relay_url": "/api/claude"}, "claude_relay_url"),
    ],
)
def test_invalid_values_raise_with_hint(
    tmp_path: Path, overrides: dict[str, object], match: str
) -> None:
    with pytest.raises(ConfigurationError, match=match) as exc:
        Config(data_dir=tmp_path, **overrides)  # type: ignore[arg-type]
    assert exc.value.hint is not None


@pytest.mark.security
def test_config_str_and_repr_redact_api_keys(tmp_path: Path) -> None:
    cfg = Config(
        data_dir=tmp_path,
        env_api_keys={ProviderId.OPENAI: "sk-super-secret"},
    )

    assert "sk-super-secret" not in str(cfg)
    assert "sk-super-secret" not in repr(cfg)
    assert "openai=[REDACTED]" in str(cfg)
