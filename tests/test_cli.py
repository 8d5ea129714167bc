"""Command-line tests (offline: mock adapters or no network at all)."""

from __future__ import annotations

from pathlib import Path

import pytest

from chorus.cli import build_parser, build_session, main, mask, prompt_for_keys
from chorus.config import Config
from chorus.credentials import JSONCredentialStore
from chorus.types import AssistantTurn, ProviderId

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def wide_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COLUMNS", "120")


def test_parser_defaults_to_chat() -> None:
    args = build_parser().parse_args([])

    assert args.command is None
    assert args.mock is False
    assert args.data_dir is None


def test_ask_in_mock_mode_prints_every_reply(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(["--mock", "--data-dir", str(tmp_path), "ask", "hello"])

    out = capsys.readouterr().out
    assert code == 0
    assert "> hello" in out
    for label in ("ChatGPT", "Gemini", "Claude"):
        assert f"echo({label}): hello" in out
    assert (tmp_path / "transcript.json").exists()
    # Mock mode never writes placeholder keys to disk.
    assert not (tmp_path / "credentials.json").exists()


def test_ask_with_blank_prompt_fails(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(["--mock", "--data-dir", str(tmp_path), "ask", "   "])

    assert code == 1
    assert "Prompt is empty." in capsys.readouterr().err


def test_ask_without_keys_asks_for_them(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(["--data-dir", str(tmp_path), "ask", "hello"])

    out = capsys.readouterr().out
    assert code == 1
    assert "먼저 설정에서 API 키를 모두 입력해주세요!" in out
    assert "https://platform.openai.com/api-keys" in out
    assert not (tmp_path / "transcript.json").exists()


@pytest.mark.security
def test_keys_show_masks_env_seeded_keys(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-openai-0001")

    code = main(["--data-dir", str(tmp_path), "keys", "--show"])

    out = capsys.readouterr().out
    assert code == 0
    assert "- ChatGPT: sk-t...0001" in out
    assert "- Gemini: (not set)" in out
    assert "sk-test-openai-0001" not in out
    assert JSONCredentialStore(tmp_path / "credentials.json").get(ProviderId.OPENAI)


def test_clear_removes_the_transcript(tmp_path: Path) -> None:
    assert main(["--mock", "--data-dir", str(tmp_path), "ask", "hello"]) == 0

    assert main(["--mock", "--data-dir", str(tmp_path), "clear"]) == 0

    assert not (tmp_path / "transcript.json").exists()


def test_configuration_errors_exit_with_hint(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("CHORUS_OPENAI_BASE_URL", "ftp://openai.test")

    code = main(["--data-dir", str(tmp_path), "ask", "hello"])

    err = capsys.readouterr().err
    assert code == 2
    assert "error:" in err
    assert "hint:" in err


@pytest.mark.parametrize(
    ("secret", "expected"),
    [
        (None, "(not set)"),
        ("", "(not set)"),
        ("short", "*****"),
        ("sk-ant-test-claude-0003", "sk-a...0003"),
    ],
)
def test_mask(secret: str | None, expected: str) -> None:
    assert mask(secret) == expected


def test_prompt_for_keys_keeps_blank_answers(tmp_path: Path) -> None:
    session = build_session(Config(data_dir=tmp_path))
    session.credentials.set(ProviderId.GEMINI, "AIza-old")
    answers = iter(["sk-new", "", "  sk-ant-new  "])
    prompts: list[str] = []

    def read_secret(prompt: str) -> str:
        prompts.append(prompt)
        return next(answers)

    updated = prompt_for_keys(session, session.providers, read_secret=read_secret)

    assert updated == [ProviderId.OPENAI, ProviderId.CLAUDE]
    assert session.credentials.get_all() == {
        ProviderId.OPENAI: "sk-new",
        ProviderId.GEMINI: "AIza-old",
        ProviderId.CLAUDE: "sk-ant-new",
    }
    assert not session.settings_open
    assert prompts[0].startswith("ChatGPT API key (https://platform.openai.com/api-keys)")


def test_build_session_recovers_an_interrupted_turn(tmp_path: Path) -> None:
    cfg = Config(data_dir=tmp_path, use_mock=True)
    first = build_session(cfg)
    first.transcript.append(AssistantTurn.placeholder(ProviderId))

    restored = build_session(cfg)

    last = restored.turns()[-1]
    assert isinstance(last, AssistantTurn)
    assert last.is_settled
