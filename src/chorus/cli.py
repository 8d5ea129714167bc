"""Command-line surface for Chorus.

Examples:
- chorus chat
- chorus ask "What is a monad?"
- chorus keys --show
- chorus relay --port 8787
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
from pathlib import Path
import sys
from typing import TYPE_CHECKING

from chorus.config import Config
from chorus.credentials import (
    JSONCredentialStore,
    MemoryCredentialStore,
    seed_from_env,
)
from chorus.errors import ChorusError
from chorus.providers import build_adapters
from chorus.render import KEY_PAGES, TerminalSink
from chorus.session import ChatSession, SubmitOutcome
from chorus.transcript import JSONTranscriptStore
from chorus.types import ProviderId

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from chorus.credentials import CredentialStore
    from chorus.render import RenderSink

logger = logging.getLogger(__name__)

QUIT_COMMANDS = {"/quit", "/exit"}


def build_session(config: Config, *, sink: RenderSink | None = None) -> ChatSession:
    """Wire persisted stores, adapters and *sink* into a ready session."""
    credentials: CredentialStore
    if config.use_mock:
        # Echo adapters ignore keys; stored keys stay untouched.
        credentials = MemoryCredentialStore({p: "mock" for p in ProviderId})
    else:
        credentials = JSONCredentialStore(config.credentials_path)
        seed_from_env(credentials, config)
    session = ChatSession(
        adapters=build_adapters(config),
        credentials=credentials,
        transcript=JSONTranscriptStore(config.transcript_path),
        sink=sink,
    )
    session.recover_interrupted()
    return session


def mask(secret: str | None) -> str:
    """Show just enough of a secret to recognize it."""
    if not secret:
        return "(not set)"
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:4]}...{secret[-4:]}"


def prompt_for_keys(
    session: ChatSession,
    providers: Iterable[ProviderId],
    *,
    read_secret: Callable[[str], str] = getpass.getpass,
) -> list[ProviderId]:
    """Ask for each provider's key; blank input keeps the stored value.

    Returns the providers whose key was updated.
    """
    session.open_settings()
    updates: dict[ProviderId, str] = {}
    for provider in providers:
        value = read_secret(f"{provider.label} API key ({KEY_PAGES[provider]}): ").strip()
        if value:
            updates[provider] = value
    session.save_credentials(updates)
    return list(updates)


async def _read_line(prompt: str) -> str | None:
    try:
        return await asyncio.to_thread(input, prompt)
    except EOFError:
        return None


async def run_chat(session: ChatSession) -> int:
    """Interactive loop: Enter submits, ``/clear``, ``/keys`` and ``/quit`` act."""
    session.sink.render(session.turns(), awaiting=False)
    while True:
        line = await _read_line("> ")
        if line is None:
            break
        text = line.strip()
        if text in QUIT_COMMANDS:
            break
        if text == "/clear":
            session.clear()
            continue
        if text == "/keys":
            prompt_for_keys(session, session.providers)
            continue
        if not session.can_submit(text):
            continue

        outcome = await session.submit(text)
        if outcome is SubmitOutcome.MISSING_CREDENTIALS:
            prompt_for_keys(session, session.missing_credentials())
            if not session.missing_credentials():
                await session.submit(text)
    return 0


async def run_ask(session: ChatSession, prompt: str) -> int:
    """Submit one prompt and report how it went via the exit code."""
    outcome = await session.submit(prompt)
    if outcome is SubmitOutcome.ACCEPTED:
        return 0
    if outcome is SubmitOutcome.EMPTY:
        print("Prompt is empty.", file=sys.stderr)
    return 1


def run_keys(session: ChatSession, *, show: bool) -> int:
    if show:
        for provider in session.providers:
            print(f"- {provider.label}: {mask(session.credentials.get(provider))}")
        return 0
    updated = prompt_for_keys(session, session.providers)
    print(f"Saved {len(updated)} key(s).")
    return 0


def run_relay(config: Config, *, host: str, port: int) -> int:
    import uvicorn

    from chorus.relay import create_relay_app

    uvicorn.run(create_relay_app(config), host=host, port=port, log_level="info")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chorus",
        description="Ask ChatGPT, Gemini and Claude the same question at once.",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Where credentials and the transcript are stored (default: ~/.chorus)",
    )
    parser.add_argument(
        "--mock", action="store_true", help="Answer with offline echo adapters"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("chat", help="Interactive chat (default)")
    ask = sub.add_parser("ask", help="Send one prompt and print the replies")
    ask.add_argument("prompt", help="Prompt text")
    keys = sub.add_parser("keys", help="Enter or inspect provider API keys")
    keys.add_argument("--show", action="store_true", help="List masked keys")
    sub.add_parser("clear", help="Empty the transcript")
    relay = sub.add_parser("relay", help="Run the local Claude relay")
    relay.add_argument("--host", default="127.0.0.1")
    relay.add_argument("--port", type=int, default=8787)
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs one INFO line per request.
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def _run_session_command(args: argparse.Namespace, config: Config) -> int:
    session = build_session(config, sink=TerminalSink())
    try:
        if args.command == "ask":
            return await run_ask(session, args.prompt)
        if args.command == "keys":
            return run_keys(session, show=args.show)
        if args.command == "clear":
            session.clear()
            return 0
        return await run_chat(session)
    finally:
        await session.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``chorus`` command."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        overrides: dict[str, object] = {"use_mock": args.mock}
        if args.data_dir is not None:
            overrides["data_dir"] = args.data_dir
        config = Config(**overrides)  # type: ignore[arg-type]
        logger.debug("Using %s", config)

        if args.command == "relay":
            return run_relay(config, host=args.host, port=args.port)
        return asyncio.run(_run_session_command(args, config))
    except ChorusError as e:
        print(f"error: {e}", file=sys.stderr)
        if e.hint:
            print(f"hint: {e.hint}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130
