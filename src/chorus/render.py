"""Presentation sinks: where the session sends transcript and credential prompts.

The terminal renderer aims for:
- one block per turn, user input marked with ``>``
- provider replies side by side, one column per provider
- an explicit typing indicator while a provider is pending
"""

from __future__ import annotations

from itertools import zip_longest
import shutil
import textwrap
from typing import TYPE_CHECKING, Protocol, TextIO

from chorus.types import AssistantTurn, ProviderId, ResultStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chorus.types import ProviderResult, Turn

EMPTY_HINT = "세 AI에게 동시에 질문해보세요!"
EMPTY_SUBHINT = "하나의 질문으로 다양한 관점을 얻을 수 있습니다."
TYPING_INDICATOR = "..."
FAILED_MARKER = "[!] "

KEY_PAGES: dict[ProviderId, str] = {
    ProviderId.OPENAI: "https://platform.openai.com/api-keys",
    ProviderId.GEMINI: "https://aistudio.google.com/app/apikey",
    ProviderId.CLAUDE: "https://console.anthropic.com/settings/keys",
}


class RenderSink(Protocol):
    """Protocol for the presentation layer the session renders into."""

    def render(self, turns: Sequence[Turn], *, awaiting: bool) -> None:
        """Show the whole transcript; *awaiting* is true while a turn is in flight."""
        ...

    def request_credentials(self, missing: Sequence[ProviderId]) -> None:
        """Ask the user to supply the secrets of *missing* providers."""
        ...


class NullSink:
    """Sink that discards everything."""

    def render(self, turns: Sequence[Turn], *, awaiting: bool) -> None:
        del turns, awaiting

    def request_credentials(self, missing: Sequence[ProviderId]) -> None:
        del missing


def _cell_text(result: ProviderResult) -> str:
    if result.status is ResultStatus.PENDING:
        return TYPING_INDICATOR
    if result.status is ResultStatus.FAILED:
        return FAILED_MARKER + result.text
    return result.text


def format_columns(turn: AssistantTurn, *, width: int, gap: int = 3) -> list[str]:
    """Lay out an assistant turn as side-by-side columns within *width*."""
    providers = turn.providers
    if not providers:
        return []
    col = max(12, (width - gap * (len(providers) - 1)) // len(providers))

    columns: list[list[str]] = []
    for provider in providers:
        lines = [provider.label, "-" * min(col, len(provider.label))]
        for paragraph in _cell_text(turn.responses[provider]).splitlines() or [""]:
            lines.extend(textwrap.wrap(paragraph, col) or [""])
        columns.append(lines)

    sep = " " * gap
    return [
        sep.join(cell.ljust(col) for cell in row).rstrip()
        for row in zip_longest(*columns, fillvalue="")
    ]


class TerminalSink:
    """Plain-text renderer for interactive terminals."""

    def __init__(self, stream: TextIO | None = None, *, width: int | None = None) -> None:
        self._stream = stream
        self._width = width
        self._drawn = False

    def _print(self, text: str = "") -> None:
        print(text, file=self._stream)

    @property
    def width(self) -> int:
        if self._width is not None:
            return self._width
        return shutil.get_terminal_size((100, 24)).columns

    def render(self, turns: Sequence[Turn], *, awaiting: bool) -> None:
        first_frame = not self._drawn
        self._drawn = True
        if not turns:
            self._print(EMPTY_HINT)
            self._print(EMPTY_SUBHINT)
            return

        # The first frame shows a restored transcript in full; after that only
        # the newest exchange changes between renders.
        for turn in turns if first_frame else turns[-2:]:
            if isinstance(turn, AssistantTurn):
                for line in format_columns(turn, width=self.width):
                    self._print(line)
                self._print()
            else:
                self._print(f"> {turn.text}")
                self._print()
        if awaiting:
            self._print("(waiting for every provider to answer...)")

    def request_credentials(self, missing: Sequence[ProviderId]) -> None:
        self._print("먼저 설정에서 API 키를 모두 입력해주세요!")
        for provider in missing:
            self._print(f"- {provider.label}: {KEY_PAGES[provider]}")
