"""Append-only transcript store interfaces and JSON implementation.

Defines the `TranscriptStore` protocol and two implementations: an in-memory
store and a `JSONTranscriptStore` that persists turns as a JSON array so a
session can be restored later.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from chorus.errors import TranscriptError
from chorus.types import AssistantTurn, turn_from_dict, turn_to_dict

if TYPE_CHECKING:
    import os

    from chorus.types import Turn

logger = logging.getLogger(__name__)


class TranscriptStore(Protocol):
    """Protocol for the ordered log of user and assistant turns."""

    def append(self, turn: Turn) -> None:
        """Add *turn* at the end of the transcript."""
        ...

    def update_last(self, turn: AssistantTurn) -> None:
        """Replace the most recent assistant turn with its settled version."""
        ...

    def get_all(self) -> list[Turn]:
        """Return every turn in order."""
        ...

    def clear(self) -> None:
        """Remove every turn. Idempotent."""
        ...


def _check_replaceable(turns: list[Turn], turn: AssistantTurn) -> None:
    """Validate that *turn* may replace the last entry of *turns*."""
    if not turns:
        raise TranscriptError("Cannot update the last turn of an empty transcript")
    last = turns[-1]
    if not isinstance(last, AssistantTurn):
        raise TranscriptError(
            "The last turn is not an assistant turn",
            hint="update_last only settles the placeholder appended for the current turn.",
        )
    if set(last.responses) != set(turn.responses):
        raise TranscriptError(
            "Provider set of an assistant turn cannot change",
            hint=(
                f"stored={sorted(p.value for p in last.responses)} "
                f"update={sorted(p.value for p in turn.responses)}"
            ),
        )


class MemoryTranscriptStore:
    """Transcript store that lives only as long as the process."""

    def __init__(self) -> None:
        self._turns: list[Turn] = []

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)

    def update_last(self, turn: AssistantTurn) -> None:
        _check_replaceable(self._turns, turn)
        self._turns[-1] = turn

    def get_all(self) -> list[Turn]:
        return list(self._turns)

    def clear(self) -> None:
        self._turns.clear()


class JSONTranscriptStore:
    """Transcript persisted as a JSON array of turn records.

    Uses copy-on-write: write to a temp file and rename for atomicity.
    Shape saved per turn:
      {"role": "user", "content": ..., "timestamp": ...}
      {"role": "assistant", "timestamp": ..., "responses": {id: {"status", "text"}}}
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        """Initialize the store pointing at a JSON file path."""
        self._path = Path(path)

    def append(self, turn: Turn) -> None:
        turns = self._read_all()
        turns.append(turn)
        self._write_all(turns)

    def update_last(self, turn: AssistantTurn) -> None:
        turns = self._read_all()
        _check_replaceable(turns, turn)
        turns[-1] = turn
        self._write_all(turns)

    def get_all(self) -> list[Turn]:
        return self._read_all()

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)

    def _read_all(self) -> list[Turn]:
        """Read and deserialize every turn from the file."""
        if not self._path.exists():
            return []
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                raise TranscriptError("Transcript file must hold a JSON array")
            return [turn_from_dict(record) for record in raw]
        except (OSError, ValueError, TranscriptError) as e:
            logger.warning("Ignoring unreadable transcript %s: %s", self._path, e)
            return []

    def _write_all(self, turns: list[Turn]) -> None:
        """Persist turns atomically via temp file rename."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        records = [turn_to_dict(t) for t in turns]
        tmp.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self._path)
