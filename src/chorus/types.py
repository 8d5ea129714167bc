"""Core value types: providers, per-provider results, and transcript turns."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from chorus.errors import InternalError, TranscriptError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


class ProviderId(str, Enum):
    """Identifier of one integrated conversational AI provider."""

    OPENAI = "openai"
    GEMINI = "gemini"
    CLAUDE = "claude"

    @property
    def label(self) -> str:
        """Human-facing provider name."""
        return _LABELS[self]


_LABELS = {
    ProviderId.OPENAI: "ChatGPT",
    ProviderId.GEMINI: "Gemini",
    ProviderId.CLAUDE: "Claude",
}


class ResultStatus(str, Enum):
    """Lifecycle state of one provider's reply within a turn."""

    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ProviderResult:
    """One provider's outcome for a turn.

    Starts ``PENDING`` and settles exactly once to ``DONE`` (``text`` is the
    reply) or ``FAILED`` (``text`` is a human-readable error message).
    """

    status: ResultStatus
    text: str = ""

    @classmethod
    def pending(cls) -> ProviderResult:
        return cls(ResultStatus.PENDING)

    @classmethod
    def done(cls, text: str) -> ProviderResult:
        return cls(ResultStatus.DONE, text)

    @classmethod
    def failed(cls, message: str) -> ProviderResult:
        return cls(ResultStatus.FAILED, message)

    @property
    def is_pending(self) -> bool:
        return self.status is ResultStatus.PENDING

    def settle(self, outcome: ProviderResult) -> ProviderResult:
        """Return *outcome* as the settled successor of this pending result."""
        if not self.is_pending:
            raise InternalError(
                f"Result already settled as {self.status.value}",
                hint="A provider result transitions out of pending exactly once.",
            )
        if outcome.is_pending:
            raise InternalError("Cannot settle a result to pending")
        return outcome


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class UserTurn:
    """The user's input for one exchange."""

    text: str
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class AssistantTurn:
    """The combined provider replies for one exchange.

    The provider key set is fixed when the turn is created; settlement only
    ever replaces each pending entry once.
    """

    responses: Mapping[ProviderId, ProviderResult]
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        object.__setattr__(self, "responses", MappingProxyType(dict(self.responses)))

    @classmethod
    def placeholder(cls, providers: Iterable[ProviderId]) -> AssistantTurn:
        """Create a turn with every provider pending."""
        return cls({p: ProviderResult.pending() for p in providers})

    @property
    def providers(self) -> tuple[ProviderId, ...]:
        return tuple(self.responses)

    @property
    def is_settled(self) -> bool:
        return not any(r.is_pending for r in self.responses.values())

    def settle(self, outcomes: Mapping[ProviderId, ProviderResult]) -> AssistantTurn:
        """Return this turn with every entry settled to its outcome.

        Raises:
            InternalError: If the outcome keys differ from the turn's keys, or
                an entry is already settled or would stay pending.
        """
        if set(outcomes) != set(self.responses):
            raise InternalError(
                "Settlement must cover exactly the providers of the turn",
                hint=(
                    f"turn={sorted(p.value for p in self.responses)} "
                    f"outcomes={sorted(p.value for p in outcomes)}"
                ),
            )
        settled = {p: r.settle(outcomes[p]) for p, r in self.responses.items()}
        return AssistantTurn(settled, timestamp=self.timestamp)


Turn = UserTurn | AssistantTurn


# =============================================================================
# Persistence shape
# =============================================================================


def turn_to_dict(turn: Turn) -> dict[str, Any]:
    """Serialize a turn into its persisted JSON record."""
    if isinstance(turn, UserTurn):
        return {
            "role": "user",
            "content": turn.text,
            "timestamp": turn.timestamp.isoformat(),
        }
    return {
        "role": "assistant",
        "timestamp": turn.timestamp.isoformat(),
        "responses": {
            p.value: {"status": r.status.value, "text": r.text}
            for p, r in turn.responses.items()
        },
    }


def turn_from_dict(record: Any) -> Turn:
    """Rebuild a turn from its persisted JSON record.

    Raises:
        TranscriptError: If the record is not a recognizable turn.
    """
    if not isinstance(record, dict):
        raise TranscriptError(f"Turn record must be an object, got {type(record).__name__}")

    role = record.get("role")
    try:
        timestamp = datetime.fromisoformat(str(record.get("timestamp")))
    except ValueError as e:
        raise TranscriptError(f"Invalid turn timestamp: {record.get('timestamp')!r}") from e

    if role == "user":
        content = record.get("content")
        if not isinstance(content, str):
            raise TranscriptError("User turn is missing its content")
        return UserTurn(content, timestamp=timestamp)

    if role == "assistant":
        raw = record.get("responses")
        if not isinstance(raw, dict):
            raise TranscriptError("Assistant turn is missing its responses")
        responses: dict[ProviderId, ProviderResult] = {}
        for key, value in raw.items():
            try:
                provider = ProviderId(key)
                status = ResultStatus(value.get("status"))
            except (ValueError, AttributeError) as e:
                raise TranscriptError(f"Invalid response entry for {key!r}") from e
            responses[provider] = ProviderResult(status, str(value.get("text", "")))
        return AssistantTurn(responses, timestamp=timestamp)

    raise TranscriptError(f"Unknown turn role: {role!r}")
