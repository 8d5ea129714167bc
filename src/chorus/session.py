"""Chat session: the per-session context object and its handlers.

A `ChatSession` owns the session state (whether a turn is in flight, whether
the credentials screen is open) together with the stores, adapters and render
sink that the handlers act on. All transcript mutation happens on the event
loop at two points per turn: before the first network await (user turn and
placeholder) and after every provider has settled (one atomic update).
"""

from __future__ import annotations

import asyncio
from enum import Enum
import logging
from typing import TYPE_CHECKING

from chorus.credentials import missing_credentials
from chorus.fanout import fan_out
from chorus.render import NullSink
from chorus.types import AssistantTurn, ProviderResult, UserTurn

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chorus.credentials import CredentialStore
    from chorus.providers.base import ProviderAdapter
    from chorus.render import RenderSink
    from chorus.transcript import TranscriptStore
    from chorus.types import ProviderId, Turn

logger = logging.getLogger(__name__)

INTERRUPTED_MESSAGE = "응답을 받기 전에 세션이 종료되었습니다."


class SubmitOutcome(str, Enum):
    """What `ChatSession.submit` did with a prompt."""

    ACCEPTED = "accepted"
    EMPTY = "empty"
    BUSY = "busy"
    MISSING_CREDENTIALS = "missing_credentials"


class ChatSession:
    """Per-session context object passed to every user-facing handler."""

    def __init__(
        self,
        *,
        adapters: Mapping[ProviderId, ProviderAdapter],
        credentials: CredentialStore,
        transcript: TranscriptStore,
        sink: RenderSink | None = None,
    ) -> None:
        self.adapters = dict(adapters)
        self.credentials = credentials
        self.transcript = transcript
        self.sink: RenderSink = sink if sink is not None else NullSink()
        self.awaiting_turn = False
        self.settings_open = False

    @property
    def providers(self) -> tuple[ProviderId, ...]:
        return tuple(self.adapters)

    def turns(self) -> list[Turn]:
        return self.transcript.get_all()

    def missing_credentials(self) -> list[ProviderId]:
        return missing_credentials(self.credentials, self.providers)

    def can_submit(self, prompt: str) -> bool:
        """Whether the submit control is enabled for *prompt*."""
        return not self.awaiting_turn and bool(prompt.strip())

    async def submit(self, prompt: str) -> SubmitOutcome:
        """Run one user turn: record it, fan out, and commit every reply at once.

        Nothing is recorded and no provider is called unless the prompt is
        non-empty, no other turn is in flight, and every configured provider
        has a credential. A missing credential opens the settings screen.
        """
        if not prompt.strip():
            return SubmitOutcome.EMPTY
        if self.awaiting_turn:
            logger.debug("Ignoring submission while a turn is in flight")
            return SubmitOutcome.BUSY

        missing = self.missing_credentials()
        if missing:
            logger.info(
                "Missing credentials for: %s", ", ".join(p.value for p in missing)
            )
            self.settings_open = True
            self.sink.request_credentials(missing)
            return SubmitOutcome.MISSING_CREDENTIALS

        credentials = {p: self.credentials.get(p) or "" for p in self.providers}
        placeholder = AssistantTurn.placeholder(self.providers)

        self.awaiting_turn = True
        try:
            self.transcript.append(UserTurn(prompt))
            self.transcript.append(placeholder)
            self._render()

            try:
                results = await fan_out(prompt, self.adapters, credentials)
            except BaseException:
                interrupted = {
                    p: ProviderResult.failed(INTERRUPTED_MESSAGE) for p in self.providers
                }
                self._commit(placeholder, placeholder.settle(interrupted))
                raise
            self._commit(placeholder, placeholder.settle(results))
        finally:
            self.awaiting_turn = False
        self._render()
        return SubmitOutcome.ACCEPTED

    def clear(self) -> None:
        """Empty the transcript. Safe to call repeatedly.

        A turn still in flight finishes without recording its replies.
        """
        self.transcript.clear()
        self._render()

    def open_settings(self) -> None:
        self.settings_open = True

    def close_settings(self) -> None:
        self.settings_open = False

    def save_credentials(self, secrets: Mapping[ProviderId, str]) -> None:
        """Store the given secrets and close the credentials screen."""
        for provider, value in secrets.items():
            self.credentials.set(provider, value)
        self.settings_open = False

    def recover_interrupted(self) -> bool:
        """Settle a placeholder left pending by a session that died mid-turn.

        Returns True when a turn was repaired.
        """
        turns = self.transcript.get_all()
        if not turns:
            return False
        last = turns[-1]
        if not isinstance(last, AssistantTurn) or last.is_settled:
            return False

        outcomes = {
            p: ProviderResult.failed(INTERRUPTED_MESSAGE) if r.is_pending else r
            for p, r in last.responses.items()
        }
        # Already-settled entries keep their value; only pending ones move.
        repaired = AssistantTurn(outcomes, timestamp=last.timestamp)
        self.transcript.update_last(repaired)
        logger.info("Recovered an interrupted turn from %s", last.timestamp.isoformat())
        return True

    async def aclose(self) -> None:
        """Release every adapter's network resources."""
        for adapter in self.adapters.values():
            try:
                await adapter.aclose()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                # Cleanup should never mask the primary failure.
                logger.warning("Adapter cleanup failed: %s", exc)

    def _commit(self, placeholder: AssistantTurn, settled: AssistantTurn) -> bool:
        """Replace *placeholder* with *settled* if it is still the last turn."""
        turns = self.transcript.get_all()
        if not turns or turns[-1] != placeholder:
            # Cleared while the turn was in flight.
            logger.warning(
                "Dropping replies: their placeholder is no longer in the transcript"
            )
            return False
        self.transcript.update_last(settled)
        return True

    def _render(self) -> None:
        self.sink.render(self.transcript.get_all(), awaiting=self.awaiting_turn)
