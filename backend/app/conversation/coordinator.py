"""Advance a conversation by one user/assistant exchange."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from app.conversation.client import ChatCompletionClient
from app.conversation.errors import LLMTransportError
from app.conversation.instructions import conversation_prompt
from app.conversation.session import (
    ConversationSession,
    SessionKind,
    SessionPhase,
    TurnFailure,
    TurnSuccess,
    apply_outcome,
    begin_turn,
)
from app.conversation.timeouts import run_with_timeout
from app.conversation.trigger import DEFAULT_TRIGGER_PHRASES, DEFAULT_TURN_THRESHOLD, should_extract

logger = logging.getLogger(__name__)

DEFAULT_TURN_TIMEOUT_SECONDS = 45.0


@dataclass(slots=True, frozen=True)
class SamplingOptions:
    temperature: float
    max_tokens: int | None = None


TURN_SAMPLING: dict[SessionKind, SamplingOptions] = {
    SessionKind.ONBOARDING: SamplingOptions(temperature=0.7, max_tokens=400),
    # slightly higher temperature keeps composer replies varied
    SessionKind.LOG_COMPOSER: SamplingOptions(temperature=0.8, max_tokens=200),
}


@dataclass(slots=True, frozen=True)
class TurnResult:
    """Outcome of a successful exchange."""

    session: ConversationSession
    reply: str

    @property
    def ready_to_extract(self) -> bool:
        return self.session.phase is SessionPhase.READY_TO_EXTRACT


def build_turn_messages(system_prompt: str, session: ConversationSession) -> list[dict[str, str]]:
    """System instruction followed by the full ordered transcript."""

    messages = [{"role": "system", "content": system_prompt.strip()}]
    messages.extend(session.messages())
    return messages


async def submit_utterance(
    session: ConversationSession,
    utterance: str,
    *,
    client: ChatCompletionClient,
    system_prompt: str | None = None,
    timeout_seconds: float = DEFAULT_TURN_TIMEOUT_SECONDS,
    trigger_threshold: int | None = DEFAULT_TURN_THRESHOLD,
    trigger_phrases: Iterable[str] = DEFAULT_TRIGGER_PHRASES,
    on_pending: Callable[[ConversationSession], None] | None = None,
) -> TurnResult:
    """Send ``utterance`` and append the assistant's reply.

    The user turn is appended optimistically (``on_pending`` sees that
    snapshot). If the provider call fails, the returned error carries the
    utterance and the rolled-back snapshot, which equals ``session``.
    Nothing is retried automatically.
    """

    pending, pending_turn = begin_turn(session, utterance)
    if pending.phase is SessionPhase.EXTRACTED:
        pending = pending.resume()
    if on_pending is not None:
        on_pending(pending)

    sampling = TURN_SAMPLING[session.kind]
    messages = build_turn_messages(system_prompt or conversation_prompt(session.kind), pending)
    try:
        reply = await run_with_timeout(
            client.complete,
            messages,
            temperature=sampling.temperature,
            max_tokens=sampling.max_tokens,
            timeout_seconds=timeout_seconds,
            operation=f"{session.kind.value} turn",
        )
    except LLMTransportError as exc:
        rolled_back = apply_outcome(pending, pending_turn, TurnFailure(exc))
        logger.warning("Turn failed for session %s (%s): %s", session.id, exc.code, exc)
        raise exc.with_retry_context(pending_turn.content, rolled_back.with_phase(session.phase))

    updated = apply_outcome(pending, pending_turn, TurnSuccess(reply))
    if updated.phase is SessionPhase.GATHERING and should_extract(
        updated.latest_assistant_text,
        updated.turn_count,
        threshold=trigger_threshold,
        phrases=trigger_phrases,
    ):
        logger.info("Session %s is ready to extract after %d messages", session.id, updated.turn_count)
        updated = updated.mark_ready()
    return TurnResult(session=updated, reply=reply)
