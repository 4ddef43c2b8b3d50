"""Conversation session snapshots and the turn outcome transition."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Literal

from app.conversation.errors import InvalidInputError, LLMTransportError

TurnRole = Literal["user", "assistant"]
_VALID_ROLES: frozenset[str] = frozenset({"user", "assistant"})


class SessionPhase(str, Enum):
    """Lifecycle of a conversational data-collection flow."""

    GATHERING = "gathering"
    READY_TO_EXTRACT = "ready_to_extract"
    EXTRACTED = "extracted"


class SessionKind(str, Enum):
    """Which assistant a session talks to."""

    ONBOARDING = "onboarding"
    LOG_COMPOSER = "log_composer"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class Turn:
    """One message in the transcript."""

    role: TurnRole
    content: str
    timestamp: datetime = field(default_factory=_utcnow)

    def as_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(slots=True, frozen=True)
class ConversationSession:
    """Immutable snapshot of one conversation.

    Turn order is the conversation order and is replayed verbatim as prompt
    history. Every transition returns a new snapshot.
    """

    id: str
    kind: SessionKind = SessionKind.LOG_COMPOSER
    turns: tuple[Turn, ...] = ()
    phase: SessionPhase = SessionPhase.GATHERING

    @classmethod
    def from_history(
        cls,
        session_id: str,
        kind: SessionKind,
        history: Iterable[Any],
        *,
        phase: SessionPhase = SessionPhase.GATHERING,
    ) -> "ConversationSession":
        """Rebuild a session from a client-supplied history.

        Items may be mappings or objects exposing ``role``/``content``. Unknown
        roles and blank messages are skipped.
        """

        turns: list[Turn] = []
        for item in history:
            if isinstance(item, dict):
                role = item.get("role")
                content = item.get("content")
                timestamp = item.get("timestamp")
            else:
                role = getattr(item, "role", None)
                content = getattr(item, "content", None)
                timestamp = getattr(item, "timestamp", None)
            role = str(role or "").strip().lower()
            content = str(content or "").strip()
            if role not in _VALID_ROLES or not content:
                continue
            if isinstance(timestamp, datetime):
                turns.append(Turn(role=role, content=content, timestamp=timestamp))  # type: ignore[arg-type]
            else:
                turns.append(Turn(role=role, content=content))  # type: ignore[arg-type]
        return cls(id=session_id, kind=kind, turns=tuple(turns), phase=phase)

    @property
    def turn_count(self) -> int:
        return len(self.turns)

    @property
    def latest_assistant_text(self) -> str:
        for turn in reversed(self.turns):
            if turn.role == "assistant":
                return turn.content
        return ""

    def messages(self) -> list[dict[str, str]]:
        """Transcript as chat-completion messages."""

        return [turn.as_message() for turn in self.turns]

    def user_texts(self) -> list[str]:
        return [turn.content for turn in self.turns if turn.role == "user"]

    def with_turn(self, turn: Turn) -> "ConversationSession":
        return dataclasses.replace(self, turns=self.turns + (turn,))

    def with_phase(self, phase: SessionPhase) -> "ConversationSession":
        return dataclasses.replace(self, phase=phase)

    def mark_ready(self) -> "ConversationSession":
        if self.phase is SessionPhase.GATHERING:
            return self.with_phase(SessionPhase.READY_TO_EXTRACT)
        return self

    def mark_extracted(self) -> "ConversationSession":
        return self.with_phase(SessionPhase.EXTRACTED)

    def resume(self) -> "ConversationSession":
        """Go back to gathering after the user reviewed an extraction."""

        return self.with_phase(SessionPhase.GATHERING)


@dataclass(slots=True, frozen=True)
class TurnSuccess:
    reply: str


@dataclass(slots=True, frozen=True)
class TurnFailure:
    error: LLMTransportError


TurnOutcome = TurnSuccess | TurnFailure


def begin_turn(session: ConversationSession, utterance: str) -> tuple[ConversationSession, Turn]:
    """Optimistically append a user turn; return the pending snapshot and the turn."""

    trimmed = (utterance or "").strip()
    if not trimmed:
        raise InvalidInputError("Message content cannot be empty.")
    pending_turn = Turn(role="user", content=trimmed)
    return session.with_turn(pending_turn), pending_turn


def apply_outcome(
    pending: ConversationSession,
    pending_turn: Turn,
    outcome: TurnOutcome,
) -> ConversationSession:
    """Resolve an optimistic user turn.

    Success appends the assistant reply. Failure removes exactly the pending
    user turn so the transcript matches what the model actually saw.
    """

    if not pending.turns or pending.turns[-1] is not pending_turn:
        raise ValueError("pending turn is not the last turn of the session")
    if isinstance(outcome, TurnSuccess):
        return pending.with_turn(Turn(role="assistant", content=outcome.reply))
    return dataclasses.replace(pending, turns=pending.turns[:-1])
