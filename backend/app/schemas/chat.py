"""Schemas for the conversational onboarding and log composer endpoints."""

from datetime import datetime
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, Field

from app.conversation.session import SessionPhase

T = TypeVar("T")


class ChatMessage(BaseModel):
    """One transcript message as held by the client."""

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime | None = None


class SessionCreated(BaseModel):
    """Response payload for a new conversation."""

    session_id: str
    greeting_text: str


class TurnRequest(BaseModel):
    """Request payload for one conversational turn.

    ``history`` is the transcript before ``text``; it is replayed verbatim.
    """

    text: str
    history: list[ChatMessage] = Field(default_factory=list)


class TurnReply(BaseModel):
    """Response payload for one conversational turn."""

    session_id: str
    reply_text: str
    phase: SessionPhase
    ready_to_extract: bool


class ExtractionRequest(BaseModel):
    """Request payload for extraction over the client's transcript."""

    history: list[ChatMessage] = Field(default_factory=list, min_length=1)


class ExtractionReply(BaseModel, Generic[T]):
    """Response payload carrying the structured object."""

    session_id: str
    phase: SessionPhase
    extracted_data: T
