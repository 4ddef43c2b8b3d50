"""Conversation thread registry and turn/extraction orchestration."""

from __future__ import annotations

import logging
import random
import string
import time
from typing import Any, Iterable

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.conversation.client import ChatCompletionClient, ClientFactory, get_chat_client
from app.conversation.coordinator import submit_utterance
from app.conversation.instructions import greeting_for
from app.conversation.session import ConversationSession, SessionKind, SessionPhase, begin_turn
from app.extraction.extractor_interface import ExtractorInterface
from app.extraction.llm_extractor import log_draft_extractor, onboarding_extractor
from app.models.conversation_thread import ConversationThread
from app.schemas.chat import ExtractionReply, SessionCreated, TurnReply

logger = logging.getLogger(__name__)

THREAD_STATUS_ACTIVE = "active"
THREAD_STATUS_COMPLETED = "completed"
_BASE36 = string.digits + string.ascii_lowercase


class ThreadNotFoundError(LookupError):
    """Raised when a thread does not exist or belongs to someone else."""


def generate_thread_id(*, now_ms: int | None = None, rng: random.Random | None = None) -> str:
    """Locally generated opaque token, ``thread_<epoch ms>_<9 base36 chars>``."""

    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    chooser = rng or random.SystemRandom()
    suffix = "".join(chooser.choice(_BASE36) for _ in range(9))
    return f"thread_{stamp}_{suffix}"


def model_for(kind: SessionKind, settings: Settings) -> str:
    return settings.onboarding_model if kind is SessionKind.ONBOARDING else settings.log_model


def turn_threshold_for(kind: SessionKind, settings: Settings) -> int:
    if kind is SessionKind.ONBOARDING:
        return settings.onboarding_turn_threshold
    return settings.log_composer_turn_threshold


def default_extractor(
    kind: SessionKind,
    client: ChatCompletionClient,
    settings: Settings,
) -> ExtractorInterface[Any]:
    if kind is SessionKind.ONBOARDING:
        return onboarding_extractor(client, timeout_seconds=settings.extraction_timeout_seconds)
    return log_draft_extractor(client, timeout_seconds=settings.extraction_timeout_seconds)


def create_thread(db: Session, *, user_id: str, kind: SessionKind) -> ConversationThread:
    thread = ConversationThread(
        thread_id=generate_thread_id(),
        user_id=user_id,
        kind=kind.value,
        status=THREAD_STATUS_ACTIVE,
    )
    db.add(thread)
    db.commit()
    db.refresh(thread)
    return thread


def get_owned_thread(db: Session, thread_id: str, *, user_id: str, kind: SessionKind) -> ConversationThread:
    """Return the caller's thread of the given kind or raise ``ThreadNotFoundError``."""

    stmt = select(ConversationThread).where(
        ConversationThread.thread_id == thread_id,
        ConversationThread.user_id == user_id,
        ConversationThread.kind == kind.value,
    )
    thread = db.scalars(stmt).first()
    if thread is None:
        raise ThreadNotFoundError(f"Conversation {thread_id} not found")
    return thread


def record_extraction(db: Session, thread: ConversationThread, data: dict[str, Any]) -> ConversationThread:
    thread.status = THREAD_STATUS_COMPLETED
    thread.extracted_data_json = data
    db.commit()
    db.refresh(thread)
    return thread


def reopen_thread(db: Session, thread: ConversationThread) -> ConversationThread:
    if thread.status != THREAD_STATUS_ACTIVE:
        thread.status = THREAD_STATUS_ACTIVE
        db.commit()
        db.refresh(thread)
    return thread


def session_for(thread: ConversationThread, kind: SessionKind, history: Iterable[Any]) -> ConversationSession:
    phase = SessionPhase.EXTRACTED if thread.status == THREAD_STATUS_COMPLETED else SessionPhase.GATHERING
    return ConversationSession.from_history(thread.thread_id, kind, history, phase=phase)


def _build_client(
    kind: SessionKind,
    settings: Settings,
    chat_client: ChatCompletionClient | None,
    client_factory: ClientFactory | None,
) -> ChatCompletionClient:
    if chat_client is not None:
        return chat_client
    if client_factory is not None:
        return client_factory(model_for(kind, settings))
    return get_chat_client(model_for(kind, settings), settings=settings)


def start_conversation(db: Session, *, user_id: str, kind: SessionKind) -> SessionCreated:
    """Register a thread and return it with the assistant's opening line."""

    thread = create_thread(db, user_id=user_id, kind=kind)
    logger.info("Started %s conversation %s for user %s", kind.value, thread.thread_id, user_id)
    return SessionCreated(session_id=thread.thread_id, greeting_text=greeting_for(kind))


async def run_turn(
    db: Session,
    *,
    user_id: str,
    kind: SessionKind,
    thread_id: str,
    text: str,
    history: Iterable[Any],
    chat_client: ChatCompletionClient | None = None,
    client_factory: ClientFactory | None = None,
    settings: Settings | None = None,
) -> TurnReply:
    """Replay the client's history plus ``text`` and return the assistant's reply.

    The thread lookup and the utterance check run before a provider client is
    built, so unknown threads and blank input are reported even when no
    provider is configured. Database calls run in the threadpool.
    """

    settings = settings or get_settings()
    thread = await run_in_threadpool(get_owned_thread, db, thread_id, user_id=user_id, kind=kind)
    session = session_for(thread, kind, history)
    begin_turn(session, text)
    client = _build_client(kind, settings, chat_client, client_factory)

    result = await submit_utterance(
        session,
        text,
        client=client,
        timeout_seconds=settings.turn_timeout_seconds,
        trigger_threshold=turn_threshold_for(kind, settings),
    )
    if thread.status == THREAD_STATUS_COMPLETED:
        await run_in_threadpool(reopen_thread, db, thread)
    return TurnReply(
        session_id=thread.thread_id,
        reply_text=result.reply,
        phase=result.session.phase,
        ready_to_extract=result.ready_to_extract,
    )


async def run_extraction(
    db: Session,
    *,
    user_id: str,
    kind: SessionKind,
    thread_id: str,
    history: Iterable[Any],
    chat_client: ChatCompletionClient | None = None,
    client_factory: ClientFactory | None = None,
    extractor: ExtractorInterface[Any] | None = None,
    settings: Settings | None = None,
) -> ExtractionReply[Any]:
    """Extract the structured object from the client's transcript and record it."""

    settings = settings or get_settings()
    thread = await run_in_threadpool(get_owned_thread, db, thread_id, user_id=user_id, kind=kind)
    session = session_for(thread, kind, history)
    if extractor is None:
        extractor = default_extractor(kind, _build_client(kind, settings, chat_client, client_factory), settings)

    extracted = await extractor.extract(session)
    payload = extracted.model_dump(mode="json") if isinstance(extracted, BaseModel) else dict(extracted)
    await run_in_threadpool(record_extraction, db, thread, payload)
    logger.info("Extracted %s data for conversation %s", kind.value, thread.thread_id)
    return ExtractionReply[Any](
        session_id=thread.thread_id,
        phase=session.mark_extracted().phase,
        extracted_data=extracted,
    )
