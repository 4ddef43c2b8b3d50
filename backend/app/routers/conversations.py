"""Onboarding coach and log composer conversation routes."""

from typing import Any

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.auth import get_current_user_id
from app.config import Settings, get_settings
from app.conversation.client import ClientFactory, get_client_factory
from app.conversation.errors import ConversationError
from app.conversation.session import SessionKind
from app.db.dependencies import get_db
from app.routers.errors import not_found, to_http_exception
from app.schemas.chat import ExtractionReply, ExtractionRequest, SessionCreated, TurnReply, TurnRequest
from app.schemas.common import ApiResponse
from app.schemas.log_entry import LogDraft
from app.schemas.onboarding import OnboardingProfile
from app.services.conversations import (
    ThreadNotFoundError,
    run_extraction,
    run_turn,
    start_conversation,
)


def build_conversation_router(kind: SessionKind, prefix: str, result_type: Any) -> APIRouter:
    """Session, turn and extract routes for one assistant kind."""

    router = APIRouter(prefix=prefix)

    @router.post("/sessions", response_model=ApiResponse[SessionCreated], status_code=201)
    def create_session(
        user_id: str = Depends(get_current_user_id),
        db: Session = Depends(get_db),
    ) -> ApiResponse[SessionCreated]:
        return ApiResponse(data=start_conversation(db, user_id=user_id, kind=kind))

    @router.post("/sessions/{session_id}/turns", response_model=ApiResponse[TurnReply])
    async def submit_turn(
        payload: TurnRequest,
        session_id: str = Path(..., min_length=1),
        user_id: str = Depends(get_current_user_id),
        db: Session = Depends(get_db),
        settings: Settings = Depends(get_settings),
        client_factory: ClientFactory = Depends(get_client_factory),
    ) -> ApiResponse[TurnReply]:
        """Send one utterance; a failed call leaves the transcript as it was."""

        try:
            result = await run_turn(
                db,
                user_id=user_id,
                kind=kind,
                thread_id=session_id,
                text=payload.text,
                history=payload.history,
                client_factory=client_factory,
                settings=settings,
            )
        except ThreadNotFoundError as exc:
            raise not_found(str(exc)) from exc
        except ConversationError as exc:
            raise to_http_exception(exc) from exc
        return ApiResponse(data=result)

    @router.post("/sessions/{session_id}/extract", response_model=ApiResponse[ExtractionReply[result_type]])
    async def extract(
        payload: ExtractionRequest,
        session_id: str = Path(..., min_length=1),
        user_id: str = Depends(get_current_user_id),
        db: Session = Depends(get_db),
        settings: Settings = Depends(get_settings),
        client_factory: ClientFactory = Depends(get_client_factory),
    ) -> ApiResponse[Any]:
        """Extract the structured result; callable at any point of the conversation."""

        try:
            result = await run_extraction(
                db,
                user_id=user_id,
                kind=kind,
                thread_id=session_id,
                history=payload.history,
                client_factory=client_factory,
                settings=settings,
            )
        except ThreadNotFoundError as exc:
            raise not_found(str(exc)) from exc
        except ConversationError as exc:
            raise to_http_exception(exc) from exc
        return ApiResponse(data=result)

    return router


onboarding_router = build_conversation_router(SessionKind.ONBOARDING, "/onboarding", OnboardingProfile)
log_composer_router = build_conversation_router(SessionKind.LOG_COMPOSER, "/log-composer", LogDraft)
