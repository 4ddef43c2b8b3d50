"""Syllabus generation routes."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.auth import get_current_user_id
from app.config import Settings, get_settings
from app.conversation.client import ClientFactory, get_client_factory
from app.conversation.errors import ConversationError
from app.db.dependencies import get_db
from app.routers.errors import not_found, to_http_exception
from app.schemas.common import ApiResponse
from app.schemas.syllabus import SyllabusRead, SyllabusRequest
from app.services.syllabus import SyllabusNotFoundError, create_syllabus, get_syllabus

router = APIRouter(prefix="/syllabi")


@router.post("", response_model=ApiResponse[SyllabusRead], status_code=201)
async def generate_syllabus(
    payload: SyllabusRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> ApiResponse[SyllabusRead]:
    """Generate a week-by-week plan from a profile and store it."""

    try:
        syllabus = await create_syllabus(
            db,
            user_id=user_id,
            answers=payload.to_answers(),
            client_factory=client_factory,
            settings=settings,
        )
    except ConversationError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(data=syllabus)


@router.get("/{syllabus_id}", response_model=ApiResponse[SyllabusRead])
def read_syllabus(
    syllabus_id: int = Path(..., ge=1),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[SyllabusRead]:
    try:
        syllabus = get_syllabus(db, syllabus_id, user_id=user_id)
    except SyllabusNotFoundError as exc:
        raise not_found(str(exc)) from exc
    return ApiResponse(data=syllabus)
