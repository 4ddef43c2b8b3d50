"""Writing-assist routes."""

from fastapi import APIRouter, Depends, File, UploadFile

from app.auth import get_current_user_id
from app.config import Settings, get_settings
from app.conversation.client import (
    ClientFactory,
    TranscriptionClientFactory,
    get_client_factory,
    get_transcription_client_factory,
)
from app.conversation.errors import ConversationError
from app.routers.errors import to_http_exception
from app.schemas.assist import (
    EnhanceRequest,
    EnhanceResult,
    ExpandRequest,
    ExpandResult,
    MetadataRequest,
    SummarizeRequest,
    SummarizeResult,
    TranscriptionResult,
)
from app.schemas.common import ApiResponse
from app.schemas.log_entry import LogMetadata
from app.services import writing_assist

router = APIRouter(prefix="/assist", dependencies=[Depends(get_current_user_id)])


@router.post("/enhance", response_model=ApiResponse[EnhanceResult])
async def enhance_text(
    payload: EnhanceRequest,
    settings: Settings = Depends(get_settings),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> ApiResponse[EnhanceResult]:
    try:
        enhanced = await writing_assist.enhance(
            payload.text,
            payload.style,
            client_factory=client_factory,
            settings=settings,
        )
    except ConversationError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(data=EnhanceResult(enhanced=enhanced))


@router.post("/expand", response_model=ApiResponse[ExpandResult])
async def expand_bullets(
    payload: ExpandRequest,
    settings: Settings = Depends(get_settings),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> ApiResponse[ExpandResult]:
    try:
        draft = await writing_assist.expand(payload.bullets, client_factory=client_factory, settings=settings)
    except ConversationError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(data=ExpandResult(draft=draft))


@router.post("/summarize", response_model=ApiResponse[SummarizeResult])
async def summarize_text(
    payload: SummarizeRequest,
    settings: Settings = Depends(get_settings),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> ApiResponse[SummarizeResult]:
    try:
        tldr = await writing_assist.summarize(payload.text, client_factory=client_factory, settings=settings)
    except ConversationError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(data=SummarizeResult(tldr=tldr))


@router.post("/extract", response_model=ApiResponse[LogMetadata])
async def extract_metadata(
    payload: MetadataRequest,
    settings: Settings = Depends(get_settings),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> ApiResponse[LogMetadata]:
    """Tags, tools, minutes and mood found in free text."""

    try:
        metadata = await writing_assist.extract_metadata(payload.text, client_factory=client_factory, settings=settings)
    except ConversationError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(data=metadata)


@router.post("/transcribe", response_model=ApiResponse[TranscriptionResult])
async def transcribe_audio(
    audio: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
    client_factory: TranscriptionClientFactory = Depends(get_transcription_client_factory),
) -> ApiResponse[TranscriptionResult]:
    """Speech-to-text for a recorded voice note (multipart field ``audio``)."""

    data = await audio.read()
    try:
        transcript = await writing_assist.transcribe(
            data,
            filename=audio.filename,
            content_type=audio.content_type,
            client_factory=client_factory,
            settings=settings,
        )
    except ConversationError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(data=TranscriptionResult(text=transcript.text, duration_sec=transcript.duration_sec))
