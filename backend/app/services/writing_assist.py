"""One-shot writing helpers for daily log entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.config import Settings, get_settings
from app.conversation.client import (
    ChatCompletionClient,
    ClientFactory,
    Transcript,
    TranscriptionClient,
    TranscriptionClientFactory,
    get_chat_client,
    get_transcription_client,
)
from app.conversation.errors import ExtractionError, InvalidInputError
from app.conversation.instructions import load_prompt
from app.conversation.timeouts import run_with_timeout
from app.extraction.normalizers import normalize_log_metadata
from app.extraction.parsing import parse_json_object
from app.schemas.assist import EnhanceStyle
from app.schemas.log_entry import LogMetadata

logger = logging.getLogger(__name__)

STYLE_INSTRUCTIONS: dict[str, str] = {
    "neutral": (
        "Improve clarity and readability while maintaining a professional, balanced tone. "
        "Keep all facts and specifics intact."
    ),
    "casual": (
        "Make this more conversational and engaging while preserving all the important details. "
        "Use a friendly, approachable tone."
    ),
    "concise": (
        "Condense this while maintaining all key information. "
        "Remove redundancy and make it more direct and to-the-point."
    ),
}


@dataclass(frozen=True, slots=True)
class AssistCall:
    temperature: float
    max_tokens: int
    quick: bool = False


ENHANCE_CALL = AssistCall(temperature=0.3, max_tokens=2000)
EXPAND_CALL = AssistCall(temperature=0.4, max_tokens=2000)
SUMMARIZE_CALL = AssistCall(temperature=0.2, max_tokens=150, quick=True)
METADATA_CALL = AssistCall(temperature=0.1, max_tokens=300, quick=True)


def _require_text(text: str, field: str) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise InvalidInputError(f"{field} must not be empty")
    return cleaned


async def _complete(
    system_prompt: str,
    user_text: str,
    call: AssistCall,
    *,
    operation: str,
    client: ChatCompletionClient | None,
    client_factory: ClientFactory | None,
    settings: Settings | None,
) -> str:
    settings = settings or get_settings()
    if client is None:
        if client_factory is not None:
            client = client_factory(settings.assist_model)
        else:
            client = get_chat_client(settings.assist_model, settings=settings)
    timeout = settings.assist_quick_timeout_seconds if call.quick else settings.assist_timeout_seconds
    return await run_with_timeout(
        client.complete,
        [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_text},
        ],
        temperature=call.temperature,
        max_tokens=call.max_tokens,
        timeout_seconds=timeout,
        operation=operation,
    )


async def enhance(
    text: str,
    style: EnhanceStyle = "neutral",
    *,
    client: ChatCompletionClient | None = None,
    client_factory: ClientFactory | None = None,
    settings: Settings | None = None,
) -> str:
    """Rewrite ``text`` in the requested style without adding facts."""

    source = _require_text(text, "text")
    if style not in STYLE_INSTRUCTIONS:
        raise InvalidInputError("style must be one of: neutral, casual, concise")
    prompt = load_prompt("assist_enhance").format(style_instruction=STYLE_INSTRUCTIONS[style])
    enhanced = await _complete(
        prompt, source, ENHANCE_CALL, operation="enhance", client=client, client_factory=client_factory, settings=settings
    )
    logger.info("Enhanced %d chars to %d chars with style %s", len(source), len(enhanced), style)
    return enhanced


async def expand(
    bullets: str,
    *,
    client: ChatCompletionClient | None = None,
    client_factory: ClientFactory | None = None,
    settings: Settings | None = None,
) -> str:
    source = _require_text(bullets, "bullets")
    draft = await _complete(
        load_prompt("assist_expand"),
        source,
        EXPAND_CALL,
        operation="expand",
        client=client,
        client_factory=client_factory,
        settings=settings,
    )
    logger.info("Expanded %d chars to %d chars", len(source), len(draft))
    return draft


async def summarize(
    text: str,
    *,
    client: ChatCompletionClient | None = None,
    client_factory: ClientFactory | None = None,
    settings: Settings | None = None,
) -> str:
    source = _require_text(text, "text")
    return await _complete(
        load_prompt("assist_summarize"),
        source,
        SUMMARIZE_CALL,
        operation="summarize",
        client=client,
        client_factory=client_factory,
        settings=settings,
    )


async def extract_metadata(
    text: str,
    *,
    client: ChatCompletionClient | None = None,
    client_factory: ClientFactory | None = None,
    settings: Settings | None = None,
) -> LogMetadata:
    """Pull tags, tools, minutes and mood from free text via the parse cascade."""

    source = _require_text(text, "text")
    raw = await _complete(
        load_prompt("assist_extract"),
        source,
        METADATA_CALL,
        operation="metadata extraction",
        client=client,
        client_factory=client_factory,
        settings=settings,
    )
    try:
        attempt = parse_json_object(raw)
    except ExtractionError as exc:
        logger.warning("Metadata extraction failed to parse (%s); raw output: %s", exc.cause, raw[:2000])
        raise
    return normalize_log_metadata(attempt.value or {})


async def transcribe(
    audio: bytes,
    *,
    filename: str | None,
    content_type: str | None,
    client: TranscriptionClient | None = None,
    client_factory: TranscriptionClientFactory | None = None,
    settings: Settings | None = None,
) -> Transcript:
    """Turn a recorded voice note into text for the log editor.

    Only ``audio/*`` uploads up to ``transcription_max_bytes`` are accepted;
    anything else is rejected before a provider client is built.
    """

    settings = settings or get_settings()
    media_type = (content_type or "").split(";")[0].strip().lower()
    if not media_type.startswith("audio/"):
        raise InvalidInputError("File must be an audio file")
    if not audio:
        raise InvalidInputError("No audio file provided")
    if len(audio) > settings.transcription_max_bytes:
        limit_mb = settings.transcription_max_bytes // (1024 * 1024)
        raise InvalidInputError(f"File too large (max {limit_mb}MB)")

    if client is None:
        if client_factory is not None:
            client = client_factory(settings.transcription_model)
        else:
            client = get_transcription_client(settings.transcription_model, settings=settings)
    transcript = await run_with_timeout(
        client.transcribe,
        audio,
        filename=filename or "audio.webm",
        content_type=media_type,
        timeout_seconds=settings.transcription_timeout_seconds,
        operation="transcription",
    )
    logger.info("Transcribed %d bytes to %d chars", len(audio), len(transcript.text))
    return transcript
