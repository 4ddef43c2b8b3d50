"""LLM-backed extractor turning conversation transcripts into structured objects."""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from app.conversation.client import ChatCompletionClient
from app.conversation.errors import ExtractionError
from app.conversation.instructions import load_prompt
from app.conversation.session import ConversationSession
from app.conversation.timeouts import run_with_timeout
from app.extraction.extractor_interface import ExtractorInterface
from app.extraction.normalizers import normalize_log_draft, normalize_onboarding_profile
from app.extraction.parsing import parse_json_object
from app.extraction.types import ExtractionSchema
from app.schemas.log_entry import LogDraft
from app.schemas.onboarding import OnboardingProfile

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_EXTRACTION_TIMEOUT_SECONDS = 45.0
_RAW_LOG_LIMIT = 2000


def user_transcript(session: ConversationSession) -> str:
    """Only what the learner said; the coach's questions add noise."""

    return "\n".join(session.user_texts())


def full_transcript(session: ConversationSession) -> str:
    lines = [f"{turn.role}: {turn.content}" for turn in session.turns]
    if not any(turn.role == "user" for turn in session.turns):
        return ""
    return "Generate a log entry based on this conversation:\n\n" + "\n".join(lines)


ONBOARDING_SCHEMA: ExtractionSchema[OnboardingProfile] = ExtractionSchema(
    name="onboarding_profile",
    prompt_name="onboarding_extraction",
    transcript=user_transcript,
    normalize=normalize_onboarding_profile,
    temperature=0.1,
)

LOG_DRAFT_SCHEMA: ExtractionSchema[LogDraft] = ExtractionSchema(
    name="log_draft",
    prompt_name="log_extraction",
    transcript=full_transcript,
    normalize=normalize_log_draft,
    temperature=0.7,
    max_tokens=1000,
)


class StructuredExtractor(ExtractorInterface[T], Generic[T]):
    """Ask the model for JSON, recover it through the parse cascade, normalize."""

    def __init__(
        self,
        client: ChatCompletionClient,
        schema: ExtractionSchema[T],
        *,
        timeout_seconds: float = DEFAULT_EXTRACTION_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client
        self._schema = schema
        self._timeout_seconds = timeout_seconds
        self._last_raw_output: str | None = None
        self._last_strategy: str | None = None

    async def extract(self, session: ConversationSession) -> T:
        self._last_raw_output = None
        self._last_strategy = None

        material = self._schema.transcript(session)
        if not material.strip():
            raise ExtractionError("There is nothing in the conversation to extract yet.")

        messages = [
            {"role": "system", "content": load_prompt(self._schema.prompt_name)},
            {"role": "user", "content": material},
        ]
        raw = await run_with_timeout(
            self._client.complete,
            messages,
            temperature=self._schema.temperature,
            max_tokens=self._schema.max_tokens,
            timeout_seconds=self._timeout_seconds,
            operation=f"{self._schema.name} extraction",
        )
        self._last_raw_output = raw
        return self.parse(raw, session_id=session.id)

    def parse(self, raw: str, *, session_id: str | None = None) -> T:
        """Run the cascade and normalizer over raw model text."""

        try:
            attempt = parse_json_object(raw)
        except ExtractionError as exc:
            logger.warning(
                "%s extraction for %s failed to parse (%s); raw output: %s",
                self._schema.name,
                session_id,
                exc.cause,
                raw[:_RAW_LOG_LIMIT],
            )
            raise
        self._last_strategy = attempt.strategy
        if attempt.strategy != "fenced":
            logger.info("%s extraction recovered via %s strategy", self._schema.name, attempt.strategy)
        return self._normalize(attempt.value or {}, raw)

    def _normalize(self, value: dict[str, Any], raw: str) -> T:
        try:
            return self._schema.normalize(value)
        except ExtractionError as exc:
            exc.raw_text = raw
            logger.warning("%s extraction rejected: %s", self._schema.name, exc)
            raise
        except ValidationError as exc:
            logger.warning("%s extraction failed validation: %s", self._schema.name, exc)
            raise ExtractionError(
                f"{self._schema.name} failed validation", cause=exc, raw_text=raw
            ) from exc

    @property
    def schema(self) -> ExtractionSchema[T]:
        return self._schema

    @property
    def model_name(self) -> str:
        return str(getattr(self._client, "model", self._client.__class__.__name__))

    @property
    def last_raw_output(self) -> str | None:
        return self._last_raw_output

    @property
    def last_strategy(self) -> str | None:
        return self._last_strategy


def onboarding_extractor(
    client: ChatCompletionClient, *, timeout_seconds: float = DEFAULT_EXTRACTION_TIMEOUT_SECONDS
) -> StructuredExtractor[OnboardingProfile]:
    return StructuredExtractor(client, ONBOARDING_SCHEMA, timeout_seconds=timeout_seconds)


def log_draft_extractor(
    client: ChatCompletionClient, *, timeout_seconds: float = DEFAULT_EXTRACTION_TIMEOUT_SECONDS
) -> StructuredExtractor[LogDraft]:
    return StructuredExtractor(client, LOG_DRAFT_SCHEMA, timeout_seconds=timeout_seconds)
