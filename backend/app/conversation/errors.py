"""Error taxonomy for the conversational pipeline."""

from __future__ import annotations

from typing import Any


class ConversationError(RuntimeError):
    """Base class for every failure surfaced by the conversation core."""

    code = "conversation_error"


class InvalidInputError(ConversationError):
    """Raised when an utterance is empty after trimming."""

    code = "invalid_input"


class ProviderNotConfiguredError(ConversationError):
    """Raised when no language-model credentials are configured."""

    code = "not_configured"


class LLMTransportError(ConversationError):
    """A provider call failed; carries the utterance so callers can offer a retry."""

    code = "transport"

    def __init__(self, message: str, *, utterance: str | None = None) -> None:
        super().__init__(message)
        self.utterance = utterance
        self.session: Any = None

    def with_retry_context(self, utterance: str, session: Any = None) -> "LLMTransportError":
        """Attach the rejected utterance and the rolled-back session snapshot."""

        self.utterance = utterance
        self.session = session
        return self


class LLMTimeoutError(LLMTransportError, TimeoutError):
    """The provider did not answer within the call's budget."""

    code = "timeout"


class LLMNetworkError(LLMTransportError):
    """Transport-level failure (DNS, refused connection, reset)."""

    code = "network"


class LLMProviderError(LLMTransportError):
    """The provider answered with a non-success status or an unusable body."""

    code = "provider"

    def __init__(self, message: str, *, status_code: int | None = None, utterance: str | None = None) -> None:
        super().__init__(message, utterance=utterance)
        self.status_code = status_code


class ExtractionError(ConversationError):
    """No parse strategy recovered a valid object, or required fields were missing."""

    code = "extraction_failed"

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        raw_text: str | None = None,
        missing_fields: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.raw_text = raw_text
        self.missing_fields = missing_fields or []
