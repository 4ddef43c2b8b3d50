"""Translate conversation failures into HTTP errors."""

from fastapi import HTTPException

from app.conversation.errors import (
    ConversationError,
    ExtractionError,
    InvalidInputError,
    LLMNetworkError,
    LLMProviderError,
    LLMTimeoutError,
    LLMTransportError,
    ProviderNotConfiguredError,
)
from app.schemas.common import ErrorDetail

_USER_MESSAGES: dict[type[ConversationError], tuple[int, str]] = {
    InvalidInputError: (
        422,
        "Please type a message before sending.",
    ),
    LLMTimeoutError: (
        504,
        "The assistant took too long to respond. Please try again.",
    ),
    LLMNetworkError: (
        502,
        "We couldn't reach the assistant. Check your connection and try again.",
    ),
    LLMProviderError: (
        502,
        "The assistant is having trouble right now. Please try again.",
    ),
    ExtractionError: (
        422,
        "We couldn't turn this conversation into a result. Add a bit more detail and try again.",
    ),
    ProviderNotConfiguredError: (
        503,
        "The assistant is not configured on this server.",
    ),
}


def to_http_exception(exc: ConversationError) -> HTTPException:
    """Map ``exc`` to a status code and a non-technical ``ErrorDetail``."""

    status_code, message = 500, "Something went wrong. Please try again."
    for error_type in type(exc).__mro__:
        if error_type in _USER_MESSAGES:
            status_code, message = _USER_MESSAGES[error_type]
            break
    if isinstance(exc, InvalidInputError) and str(exc):
        message = str(exc)
    retry_utterance = exc.utterance if isinstance(exc, LLMTransportError) else None
    detail = ErrorDetail(code=exc.code, message=message, retry_utterance=retry_utterance)
    return HTTPException(status_code=status_code, detail=detail.model_dump())


def not_found(message: str) -> HTTPException:
    return HTTPException(status_code=404, detail=message)
