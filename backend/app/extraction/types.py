"""Extraction schema descriptors independent of the provider."""

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from app.conversation.session import ConversationSession

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class ExtractionSchema(Generic[T]):
    """Everything needed to turn a transcript into one structured shape."""

    name: str
    prompt_name: str
    transcript: Callable[[ConversationSession], str]
    normalize: Callable[[dict[str, Any]], T]
    temperature: float = 0.1
    max_tokens: int | None = None
