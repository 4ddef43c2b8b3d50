"""Extractor interface for pluggable extraction implementations."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from app.conversation.session import ConversationSession

T = TypeVar("T")


class ExtractorInterface(ABC, Generic[T]):
    """Abstract extractor interface."""

    @abstractmethod
    async def extract(self, session: ConversationSession) -> T:
        """Convert the session transcript into a validated structured object."""
