"""ORM models package exports."""

from app.models.conversation_thread import ConversationThread
from app.models.syllabus import Syllabus

__all__ = [
    "ConversationThread",
    "Syllabus",
]
