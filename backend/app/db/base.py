"""SQLAlchemy metadata registry import for Alembic."""

from app.models import ConversationThread, Syllabus
from app.models.base import Base

__all__ = ["Base", "ConversationThread", "Syllabus"]
