"""Conversation thread registry model."""

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, IdMixin, TimestampMixin


class ConversationThread(Base, IdMixin, TimestampMixin):
    """Ownership and outcome of one onboarding or composer conversation.

    The transcript itself lives with the client; only the thread token, its
    owner and the last accepted extraction are kept.
    """

    __tablename__ = "conversation_threads"

    thread_id: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default="active", nullable=False)
    extracted_data_json: Mapped[dict[str, object] | None] = mapped_column(JSON, nullable=True)
