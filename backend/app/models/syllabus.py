"""Generated learning syllabus model."""

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin


class Syllabus(Base, IdMixin, CreatedAtMixin):
    """A generated day-by-day learning plan."""

    __tablename__ = "syllabi"

    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    source: Mapped[str] = mapped_column(String(32), default="model", nullable=False)
    plan_json: Mapped[dict[str, object]] = mapped_column(JSON, default=dict, nullable=False)
