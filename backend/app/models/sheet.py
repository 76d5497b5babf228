"""Sheet ORM — one generated study sheet.

Invariants:
    - id is UUID primary key, generated at insert
    - user_id, subject, level, title, content are non-nullable
    - rating bounded 0–5, default 0 (updated later by the history page)

Design Decisions:
    - content stored as Markdown text, exactly as produced by the provider fragment
    - Index on (user_id, created_at): history listing is always per owner, newest first
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Sheet(Base):
    """Generated study sheet owned by one user."""
    __tablename__ = "sheets"
    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_sheets_rating_range"),
        Index("ix_sheets_user_created", "user_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    level: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "title": self.title,
            "subject": self.subject,
            "level": self.level,
            "content": self.content,
            "rating": self.rating,
            "created_at": self.created_at.isoformat(),
        }
