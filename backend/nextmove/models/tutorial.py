"""Tutorial models: video content and per-user completion.

Onboarding videos are tutorials with is_onboarding set; they are shown in the
onboarding wizard instead of the tutorial library.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func,
)
from sqlalchemy.orm import Mapped, mapped_column

from nextmove.models.base import Base, generate_uuid


class Tutorial(Base):
    __tablename__ = "tutorials"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    video_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    is_onboarding: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )


class TutorialProgress(Base):
    """Whether a user has watched a tutorial."""

    __tablename__ = "tutorial_progress"
    __table_args__ = (UniqueConstraint("user_id", "tutorial_id"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    tutorial_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tutorials.id"), nullable=False, index=True
    )
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
