import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from nextmove.models.base import Base, generate_uuid


class CallbackStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"


class Callback(Base):
    """A customer's request to be called back by their account manager."""

    __tablename__ = "callbacks"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[CallbackStatus] = mapped_column(
        Enum(CallbackStatus, native_enum=False),
        default=CallbackStatus.pending,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
