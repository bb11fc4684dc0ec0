import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from nextmove.models.base import Base, TimestampMixin, generate_uuid


class UserRole(str, enum.Enum):
    customer = "customer"
    admin = "admin"


class User(TimestampMixin, Base):
    """Portal account, customer or admin.

    current_phase and progress are a cache of completed_phases; they are only
    ever written together through progress_service.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    company_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("companies.id"), nullable=True, index=True
    )
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False),
        default=UserRole.customer,
        nullable=False,
    )
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    profile_image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    assigned_admin: Mapped[str] = mapped_column(String(255), nullable=False)
    onboarding_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_first_login: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_active: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Phase state
    current_phase: Mapped[str] = mapped_column(String(50), default="onboarding", nullable=False)
    completed_phases: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    progress: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
