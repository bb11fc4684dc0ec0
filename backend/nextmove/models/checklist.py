import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from nextmove.models.base import Base, TimestampMixin, generate_uuid


class CustomerChecklist(TimestampMixin, Base):
    """Onboarding questionnaire answers. One row per user, overwritten on resubmission.

    web_design format: {"logoUrl": "...", "colorScheme": "...", ...} (free-form)
    """

    __tablename__ = "customer_checklists"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"), unique=True, nullable=False, index=True
    )
    payment_option: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    payment_method: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tax_id: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    domain: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    target_audience: Mapped[str | None] = mapped_column(Text, nullable=True)
    company_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    target_group_gender: Mapped[str | None] = mapped_column(String(50), nullable=True)
    target_group_age: Mapped[str | None] = mapped_column(String(50), nullable=True)
    target_group_location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    target_group_interests: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    unique_selling_point: Mapped[str | None] = mapped_column(Text, nullable=True)
    market_size: Mapped[str | None] = mapped_column(String(255), nullable=True)
    web_design: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    market_research: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    legal_info: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    ideal_customer_profile: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    qualification_questions: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    # set by a full submission only; a logo upload alone leaves it NULL
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
