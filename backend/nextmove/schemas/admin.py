import uuid
from datetime import datetime

from pydantic import BaseModel

from nextmove.schemas.user import UserRead


class PendingCustomer(BaseModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    company_id: uuid.UUID | None = None
    company_name: str | None = None
    created_at: datetime


class CustomerRead(UserRead):
    company_name: str


class TrackingEntry(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    current_phase: str
    completed_phases: list[str]
    progress: int
    last_active: datetime | None = None
    onboarding_completed: bool
    checklist: dict | None = None


class AdminStats(BaseModel):
    active_users: int
    pending_approvals: int
    total_tutorials: int
    pending_callbacks: int


class AdminProfile(BaseModel):
    email: str
    profile_image: str | None = None
    company_name: str


class AuditEventRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID | None = None
    event_type: str
    action: str
    detail: dict | None = None
    timestamp: datetime

    model_config = {"from_attributes": True}
