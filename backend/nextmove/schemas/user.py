import uuid
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field

from nextmove.models.user import UserRole

# bcrypt only looks at the first 72 bytes and refuses anything longer
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


Password = Annotated[str, AfterValidator(_check_password_bytes)]


class RegisterRequest(BaseModel):
    email: EmailStr = Field(..., max_length=255)
    password: Password = Field(..., min_length=8, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    company_name: str = Field(..., min_length=1, max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=255)
    password: Password = Field(..., max_length=128)


class AdminSeedRequest(BaseModel):
    email: EmailStr = Field(..., max_length=255)
    password: Password = Field(..., min_length=8, max_length=128)


class ChangePasswordRequest(BaseModel):
    current_password: Password = Field(..., max_length=128)
    new_password: Password = Field(..., min_length=8, max_length=128)


class SettingsUpdate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)


class ProfileImageUpdate(BaseModel):
    image_url: str = Field(..., min_length=1, max_length=1024)


class UserRead(BaseModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole
    company_id: uuid.UUID | None = None
    is_approved: bool
    profile_image: str | None = None
    assigned_admin: str
    onboarding_completed: bool
    is_first_login: bool
    last_active: datetime | None = None
    current_phase: str
    completed_phases: list[str]
    progress: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    token: str
    user: UserRead
    should_redirect_to_onboarding: bool = False
