import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class TutorialRead(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    video_url: str
    thumbnail_url: str | None = None
    category: str
    is_onboarding: bool
    display_order: int
    created_at: datetime

    model_config = {"from_attributes": True}


class TutorialWithProgress(TutorialRead):
    completed: bool = False


class VideoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., max_length=5000)
    video_url: str = Field(..., min_length=1, max_length=1024)
    thumbnail_url: str | None = Field(None, max_length=1024)
    category: str = Field(..., min_length=1, max_length=100)
    is_onboarding: bool = False
    display_order: int = 0
