import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class MetricCreate(BaseModel):
    leads: int = Field(0, ge=0)
    ad_spend: int = Field(0, ge=0)
    clicks: int = Field(0, ge=0)
    impressions: int = Field(0, ge=0)
    date: datetime | None = None


class MetricRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    leads: int
    ad_spend: int
    clicks: int
    impressions: int
    date: datetime

    model_config = {"from_attributes": True}
