import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class ChecklistSubmit(BaseModel):
    """Full checklist submission. Omitted fields are stored empty."""

    payment_option: str = Field(..., max_length=255)
    payment_method: str | None = Field(None, max_length=255)
    tax_id: str = Field(..., max_length=255)
    domain: str = Field(..., max_length=255)
    target_audience: str | None = None
    company_info: str | None = None
    target_group_gender: str | None = Field(None, max_length=50)
    target_group_age: str | None = Field(None, max_length=50)
    target_group_location: str | None = Field(None, max_length=255)
    target_group_interests: list[str] = Field(default_factory=list)
    unique_selling_point: str | None = None
    market_size: str | None = Field(None, max_length=255)
    web_design: dict = Field(default_factory=dict)
    market_research: dict = Field(default_factory=dict)
    legal_info: dict = Field(default_factory=dict)
    ideal_customer_profile: dict = Field(default_factory=dict)
    qualification_questions: dict = Field(default_factory=dict)


class ChecklistRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    payment_option: str
    payment_method: str | None = None
    tax_id: str
    domain: str
    target_audience: str | None = None
    company_info: str | None = None
    target_group_gender: str | None = None
    target_group_age: str | None = None
    target_group_location: str | None = None
    target_group_interests: list[str]
    unique_selling_point: str | None = None
    market_size: str | None = None
    web_design: dict
    market_research: dict
    legal_info: dict
    ideal_customer_profile: dict
    qualification_questions: dict
    submitted_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class LogoUpdate(BaseModel):
    logo_url: str = Field(..., min_length=1, max_length=1024)
