import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class CompanyRead(BaseModel):
    id: uuid.UUID
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class CompanyAssign(BaseModel):
    company_id: uuid.UUID


class CompanySettingsUpdate(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    address: str = Field(..., min_length=1, max_length=1000)
    logo_url: str | None = Field(None, max_length=1024)


class CompanySettingsRead(BaseModel):
    id: uuid.UUID
    company_name: str
    email: str
    phone: str
    address: str
    logo_url: str | None = None
    updated_at: datetime

    model_config = {"from_attributes": True}


class AdminInfoRead(BaseModel):
    company_name: str
    email: str
    logo_url: str | None = None
