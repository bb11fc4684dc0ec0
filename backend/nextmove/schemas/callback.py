import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from nextmove.models.callback import CallbackStatus


class CallbackCreate(BaseModel):
    phone: str = Field(..., min_length=3, max_length=50)


class CallbackRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    phone: str
    status: CallbackStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class CallbackWithCustomer(CallbackRead):
    first_name: str
    last_name: str
    email: str


class CallbackStatusUpdate(BaseModel):
    status: CallbackStatus
