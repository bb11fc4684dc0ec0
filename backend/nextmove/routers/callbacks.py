"""Callback routes: customers request a call from their account manager."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.core.auth import get_current_user
from nextmove.dependencies import get_db
from nextmove.models.user import User
from nextmove.schemas.callback import CallbackCreate, CallbackRead
from nextmove.services import callback_service

router = APIRouter(prefix="/callbacks", tags=["callbacks"])


@router.post("", response_model=CallbackRead, status_code=201)
async def request_callback(
    body: CallbackCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ip = request.client.host if request.client else None
    try:
        callback = await callback_service.request_callback(
            db, user_id=current_user.id, phone=body.phone, ip_address=ip
        )
    except callback_service.CallbackCooldownError as e:
        raise HTTPException(status_code=429, detail=str(e))
    return callback
