"""Callback service: customer callback requests, one per cooldown window."""

import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.config import settings
from nextmove.models.callback import Callback, CallbackStatus
from nextmove.models.user import User
from nextmove.services import audit_service


class CallbackCooldownError(Exception):
    """The user already requested a callback inside the cooldown window."""


async def request_callback(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    phone: str,
    ip_address: str | None = None,
) -> Callback:
    """Create a pending callback. Raises CallbackCooldownError if one is recent."""
    window_start = datetime.now(timezone.utc) - timedelta(
        minutes=settings.callback_cooldown_minutes
    )
    result = await db.execute(
        select(Callback.id).where(
            Callback.user_id == user_id,
            Callback.created_at >= window_start,
        )
    )
    if result.first() is not None:
        raise CallbackCooldownError(
            "A callback was already requested. Please wait before requesting another one."
        )

    callback = Callback(user_id=user_id, phone=phone, status=CallbackStatus.pending)
    db.add(callback)
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=user_id,
        event_type="callback.requested",
        entity_type="Callback",
        entity_id=callback.id,
        action="create",
        ip_address=ip_address,
    )
    return callback


async def list_callbacks(
    db: AsyncSession,
    *,
    status: CallbackStatus | None = None,
) -> list[tuple[Callback, User]]:
    """Callbacks with the requesting customer, newest first."""
    stmt = (
        select(Callback, User)
        .join(User, Callback.user_id == User.id)
        .order_by(Callback.created_at.desc())
    )
    if status is not None:
        stmt = stmt.where(Callback.status == status)
    result = await db.execute(stmt)
    return [(cb, user) for cb, user in result.all()]


async def update_status(
    db: AsyncSession,
    *,
    callback_id: uuid.UUID,
    status: CallbackStatus,
    actor_id: uuid.UUID,
    ip_address: str | None = None,
) -> Callback | None:
    result = await db.execute(select(Callback).where(Callback.id == callback_id))
    callback = result.scalar_one_or_none()
    if callback is None:
        return None

    previous = callback.status
    callback.status = status
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=actor_id,
        event_type="callback.status_changed",
        entity_type="Callback",
        entity_id=callback.id,
        action="update",
        detail={"from": previous.value, "to": status.value},
        ip_address=ip_address,
    )
    return callback
