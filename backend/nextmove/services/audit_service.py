"""Audit service: append-only event logging and per-entity history.

All writes are append-only. No update or delete methods are exposed.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.models.audit import AuditLogEvent


async def log_event(
    db: AsyncSession,
    *,
    user_id: uuid.UUID | None,
    event_type: str,
    entity_type: str,
    entity_id: uuid.UUID,
    action: str,
    detail: dict | None = None,
    ip_address: str | None = None,
) -> AuditLogEvent:
    """Create an append-only audit log event. user_id is the acting user."""
    event = AuditLogEvent(
        user_id=user_id,
        event_type=event_type,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        detail=detail,
        ip_address=ip_address,
    )
    db.add(event)
    await db.flush()
    return event


async def entity_history(
    db: AsyncSession,
    entity_type: str,
    entity_id: uuid.UUID,
    *,
    event_type_prefix: str | None = None,
    limit: int = 100,
) -> list[AuditLogEvent]:
    """Events recorded against one entity, oldest first.

    Used to show who moved a customer through which phase and when.
    """
    stmt = (
        select(AuditLogEvent)
        .where(
            AuditLogEvent.entity_type == entity_type,
            AuditLogEvent.entity_id == entity_id,
        )
        .order_by(AuditLogEvent.timestamp.asc())
    )
    if event_type_prefix is not None:
        stmt = stmt.where(AuditLogEvent.event_type.startswith(event_type_prefix))
    stmt = stmt.limit(limit)

    result = await db.execute(stmt)
    return list(result.scalars().all())
