"""Metric routes: recent ad-performance snapshots."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.core.auth import get_current_user
from nextmove.dependencies import get_db
from nextmove.models.user import User, UserRole
from nextmove.schemas.metric import MetricRead
from nextmove.services import metric_service

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("/{user_id}", response_model=list[MetricRead])
async def recent_metrics(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Last 7 snapshots, oldest first. Customers may only read their own."""
    if current_user.role != UserRole.admin and current_user.id != user_id:
        raise HTTPException(status_code=403, detail="Not allowed to view these metrics")
    metrics = await metric_service.recent_metrics(db, user_id)
    return [MetricRead.model_validate(m) for m in metrics]
