"""Metric service: ad-performance snapshots per customer."""

import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.models.metric import Metric

RECENT_SNAPSHOTS = 7


async def recent_metrics(
    db: AsyncSession,
    user_id: uuid.UUID,
    *,
    limit: int = RECENT_SNAPSHOTS,
) -> list[Metric]:
    """Latest snapshots, returned oldest first for charting."""
    result = await db.execute(
        select(Metric)
        .where(Metric.user_id == user_id)
        .order_by(Metric.date.desc())
        .limit(limit)
    )
    return sorted(result.scalars().all(), key=lambda m: m.date)


async def record_snapshot(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    leads: int = 0,
    ad_spend: int = 0,
    clicks: int = 0,
    impressions: int = 0,
    date: datetime | None = None,
) -> Metric:
    metric = Metric(
        user_id=user_id,
        leads=leads,
        ad_spend=ad_spend,
        clicks=clicks,
        impressions=impressions,
    )
    if date is not None:
        metric.date = date
    db.add(metric)
    await db.flush()
    return metric
