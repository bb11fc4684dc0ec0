"""Referral service: per-user referral code and referral statistics."""

import secrets
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.models.referral import Referral, ReferralStatus


def _generate_code() -> str:
    return f"REF{secrets.token_hex(5).upper()}"


async def get_or_create_link(db: AsyncSession, user_id: uuid.UUID) -> Referral:
    """The user's own referral link row; created on first request."""
    result = await db.execute(
        select(Referral)
        .where(Referral.referrer_id == user_id, Referral.referred_id.is_(None))
        .order_by(Referral.created_at.asc())
    )
    referral = result.scalars().first()
    if referral is None:
        referral = Referral(
            referrer_id=user_id,
            code=_generate_code(),
            status=ReferralStatus.active,
        )
        db.add(referral)
        await db.flush()
    return referral


async def get_stats(db: AsyncSession, user_id: uuid.UUID) -> dict:
    """Counts of the user's referral rows: total, pending, completed."""
    result = await db.execute(
        select(Referral.status, func.count())
        .where(Referral.referrer_id == user_id)
        .group_by(Referral.status)
    )
    stats = {"total": 0, "pending": 0, "completed": 0}
    for status, count in result.all():
        if status == ReferralStatus.pending:
            stats["pending"] = count
        elif status == ReferralStatus.completed:
            stats["completed"] = count
        stats["total"] += count
    return stats


def build_link(base_url: str, code: str) -> str:
    return f"{base_url.rstrip('/')}/register?ref={code}"
