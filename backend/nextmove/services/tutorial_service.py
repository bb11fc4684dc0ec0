"""Tutorial service: video library, onboarding videos, completion tracking."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.models.tutorial import Tutorial, TutorialProgress
from nextmove.services import audit_service


async def list_tutorials(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
) -> list[dict]:
    """Library tutorials (not onboarding videos) with the user's completion flag."""
    result = await db.execute(
        select(Tutorial)
        .where(Tutorial.is_onboarding == False)  # noqa: E712
        .order_by(Tutorial.display_order.asc(), Tutorial.created_at.desc())
    )
    tutorials = list(result.scalars().all())

    progress_result = await db.execute(
        select(TutorialProgress.tutorial_id).where(
            TutorialProgress.user_id == user_id,
            TutorialProgress.completed == True,  # noqa: E712
        )
    )
    done = set(progress_result.scalars().all())

    return [{"tutorial": t, "completed": t.id in done} for t in tutorials]


async def list_onboarding_videos(db: AsyncSession) -> list[Tutorial]:
    """Videos shown in the onboarding wizard, in display order."""
    result = await db.execute(
        select(Tutorial)
        .where(Tutorial.is_onboarding == True)  # noqa: E712
        .order_by(Tutorial.display_order.asc(), Tutorial.created_at.asc())
    )
    return list(result.scalars().all())


async def list_all_videos(db: AsyncSession) -> list[Tutorial]:
    """Every video, newest first (admin content management)."""
    result = await db.execute(select(Tutorial).order_by(Tutorial.created_at.desc()))
    return list(result.scalars().all())


async def get_tutorial(db: AsyncSession, tutorial_id: uuid.UUID) -> Tutorial | None:
    result = await db.execute(select(Tutorial).where(Tutorial.id == tutorial_id))
    return result.scalar_one_or_none()


async def create_video(
    db: AsyncSession,
    *,
    actor_id: uuid.UUID,
    title: str,
    description: str,
    video_url: str,
    category: str,
    thumbnail_url: str | None = None,
    is_onboarding: bool = False,
    display_order: int = 0,
    ip_address: str | None = None,
) -> Tutorial:
    tutorial = Tutorial(
        title=title,
        description=description,
        video_url=video_url,
        thumbnail_url=thumbnail_url,
        category=category,
        is_onboarding=is_onboarding,
        display_order=display_order,
    )
    db.add(tutorial)
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=actor_id,
        event_type="content.video_created",
        entity_type="Tutorial",
        entity_id=tutorial.id,
        action="create",
        detail={"title": title, "category": category, "is_onboarding": is_onboarding},
        ip_address=ip_address,
    )
    return tutorial


async def delete_video(
    db: AsyncSession,
    *,
    tutorial_id: uuid.UUID,
    actor_id: uuid.UUID,
    ip_address: str | None = None,
) -> bool:
    """Delete a video and everyone's progress on it. False if not found."""
    tutorial = await get_tutorial(db, tutorial_id)
    if tutorial is None:
        return False

    await db.execute(delete(TutorialProgress).where(TutorialProgress.tutorial_id == tutorial_id))
    await db.delete(tutorial)
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=actor_id,
        event_type="content.video_deleted",
        entity_type="Tutorial",
        entity_id=tutorial_id,
        action="delete",
        detail={"title": tutorial.title},
        ip_address=ip_address,
    )
    return True


async def mark_completed(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    tutorial_id: uuid.UUID,
) -> TutorialProgress:
    """Mark a tutorial as watched. Idempotent."""
    result = await db.execute(
        select(TutorialProgress).where(
            TutorialProgress.user_id == user_id,
            TutorialProgress.tutorial_id == tutorial_id,
        )
    )
    progress = result.scalar_one_or_none()
    if progress is None:
        progress = TutorialProgress(user_id=user_id, tutorial_id=tutorial_id)
        db.add(progress)

    if not progress.completed:
        progress.completed = True
        progress.completed_at = datetime.now(timezone.utc)
    await db.flush()
    return progress
