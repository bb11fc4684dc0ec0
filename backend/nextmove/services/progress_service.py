"""Progress service: persist customer phase state.

completed_phases is the source of truth. current_phase and progress are a
cache derived from it by phase_tracker.derive_state, and every mutation here
rewrites all three fields together while holding a row lock on the user.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.models.checklist import CustomerChecklist
from nextmove.models.tutorial import Tutorial
from nextmove.models.user import User
from nextmove.services import audit_service, phase_tracker, tutorial_service

logger = logging.getLogger("nextmove.progress")


async def lock_user(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    """Load a user with SELECT ... FOR UPDATE, refreshing any cached copy."""
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def apply_completed_phases(user: User, completed_phases: list[str]) -> None:
    """Store a normalized completed-phase list and its derived cache fields."""
    completed = phase_tracker.completed_through(completed_phases)
    current, progress = phase_tracker.derive_state(completed)
    user.completed_phases = completed
    user.current_phase = current
    user.progress = progress


def progress_view(user: User) -> dict:
    """Phase state for display, derived from completed_phases on read."""
    completed = phase_tracker.completed_through(user.completed_phases or [])
    current, progress = phase_tracker.derive_state(completed)
    return {
        "current_phase": current,
        "completed_phases": completed,
        "progress": progress,
        "onboarding_completed": user.onboarding_completed,
        "roadmap": phase_tracker.roadmap(current, completed),
    }


async def mark_onboarding_phase(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    actor_id: uuid.UUID | None = None,
    ip_address: str | None = None,
) -> User | None:
    """Add the onboarding phase to completed_phases (idempotent).

    Called when the checklist is saved; a fresh customer goes from 0 to 20%.
    """
    user = await lock_user(db, user_id)
    if user is None:
        return None

    before = list(user.completed_phases or [])
    apply_completed_phases(user, before + [phase_tracker.ONBOARDING_PHASE])
    await db.flush()

    if user.completed_phases != before:
        await audit_service.log_event(
            db,
            user_id=actor_id or user_id,
            event_type="progress.phase_completed",
            entity_type="User",
            entity_id=user_id,
            action="complete_phase",
            detail={
                "phase": phase_tracker.ONBOARDING_PHASE,
                "completed_phases": user.completed_phases,
                "progress": user.progress,
            },
            ip_address=ip_address,
        )
    return user


async def complete_onboarding(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    ip_address: str | None = None,
) -> User:
    """Finish the onboarding wizard.

    The checklist must have been submitted first. Sets onboarding_completed
    and makes sure the onboarding phase is recorded.
    """
    result = await db.execute(
        select(CustomerChecklist.submitted_at).where(CustomerChecklist.user_id == user_id)
    )
    if result.scalar_one_or_none() is None:
        raise ValueError("Cannot complete onboarding: checklist has not been submitted")

    user = await mark_onboarding_phase(db, user_id=user_id, ip_address=ip_address)
    if user is None:
        raise ValueError("User not found")

    if not user.onboarding_completed:
        user.onboarding_completed = True
        await db.flush()
        await audit_service.log_event(
            db,
            user_id=user_id,
            event_type="onboarding.completed",
            entity_type="User",
            entity_id=user_id,
            action="complete",
            ip_address=ip_address,
        )
    return user


async def _set_phase_locked(
    db: AsyncSession,
    user: User,
    phase: str,
    *,
    actor_id: uuid.UUID,
    action: str,
    ip_address: str | None,
) -> User:
    previous = user.current_phase
    apply_completed_phases(user, phase_tracker.phases_through(phase))
    await db.flush()

    # Watching the phase's tutorial is implied by reaching the phase
    result = await db.execute(select(Tutorial).where(Tutorial.category == user.current_phase))
    tutorial = result.scalars().first()
    if tutorial is not None:
        await tutorial_service.mark_completed(db, user_id=user.id, tutorial_id=tutorial.id)

    await audit_service.log_event(
        db,
        user_id=actor_id,
        event_type=f"progress.phase_{action}",
        entity_type="User",
        entity_id=user.id,
        action=action,
        detail={
            "from_phase": previous,
            "to_phase": user.current_phase,
            "completed_phases": user.completed_phases,
            "progress": user.progress,
        },
        ip_address=ip_address,
    )
    logger.info(
        "phase %s user=%s from=%s to=%s progress=%d",
        action, user.id, previous, user.current_phase, user.progress,
    )
    return user


async def set_phase(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    phase: str,
    actor_id: uuid.UUID,
    ip_address: str | None = None,
) -> User | None:
    """Jump a customer to phase (admin action).

    Overwrites completed_phases with every phase up to and including phase.
    Returns None if the user does not exist.
    """
    key = (phase or "").strip().lower()
    if key not in phase_tracker.PHASE_ORDER:
        raise ValueError(
            f"Invalid phase: {phase}. Must be one of: {phase_tracker.PHASE_ORDER}"
        )

    user = await lock_user(db, user_id)
    if user is None:
        return None
    return await _set_phase_locked(
        db, user, key, actor_id=actor_id, action="set", ip_address=ip_address
    )


async def advance_phase(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    actor_id: uuid.UUID,
    ip_address: str | None = None,
) -> User | None:
    """Move a customer to the next phase. No-op at the last phase."""
    user = await lock_user(db, user_id)
    if user is None:
        return None

    target = phase_tracker.next_phase(user.current_phase)
    if target == user.current_phase and target in (user.completed_phases or []):
        return user
    return await _set_phase_locked(
        db, user, target, actor_id=actor_id, action="advanced", ip_address=ip_address
    )


async def rollback_phase(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    actor_id: uuid.UUID,
    ip_address: str | None = None,
) -> User | None:
    """Move a customer back one phase. No-op at the first phase."""
    user = await lock_user(db, user_id)
    if user is None:
        return None

    target = phase_tracker.previous_phase(user.current_phase)
    if target == phase_tracker.canonical_phase(user.current_phase):
        return user
    return await _set_phase_locked(
        db, user, target, actor_id=actor_id, action="rolled_back", ip_address=ip_address
    )
