"""Customer service: approval, admin customer management, profile, deletion.

Deletion is a hard delete that cascades over every per-customer table. Audit
events survive with the actor reference nulled by the database.
"""

import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.models.callback import Callback, CallbackStatus
from nextmove.models.checklist import CustomerChecklist
from nextmove.models.company import Company
from nextmove.models.metric import Metric
from nextmove.models.referral import Referral
from nextmove.models.session import Session
from nextmove.models.tutorial import Tutorial, TutorialProgress
from nextmove.models.user import User, UserRole
from nextmove.services import audit_service, checklist_service

NO_COMPANY = "No Company"
ACTIVE_WINDOW_HOURS = 24


class EmailInUseError(ValueError):
    """Another account already uses the requested email address."""


def _customers():
    return (
        select(User, Company.name)
        .outerjoin(Company, User.company_id == Company.id)
        .where(User.role == UserRole.customer)
    )


async def list_pending(db: AsyncSession) -> list[tuple[User, str | None]]:
    """Customers awaiting approval with their company name, oldest first."""
    result = await db.execute(
        _customers().where(User.is_approved == False).order_by(User.created_at.asc())  # noqa: E712
    )
    return [(user, name) for user, name in result.all()]


async def list_customers(db: AsyncSession) -> list[tuple[User, str]]:
    """All customers with their company name, newest first."""
    result = await db.execute(_customers().order_by(User.created_at.desc()))
    return [(user, name or NO_COMPANY) for user, name in result.all()]


async def get_customer(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await db.execute(
        select(User).where(User.id == user_id, User.role == UserRole.customer)
    )
    return result.scalar_one_or_none()


async def approve_customer(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    actor_id: uuid.UUID,
    ip_address: str | None = None,
) -> User | None:
    user = await get_customer(db, user_id)
    if user is None:
        return None
    if user.is_approved:
        return user

    user.is_approved = True
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=actor_id,
        event_type="customer.approved",
        entity_type="User",
        entity_id=user.id,
        action="approve",
        ip_address=ip_address,
    )
    return user


async def tracking_overview(db: AsyncSession) -> list[dict]:
    """Customers with phase state and their non-empty checklist answers."""
    result = await db.execute(
        select(User, CustomerChecklist)
        .outerjoin(CustomerChecklist, CustomerChecklist.user_id == User.id)
        .where(User.role == UserRole.customer)
        .order_by(User.created_at.desc())
    )
    return [
        {
            "id": user.id,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
            "current_phase": user.current_phase,
            "completed_phases": user.completed_phases,
            "progress": user.progress,
            "last_active": user.last_active,
            "onboarding_completed": user.onboarding_completed,
            "checklist": checklist_service.compact(checklist),
        }
        for user, checklist in result.all()
    ]


async def assign_company(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    company_id: uuid.UUID,
    actor_id: uuid.UUID,
    ip_address: str | None = None,
) -> User | None:
    user = await get_customer(db, user_id)
    if user is None:
        return None

    company = await db.get(Company, company_id)
    if company is None:
        raise ValueError(f"Company {company_id} does not exist")

    user.company_id = company.id
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=actor_id,
        event_type="customer.company_assigned",
        entity_type="User",
        entity_id=user.id,
        action="assign_company",
        detail={"company_id": str(company.id)},
        ip_address=ip_address,
    )
    return user


async def update_profile(
    db: AsyncSession,
    *,
    user: User,
    first_name: str,
    last_name: str,
    email: str,
) -> User:
    """Update name and email. Raises EmailInUseError on a clash."""
    email = email.strip().lower()
    if email != user.email:
        result = await db.execute(select(User.id).where(User.email == email))
        if result.scalar_one_or_none() is not None:
            raise EmailInUseError("Email already registered")

    user.first_name = first_name
    user.last_name = last_name
    user.email = email
    await db.flush()
    return user


async def set_profile_image(db: AsyncSession, *, user: User, image_url: str) -> User:
    user.profile_image = image_url
    await db.flush()
    return user


async def delete_customer(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    actor_id: uuid.UUID,
    ip_address: str | None = None,
) -> bool:
    """Hard-delete a customer and all of their rows. False if not found."""
    user = await get_customer(db, user_id)
    if user is None:
        return False

    await audit_service.log_event(
        db,
        user_id=actor_id,
        event_type="customer.deleted",
        entity_type="User",
        entity_id=user_id,
        action="delete",
        detail={"reason": "admin_requested"},
        ip_address=ip_address,
    )

    await db.execute(delete(TutorialProgress).where(TutorialProgress.user_id == user_id))
    await db.execute(delete(CustomerChecklist).where(CustomerChecklist.user_id == user_id))
    await db.execute(delete(Metric).where(Metric.user_id == user_id))
    await db.execute(delete(Callback).where(Callback.user_id == user_id))
    await db.execute(
        delete(Referral).where(
            or_(Referral.referrer_id == user_id, Referral.referred_id == user_id)
        )
    )
    await db.execute(delete(Session).where(Session.user_id == user_id))
    await db.delete(user)
    await db.flush()
    return True


async def dashboard_stats(db: AsyncSession) -> dict:
    """Counts for the admin dashboard.

    active_users: customers seen in the last 24 hours who are past onboarding
    (progress > 0).
    """
    since = datetime.now(timezone.utc) - timedelta(hours=ACTIVE_WINDOW_HOURS)

    active = await db.scalar(
        select(func.count()).select_from(User).where(
            User.role == UserRole.customer,
            User.last_active >= since,
            User.progress > 0,
        )
    )
    pending_approvals = await db.scalar(
        select(func.count()).select_from(User).where(
            User.role == UserRole.customer,
            User.is_approved == False,  # noqa: E712
        )
    )
    total_tutorials = await db.scalar(select(func.count()).select_from(Tutorial))
    pending_callbacks = await db.scalar(
        select(func.count()).select_from(Callback).where(
            Callback.status == CallbackStatus.pending
        )
    )
    return {
        "active_users": active or 0,
        "pending_approvals": pending_approvals or 0,
        "total_tutorials": total_tutorials or 0,
        "pending_callbacks": pending_callbacks or 0,
    }
