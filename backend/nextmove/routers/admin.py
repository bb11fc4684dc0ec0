"""Admin routes: approvals, customer management, phase control, content, callbacks.

Every route requires an admin session.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.core.auth import require_admin
from nextmove.dependencies import get_db
from nextmove.models.callback import CallbackStatus
from nextmove.models.user import User
from nextmove.schemas.admin import (
    AdminProfile,
    AdminStats,
    AuditEventRead,
    CustomerRead,
    PendingCustomer,
    TrackingEntry,
)
from nextmove.schemas.callback import CallbackStatusUpdate, CallbackWithCustomer
from nextmove.schemas.checklist import ChecklistRead
from nextmove.schemas.company import (
    CompanyAssign,
    CompanyCreate,
    CompanyRead,
    CompanySettingsRead,
    CompanySettingsUpdate,
)
from nextmove.schemas.metric import MetricCreate, MetricRead
from nextmove.schemas.progress import PhaseUpdate, ProgressRead
from nextmove.schemas.tutorial import TutorialRead, VideoCreate
from nextmove.schemas.user import UserRead
from nextmove.services import (
    audit_service,
    callback_service,
    checklist_service,
    company_service,
    customer_service,
    metric_service,
    progress_service,
    tutorial_service,
)

router = APIRouter(prefix="/admin", tags=["admin"])

DEFAULT_PORTAL_NAME = "Admin Portal"


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def _customer_read(user: User, company_name: str) -> CustomerRead:
    return CustomerRead(
        **UserRead.model_validate(user).model_dump(), company_name=company_name
    )


async def _customer_or_404(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await customer_service.get_customer(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return user


# --- Approvals ---


@router.get("/users/pending", response_model=list[PendingCustomer])
async def pending_users(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    rows = await customer_service.list_pending(db)
    return [
        PendingCustomer(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            company_id=user.company_id,
            company_name=company_name,
            created_at=user.created_at,
        )
        for user, company_name in rows
    ]


@router.post("/users/{user_id}/approve", response_model=UserRead)
async def approve_user(
    user_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = await customer_service.approve_customer(
        db, user_id=user_id, actor_id=admin.id, ip_address=_client_ip(request)
    )
    if user is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return user


# --- Customers ---


@router.get("/customers", response_model=list[CustomerRead])
async def list_customers(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    rows = await customer_service.list_customers(db)
    return [_customer_read(user, company_name) for user, company_name in rows]


@router.get("/customers/tracking", response_model=list[TrackingEntry])
async def customer_tracking(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Phase state and checklist answers for every customer."""
    return await customer_service.tracking_overview(db)


@router.get("/customers/{user_id}", response_model=CustomerRead)
async def get_customer(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = await _customer_or_404(db, user_id)
    company = (
        await company_service.get_company(db, user.company_id) if user.company_id else None
    )
    return _customer_read(user, company.name if company else customer_service.NO_COMPANY)


@router.delete("/customers/{user_id}", status_code=204)
async def delete_customer(
    user_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    deleted = await customer_service.delete_customer(
        db, user_id=user_id, actor_id=admin.id, ip_address=_client_ip(request)
    )
    if not deleted:
        raise HTTPException(status_code=404, detail="Customer not found")


@router.get("/customers/{user_id}/checklist", response_model=ChecklistRead)
async def customer_checklist(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await _customer_or_404(db, user_id)
    checklist = await checklist_service.get_checklist(db, user_id)
    if checklist is None:
        raise HTTPException(status_code=404, detail="Checklist not found")
    return checklist


@router.put("/customers/{user_id}/company", response_model=UserRead)
async def assign_company(
    user_id: uuid.UUID,
    body: CompanyAssign,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        user = await customer_service.assign_company(
            db,
            user_id=user_id,
            company_id=body.company_id,
            actor_id=admin.id,
            ip_address=_client_ip(request),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if user is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return user


@router.get("/customers/{user_id}/history", response_model=list[AuditEventRead])
async def customer_history(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Audit trail of the customer's phase changes, oldest first."""
    await _customer_or_404(db, user_id)
    events = await audit_service.entity_history(
        db, "User", user_id, event_type_prefix="progress."
    )
    return [AuditEventRead.model_validate(e) for e in events]


# --- Phase control ---


@router.get("/customers/{user_id}/progress", response_model=ProgressRead)
async def customer_progress(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = await _customer_or_404(db, user_id)
    return progress_service.progress_view(user)


@router.put("/customers/{user_id}/phase", response_model=ProgressRead)
async def set_customer_phase(
    user_id: uuid.UUID,
    body: PhaseUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Jump the customer to a phase; every phase up to it counts as completed."""
    await _customer_or_404(db, user_id)
    try:
        user = await progress_service.set_phase(
            db,
            user_id=user_id,
            phase=body.phase.value,
            actor_id=admin.id,
            ip_address=_client_ip(request),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if user is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return progress_service.progress_view(user)


@router.post("/customers/{user_id}/phase/advance", response_model=ProgressRead)
async def advance_customer_phase(
    user_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await _customer_or_404(db, user_id)
    user = await progress_service.advance_phase(
        db, user_id=user_id, actor_id=admin.id, ip_address=_client_ip(request)
    )
    if user is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return progress_service.progress_view(user)


@router.post("/customers/{user_id}/phase/rollback", response_model=ProgressRead)
async def rollback_customer_phase(
    user_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await _customer_or_404(db, user_id)
    user = await progress_service.rollback_phase(
        db, user_id=user_id, actor_id=admin.id, ip_address=_client_ip(request)
    )
    if user is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return progress_service.progress_view(user)


# --- Metrics ---


@router.get("/customers/{user_id}/metrics", response_model=list[MetricRead])
async def customer_metrics(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await _customer_or_404(db, user_id)
    return await metric_service.recent_metrics(db, user_id)


@router.post("/customers/{user_id}/metrics", response_model=MetricRead, status_code=201)
async def record_customer_metrics(
    user_id: uuid.UUID,
    body: MetricCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await _customer_or_404(db, user_id)
    return await metric_service.record_snapshot(
        db,
        user_id=user_id,
        leads=body.leads,
        ad_spend=body.ad_spend,
        clicks=body.clicks,
        impressions=body.impressions,
        date=body.date,
    )


# --- Companies and portal settings ---


@router.get("/companies", response_model=list[CompanyRead])
async def list_companies(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await company_service.list_companies(db)


@router.post("/companies", response_model=CompanyRead, status_code=201)
async def create_company(
    body: CompanyCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await company_service.create_company(
        db, name=body.name, actor_id=admin.id, ip_address=_client_ip(request)
    )


@router.get("/settings", response_model=CompanySettingsRead)
async def get_settings(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    current = await company_service.get_settings(db)
    if current is None:
        raise HTTPException(status_code=404, detail="Settings not configured")
    return current


@router.put("/settings", response_model=CompanySettingsRead)
async def update_settings(
    body: CompanySettingsUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await company_service.update_settings(
        db,
        company_name=body.company_name,
        email=body.email,
        phone=body.phone,
        address=body.address,
        logo_url=body.logo_url,
        actor_id=admin.id,
        ip_address=_client_ip(request),
    )


@router.get("/profile", response_model=AdminProfile)
async def admin_profile(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    current = await company_service.get_settings(db)
    return AdminProfile(
        email=admin.email,
        profile_image=admin.profile_image,
        company_name=current.company_name if current else DEFAULT_PORTAL_NAME,
    )


@router.get("/stats", response_model=AdminStats)
async def stats(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await customer_service.dashboard_stats(db)


# --- Videos ---


@router.get("/videos", response_model=list[TutorialRead])
async def list_videos(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await tutorial_service.list_all_videos(db)


@router.post("/videos", response_model=TutorialRead, status_code=201)
async def create_video(
    body: VideoCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await tutorial_service.create_video(
        db,
        actor_id=admin.id,
        title=body.title,
        description=body.description,
        video_url=body.video_url,
        category=body.category,
        thumbnail_url=body.thumbnail_url,
        is_onboarding=body.is_onboarding,
        display_order=body.display_order,
        ip_address=_client_ip(request),
    )


@router.delete("/videos/{tutorial_id}", status_code=204)
async def delete_video(
    tutorial_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    deleted = await tutorial_service.delete_video(
        db, tutorial_id=tutorial_id, actor_id=admin.id, ip_address=_client_ip(request)
    )
    if not deleted:
        raise HTTPException(status_code=404, detail="Video not found")


# --- Callbacks ---


@router.get("/callbacks", response_model=list[CallbackWithCustomer])
async def list_callbacks(
    status: CallbackStatus | None = None,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    rows = await callback_service.list_callbacks(db, status=status)
    return [
        CallbackWithCustomer(
            id=cb.id,
            user_id=cb.user_id,
            phone=cb.phone,
            status=cb.status,
            created_at=cb.created_at,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
        )
        for cb, user in rows
    ]


@router.patch("/callbacks/{callback_id}", response_model=CallbackWithCustomer)
async def update_callback(
    callback_id: uuid.UUID,
    body: CallbackStatusUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    callback = await callback_service.update_status(
        db,
        callback_id=callback_id,
        status=body.status,
        actor_id=admin.id,
        ip_address=_client_ip(request),
    )
    if callback is None:
        raise HTTPException(status_code=404, detail="Callback not found")
    user = await db.get(User, callback.user_id)
    return CallbackWithCustomer(
        id=callback.id,
        user_id=callback.user_id,
        phone=callback.phone,
        status=callback.status,
        created_at=callback.created_at,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
    )
