"""Customer routes: dashboard, settings, checklist, onboarding, progress."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.core.auth import get_current_user
from nextmove.dependencies import get_db
from nextmove.models.user import User
from nextmove.schemas.checklist import ChecklistRead, ChecklistSubmit, LogoUpdate
from nextmove.schemas.company import AdminInfoRead
from nextmove.schemas.progress import ProgressRead
from nextmove.schemas.user import ProfileImageUpdate, SettingsUpdate, UserRead
from nextmove.services import (
    checklist_service,
    company_service,
    customer_service,
    progress_service,
)

router = APIRouter(prefix="/customer", tags=["customer"])


@router.get("/dashboard")
async def dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """User, checklist and whether the onboarding wizard should be shown."""
    checklist = await checklist_service.get_checklist(db, current_user.id)
    return {
        "show_onboarding": not current_user.onboarding_completed,
        "user": UserRead.model_validate(current_user),
        "checklist": ChecklistRead.model_validate(checklist) if checklist else None,
        "progress": ProgressRead(**progress_service.progress_view(current_user)),
    }


@router.put("/settings", response_model=UserRead)
async def update_settings(
    body: SettingsUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        user = await customer_service.update_profile(
            db,
            user=current_user,
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
        )
    except customer_service.EmailInUseError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return user


@router.put("/profile-image", response_model=UserRead)
async def update_profile_image(
    body: ProfileImageUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await customer_service.set_profile_image(
        db, user=current_user, image_url=body.image_url
    )


@router.get("/admin-info", response_model=AdminInfoRead)
async def admin_info(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Contact details of the portal operator."""
    settings_row = await company_service.get_settings(db)
    if settings_row is None:
        raise HTTPException(status_code=404, detail="Admin settings not found")
    return AdminInfoRead(
        company_name=settings_row.company_name,
        email=settings_row.email,
        logo_url=settings_row.logo_url,
    )


@router.get("/progress", response_model=ProgressRead)
async def get_progress(current_user: User = Depends(get_current_user)):
    return progress_service.progress_view(current_user)


@router.post("/onboarding/complete", response_model=ProgressRead)
async def complete_onboarding(
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Finish the onboarding wizard. The checklist must be submitted first."""
    ip = request.client.host if request.client else None
    try:
        user = await progress_service.complete_onboarding(
            db, user_id=current_user.id, ip_address=ip
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return progress_service.progress_view(user)


@router.get("/checklist", response_model=ChecklistRead)
async def get_checklist(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    checklist = await checklist_service.get_checklist(db, current_user.id)
    if checklist is None:
        raise HTTPException(status_code=404, detail="Checklist not found")
    return checklist


@router.post("/checklist", response_model=ProgressRead)
async def submit_checklist(
    body: ChecklistSubmit,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Save (or overwrite) the checklist. Completes the onboarding phase."""
    ip = request.client.host if request.client else None
    await checklist_service.upsert_checklist(
        db, user_id=current_user.id, fields=body.model_dump(), ip_address=ip
    )
    return progress_service.progress_view(current_user)


@router.put("/checklist/logo", response_model=ChecklistRead)
async def set_logo(
    body: LogoUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await checklist_service.set_logo_url(
        db, user_id=current_user.id, logo_url=body.logo_url
    )
