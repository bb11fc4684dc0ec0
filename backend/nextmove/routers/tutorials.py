"""Tutorial routes: library with completion flags, onboarding videos."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.core.auth import get_current_user
from nextmove.dependencies import get_db
from nextmove.models.user import User
from nextmove.schemas.tutorial import TutorialRead, TutorialWithProgress
from nextmove.services import tutorial_service

router = APIRouter(prefix="/tutorials", tags=["tutorials"])


@router.get("", response_model=list[TutorialWithProgress])
async def list_tutorials(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entries = await tutorial_service.list_tutorials(db, user_id=current_user.id)
    return [
        TutorialWithProgress(
            **TutorialRead.model_validate(e["tutorial"]).model_dump(),
            completed=e["completed"],
        )
        for e in entries
    ]


@router.get("/onboarding", response_model=list[TutorialRead])
async def list_onboarding_videos(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    videos = await tutorial_service.list_onboarding_videos(db)
    return [TutorialRead.model_validate(v) for v in videos]


@router.post("/{tutorial_id}/complete")
async def complete_tutorial(
    tutorial_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tutorial = await tutorial_service.get_tutorial(db, tutorial_id)
    if tutorial is None:
        raise HTTPException(status_code=404, detail="Tutorial not found")
    await tutorial_service.mark_completed(db, user_id=current_user.id, tutorial_id=tutorial.id)
    return {"tutorial_id": str(tutorial.id), "completed": True}
