"""Referral routes: the customer's referral link and its statistics."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.core.auth import get_current_user
from nextmove.dependencies import get_db
from nextmove.models.user import User
from nextmove.schemas.referral import ReferralLinkRead, ReferralStats
from nextmove.services import referral_service

router = APIRouter(prefix="/referrals", tags=["referrals"])


def _frontend_base_url(request: Request) -> str:
    """Origin the client used, honouring reverse-proxy forwarding headers."""
    proto = request.headers.get("x-forwarded-proto") or request.url.scheme
    host = (
        request.headers.get("x-forwarded-host")
        or request.headers.get("host")
        or request.url.netloc
    )
    return f"{proto}://{host}"


@router.get("/my-link", response_model=ReferralLinkRead)
async def my_link(
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    referral = await referral_service.get_or_create_link(db, current_user.id)
    stats = await referral_service.get_stats(db, current_user.id)
    return ReferralLinkRead(
        code=referral.code,
        referral_link=referral_service.build_link(_frontend_base_url(request), referral.code),
        stats=ReferralStats(**stats),
    )
