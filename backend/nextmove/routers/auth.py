"""Auth routes: register, customer/admin login, logout, session, password change."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.config import settings
from nextmove.core.auth import (
    change_password,
    create_admin,
    get_current_user,
    get_optional_user,
    login_admin,
    login_user,
    logout_user,
    register_user,
    request_token,
)
from nextmove.dependencies import get_db
from nextmove.models.user import User
from nextmove.schemas.user import (
    AdminSeedRequest,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserRead,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_duration_hours * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="strict" if settings.is_production else "lax",
    )


@router.post("/register", response_model=UserRead, status_code=201)
async def register(
    body: RegisterRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    ip = request.client.host if request.client else None
    user = await register_user(
        db,
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        company_name=body.company_name,
        ip_address=ip,
    )
    return user


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Customer login. Only approved customers get a session."""
    ip = request.client.host if request.client else None
    user, token, should_redirect = await login_user(
        db, email=body.email, password=body.password, ip_address=ip
    )
    _set_session_cookie(response, token)
    return LoginResponse(
        token=token,
        user=UserRead.model_validate(user),
        should_redirect_to_onboarding=should_redirect,
    )


@router.post("/admin/login", response_model=LoginResponse)
async def admin_login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    ip = request.client.host if request.client else None
    user, token = await login_admin(db, email=body.email, password=body.password, ip_address=ip)
    _set_session_cookie(response, token)
    return LoginResponse(token=token, user=UserRead.model_validate(user))


@router.post("/admin/seed", response_model=UserRead, status_code=201)
async def admin_seed(
    body: AdminSeedRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Create an admin account. Development only."""
    if settings.is_production:
        raise HTTPException(status_code=404, detail="Not Found")
    ip = request.client.host if request.client else None
    return await create_admin(db, email=body.email, password=body.password, ip_address=ip)


@router.post("/logout", status_code=204)
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ip = request.client.host if request.client else None
    await logout_user(db, token=request_token(request), ip_address=ip)
    response.delete_cookie(settings.session_cookie_name)


@router.get("/session")
async def session(current_user: User | None = Depends(get_optional_user)):
    """Current user, or {"user": null} when not logged in."""
    if current_user is None:
        return {"user": None}
    return {"user": UserRead.model_validate(current_user)}


@router.post("/change-password", status_code=204)
async def change_own_password(
    body: ChangePasswordRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ip = request.client.host if request.client else None
    await change_password(
        db,
        user=current_user,
        current_password=body.current_password,
        new_password=body.new_password,
        ip_address=ip,
    )
