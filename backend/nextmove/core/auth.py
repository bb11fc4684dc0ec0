"""Authentication: register, login, logout, session lookup, role guards.

Server-side sessions with bcrypt password hashing. Customers must be approved
by an admin before they can log in. All auth events logged to audit.
"""

import secrets
from datetime import datetime, timedelta, timezone

import bcrypt
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.config import settings
from nextmove.dependencies import get_db
from nextmove.models.company import Company
from nextmove.models.session import Session
from nextmove.models.user import User, UserRole
from nextmove.services import audit_service, phase_tracker

SESSION_TOKEN_HEADER = "X-Session-Token"


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def _generate_token() -> str:
    """Generate a cryptographically secure session token."""
    return secrets.token_hex(32)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def request_token(request: Request) -> str | None:
    """Session token from the header, falling back to the session cookie."""
    return request.headers.get(SESSION_TOKEN_HEADER) or request.cookies.get(
        settings.session_cookie_name
    )


async def _get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == _normalize_email(email)))
    return result.scalar_one_or_none()


async def register_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    company_name: str,
    ip_address: str | None = None,
) -> User:
    """Register a customer and their company. Raises HTTPException if email taken.

    The account starts unapproved, at the first phase with no progress.
    """
    if await _get_user_by_email(db, email) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    company = Company(name=company_name)
    db.add(company)
    await db.flush()

    user = User(
        email=_normalize_email(email),
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        company_id=company.id,
        role=UserRole.customer,
        is_approved=False,
        assigned_admin=settings.default_assigned_admin,
        current_phase=phase_tracker.PHASE_ORDER[0],
        completed_phases=[],
        progress=0,
    )
    db.add(user)
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=user.id,
        event_type="auth.register",
        entity_type="User",
        entity_id=user.id,
        action="register",
        detail={"email": user.email, "company_id": str(company.id)},
        ip_address=ip_address,
    )

    return user


async def create_admin(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    ip_address: str | None = None,
) -> User:
    """Create an approved admin account. Raises HTTPException if email taken."""
    if await _get_user_by_email(db, email) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Admin already exists",
        )

    admin = User(
        email=_normalize_email(email),
        password_hash=hash_password(password),
        first_name="Admin",
        last_name="User",
        role=UserRole.admin,
        is_approved=True,
        onboarding_completed=True,
        assigned_admin=_normalize_email(email),
        current_phase=phase_tracker.PHASE_ORDER[-1],
        completed_phases=list(phase_tracker.PHASE_ORDER),
        progress=100,
    )
    db.add(admin)
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=admin.id,
        event_type="auth.admin_created",
        entity_type="User",
        entity_id=admin.id,
        action="create",
        ip_address=ip_address,
    )
    return admin


async def _open_session(
    db: AsyncSession,
    user: User,
    *,
    event_type: str,
    ip_address: str | None,
) -> str:
    token = _generate_token()
    now = datetime.now(timezone.utc)
    session = Session(
        user_id=user.id,
        token=token,
        expires_at=now + timedelta(hours=settings.session_duration_hours),
    )
    db.add(session)
    user.last_active = now
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=user.id,
        event_type=event_type,
        entity_type="Session",
        entity_id=session.id,
        action="login",
        ip_address=ip_address,
    )
    return token


async def login_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    ip_address: str | None = None,
) -> tuple[User, str, bool]:
    """Authenticate a customer, create a session.

    Returns (user, token, should_redirect_to_onboarding). Raises HTTPException
    on invalid credentials or an account still awaiting approval.
    """
    user = await _get_user_by_email(db, email)

    if (
        user is None
        or user.role != UserRole.customer
        or not verify_password(password, user.password_hash)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account has not been approved yet",
        )

    should_redirect = not user.onboarding_completed
    if user.is_first_login:
        user.is_first_login = False

    token = await _open_session(db, user, event_type="auth.login", ip_address=ip_address)
    return user, token, should_redirect


async def login_admin(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    ip_address: str | None = None,
) -> tuple[User, str]:
    """Authenticate an admin, create a session."""
    user = await _get_user_by_email(db, email)

    if (
        user is None
        or user.role != UserRole.admin
        or not verify_password(password, user.password_hash)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    token = await _open_session(db, user, event_type="auth.admin_login", ip_address=ip_address)
    return user, token


async def logout_user(
    db: AsyncSession,
    *,
    token: str,
    ip_address: str | None = None,
) -> None:
    """Revoke a session token."""
    result = await db.execute(select(Session).where(Session.token == token))
    session = result.scalar_one_or_none()
    if session is None:
        return

    session.revoked = True
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=session.user_id,
        event_type="auth.logout",
        entity_type="Session",
        entity_id=session.id,
        action="logout",
        ip_address=ip_address,
    )


async def change_password(
    db: AsyncSession,
    *,
    user: User,
    current_password: str,
    new_password: str,
    ip_address: str | None = None,
) -> None:
    """Replace the user's password after verifying the current one."""
    if not verify_password(current_password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )

    user.password_hash = hash_password(new_password)
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=user.id,
        event_type="auth.password_changed",
        entity_type="User",
        entity_id=user.id,
        action="change_password",
        ip_address=ip_address,
    )


async def _resolve_session_user(db: AsyncSession, token: str) -> User | None:
    result = await db.execute(select(Session).where(Session.token == token))
    session = result.scalar_one_or_none()
    if session is None or session.revoked:
        return None

    expires_at = session.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at < datetime.now(timezone.utc):
        return None

    result = await db.execute(select(User).where(User.id == session.user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """FastAPI dependency: validate the session token, return current user.

    Raises HTTPException 401 if token is missing, invalid, expired, or revoked.
    """
    token = request_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    user = await _resolve_session_user(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid, expired or revoked session",
        )

    request.state.user_id = str(user.id)
    return user


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Like get_current_user, but None instead of 401."""
    token = request_token(request)
    if not token:
        return None
    user = await _resolve_session_user(db, token)
    if user is not None:
        request.state.user_id = str(user.id)
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """FastAPI dependency: current user, who must be an admin (403 otherwise)."""
    if current_user.role != UserRole.admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user

