"""Company service: customer companies and the operator's company settings."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.models.company import Company, CompanySettings
from nextmove.services import audit_service


async def create_company(
    db: AsyncSession,
    *,
    name: str,
    actor_id: uuid.UUID,
    ip_address: str | None = None,
) -> Company:
    company = Company(name=name)
    db.add(company)
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=actor_id,
        event_type="company.created",
        entity_type="Company",
        entity_id=company.id,
        action="create",
        detail={"name": name},
        ip_address=ip_address,
    )
    return company


async def list_companies(db: AsyncSession) -> list[Company]:
    result = await db.execute(select(Company).order_by(Company.created_at.desc()))
    return list(result.scalars().all())


async def get_company(db: AsyncSession, company_id: uuid.UUID) -> Company | None:
    result = await db.execute(select(Company).where(Company.id == company_id))
    return result.scalar_one_or_none()


async def get_settings(db: AsyncSession) -> CompanySettings | None:
    """Current operator settings (most recently updated row)."""
    result = await db.execute(
        select(CompanySettings).order_by(CompanySettings.updated_at.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def update_settings(
    db: AsyncSession,
    *,
    company_name: str,
    email: str,
    phone: str,
    address: str,
    logo_url: str | None = None,
    actor_id: uuid.UUID,
    ip_address: str | None = None,
) -> CompanySettings:
    """Create or overwrite operator settings. logo_url is kept when not given."""
    current = await get_settings(db)
    if current is None:
        current = CompanySettings(
            company_name=company_name, email=email, phone=phone, address=address
        )
        db.add(current)
    else:
        current.company_name = company_name
        current.email = email
        current.phone = phone
        current.address = address
    if logo_url is not None:
        current.logo_url = logo_url
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=actor_id,
        event_type="settings.updated",
        entity_type="CompanySettings",
        entity_id=current.id,
        action="update",
        ip_address=ip_address,
    )
    return current
