import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.models.company import Company
from nextmove.models.user import User, UserRole


def _user(email: str, **kwargs) -> User:
    return User(
        email=email,
        password_hash="fakehash",
        first_name="Max",
        last_name="Mustermann",
        assigned_admin="admin@nextmove.de",
        **kwargs,
    )


@pytest.mark.asyncio
async def test_create_and_read_user(db_session: AsyncSession):
    """Round-trip: create user -> read user -> phase defaults in place."""
    db_session.add(_user("test@example.com"))
    await db_session.commit()

    result = await db_session.execute(select(User).where(User.email == "test@example.com"))
    fetched = result.scalar_one()

    assert isinstance(fetched.id, uuid.UUID)
    assert fetched.role == UserRole.customer
    assert fetched.is_approved is False
    assert fetched.is_first_login is True
    assert fetched.onboarding_completed is False
    assert fetched.current_phase == "onboarding"
    assert fetched.completed_phases == []
    assert fetched.progress == 0
    assert fetched.created_at is not None
    assert fetched.updated_at is not None


@pytest.mark.asyncio
async def test_user_unique_email(db_session: AsyncSession):
    """Duplicate email raises IntegrityError."""
    db_session.add(_user("dup@example.com"))
    await db_session.commit()

    db_session.add(_user("dup@example.com"))
    with pytest.raises(IntegrityError):
        await db_session.commit()


@pytest.mark.asyncio
async def test_user_belongs_to_company(db_session: AsyncSession):
    company = Company(name="Muster GmbH")
    db_session.add(company)
    await db_session.flush()

    db_session.add(_user("firma@example.com", company_id=company.id))
    await db_session.commit()

    result = await db_session.execute(select(User).where(User.email == "firma@example.com"))
    assert result.scalar_one().company_id == company.id


@pytest.mark.asyncio
async def test_completed_phases_json_round_trip(db_session: AsyncSession):
    db_session.add(
        _user(
            "phases@example.com",
            completed_phases=["onboarding", "landingpage"],
            current_phase="landingpage",
            progress=40,
        )
    )
    await db_session.commit()

    result = await db_session.execute(
        select(User.completed_phases).where(User.email == "phases@example.com")
    )
    assert result.scalar_one() == ["onboarding", "landingpage"]
