"""Shared test fixtures: in-memory SQLite DB, async session, test client, accounts."""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from nextmove.dependencies import get_db
from nextmove.main import app
from nextmove.models.base import Base
from nextmove.models.user import User

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)

ADMIN_EMAIL = "admin@nextmove.de"
ADMIN_PASSWORD = "AdminPass123!"
CUSTOMER_PASSWORD = "CustomerPass123!"


# Enable foreign key enforcement in SQLite (off by default).
@event.listens_for(test_engine.sync_engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


test_session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """Yield a test DB session."""
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncClient:
    """Yield an httpx AsyncClient wired to the test DB."""

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_headers(client: AsyncClient) -> dict:
    """Session header of a freshly seeded admin."""
    resp = await client.post(
        "/auth/admin/seed", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    assert resp.status_code == 201
    resp = await client.post(
        "/auth/admin/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    assert resp.status_code == 200
    return {"X-Session-Token": resp.json()["token"]}


@pytest.fixture
def make_customer(client: AsyncClient, db_session: AsyncSession):
    """Factory: register a customer, optionally approve and log them in.

    Returns {"id", "email", "headers"}; headers is empty when not logged in.
    """

    async def _make(
        email: str = "kunde@example.com",
        *,
        approve: bool = True,
        login: bool = True,
        company_name: str = "Muster GmbH",
    ) -> dict:
        resp = await client.post(
            "/auth/register",
            json={
                "email": email,
                "password": CUSTOMER_PASSWORD,
                "first_name": "Max",
                "last_name": "Mustermann",
                "company_name": company_name,
            },
        )
        assert resp.status_code == 201
        user_id = resp.json()["id"]

        if approve:
            user = await db_session.get(User, uuid.UUID(user_id))
            user.is_approved = True
            await db_session.flush()

        headers = {}
        if approve and login:
            resp = await client.post(
                "/auth/login", json={"email": email, "password": CUSTOMER_PASSWORD}
            )
            assert resp.status_code == 200
            headers = {"X-Session-Token": resp.json()["token"]}

        return {"id": user_id, "email": email, "headers": headers}

    return _make


@pytest.fixture
def checklist_payload() -> dict:
    return {
        "payment_option": "monthly",
        "payment_method": "sepa",
        "tax_id": "DE123456789",
        "domain": "muster.de",
        "target_audience": "Handwerksbetriebe",
        "target_group_interests": ["Marketing", "Automatisierung"],
        "web_design": {"colors": "blau"},
    }
