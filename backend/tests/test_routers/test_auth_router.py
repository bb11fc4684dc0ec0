import pytest
from httpx import AsyncClient

REGISTER_BODY = {
    "email": "router@example.com",
    "password": "SecurePass123!",
    "first_name": "Max",
    "last_name": "Mustermann",
    "company_name": "Muster GmbH",
}


@pytest.mark.asyncio
async def test_register_endpoint(client: AsyncClient):
    """POST /auth/register creates an unapproved customer, returns 201."""
    response = await client.post("/auth/register", json=REGISTER_BODY)
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "router@example.com"
    assert data["role"] == "customer"
    assert data["is_approved"] is False
    assert data["current_phase"] == "onboarding"
    assert data["completed_phases"] == []
    assert data["progress"] == 0
    assert "password_hash" not in data


@pytest.mark.asyncio
async def test_register_duplicate_returns_409(client: AsyncClient):
    await client.post("/auth/register", json=REGISTER_BODY)
    response = await client.post("/auth/register", json=REGISTER_BODY)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_short_password_returns_422(client: AsyncClient):
    response = await client.post("/auth/register", json={**REGISTER_BODY, "password": "short"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_password_over_72_bytes_returns_422(client: AsyncClient):
    response = await client.post("/auth/register", json={**REGISTER_BODY, "password": "a" * 100})
    assert response.status_code == 422

    # 40 umlauts are 40 characters but 80 bytes
    response = await client.post("/auth/register", json={**REGISTER_BODY, "password": "ä" * 40})
    assert response.status_code == 422

    response = await client.post("/auth/register", json={**REGISTER_BODY, "password": "a" * 72})
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_change_password_over_72_bytes_returns_422(client: AsyncClient, make_customer):
    customer = await make_customer()
    response = await client.post(
        "/auth/change-password",
        json={"current_password": "CustomerPass123!", "new_password": "x" * 100},
        headers=customer["headers"],
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_before_approval_returns_403(client: AsyncClient):
    await client.post("/auth/register", json=REGISTER_BODY)
    response = await client.post(
        "/auth/login",
        json={"email": REGISTER_BODY["email"], "password": REGISTER_BODY["password"]},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_login_endpoint(client: AsyncClient, make_customer):
    """POST /auth/login returns token, user and the onboarding redirect flag."""
    customer = await make_customer("login-r@example.com", login=False)
    response = await client.post(
        "/auth/login",
        json={"email": "login-r@example.com", "password": "CustomerPass123!"},
    )
    assert response.status_code == 200
    data = response.json()
    assert len(data["token"]) == 64
    assert data["user"]["id"] == customer["id"]
    assert data["should_redirect_to_onboarding"] is True
    assert "session" in response.cookies


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, make_customer):
    """POST /auth/login with wrong password returns 401."""
    await make_customer("wrongpw-r@example.com", login=False)
    response = await client.post(
        "/auth/login",
        json={"email": "wrongpw-r@example.com", "password": "WrongPass123!"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_session_endpoint(client: AsyncClient, make_customer):
    response = await client.get("/auth/session")
    assert response.json() == {"user": None}

    customer = await make_customer()
    response = await client.get("/auth/session", headers=customer["headers"])
    assert response.json()["user"]["email"] == customer["email"]


@pytest.mark.asyncio
async def test_session_cookie_authenticates(client: AsyncClient, make_customer):
    await make_customer()
    # no header: the cookie set at login is sent back by the client
    response = await client.get("/customer/progress")
    assert response.status_code == 200
    assert response.json()["current_phase"] == "onboarding"


@pytest.mark.asyncio
async def test_logout_endpoint(client: AsyncClient, make_customer):
    """POST /auth/logout revokes session, returns 204."""
    customer = await make_customer("logout-r@example.com")

    response = await client.post("/auth/logout", headers=customer["headers"])
    assert response.status_code == 204

    # After logout, authenticated request should fail
    response = await client.get("/customer/progress", headers=customer["headers"])
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unauthenticated_request_returns_401(client: AsyncClient):
    """Request without token returns 401."""
    response = await client.get("/customer/dashboard")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_admin_seed_and_login(client: AsyncClient):
    body = {"email": "boss@example.com", "password": "AdminPass123!"}
    response = await client.post("/auth/admin/seed", json=body)
    assert response.status_code == 201
    assert response.json()["role"] == "admin"
    assert response.json()["progress"] == 100

    assert (await client.post("/auth/admin/seed", json=body)).status_code == 409

    response = await client.post("/auth/admin/login", json=body)
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"


@pytest.mark.asyncio
async def test_customer_cannot_log_in_as_admin(client: AsyncClient, make_customer):
    await make_customer("kunde@example.com", login=False)
    response = await client.post(
        "/auth/admin/login",
        json={"email": "kunde@example.com", "password": "CustomerPass123!"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_change_password(client: AsyncClient, make_customer):
    customer = await make_customer()
    response = await client.post(
        "/auth/change-password",
        json={"current_password": "nope", "new_password": "BrandNew123!"},
        headers=customer["headers"],
    )
    assert response.status_code == 401

    response = await client.post(
        "/auth/change-password",
        json={"current_password": "CustomerPass123!", "new_password": "BrandNew123!"},
        headers=customer["headers"],
    )
    assert response.status_code == 204

    response = await client.post(
        "/auth/login", json={"email": customer["email"], "password": "BrandNew123!"}
    )
    assert response.status_code == 200
