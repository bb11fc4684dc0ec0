import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_dashboard_for_new_customer(client: AsyncClient, make_customer):
    customer = await make_customer()
    response = await client.get("/customer/dashboard", headers=customer["headers"])
    assert response.status_code == 200
    data = response.json()
    assert data["show_onboarding"] is True
    assert data["checklist"] is None
    assert data["user"]["is_first_login"] is False
    assert data["progress"]["progress"] == 0


@pytest.mark.asyncio
async def test_checklist_submission_completes_onboarding_phase(
    client: AsyncClient, make_customer, checklist_payload
):
    customer = await make_customer()
    response = await client.post(
        "/customer/checklist", json=checklist_payload, headers=customer["headers"]
    )
    assert response.status_code == 200
    data = response.json()
    assert data["completed_phases"] == ["onboarding"]
    assert data["current_phase"] == "onboarding"
    assert data["progress"] == 20
    assert data["roadmap"][0]["completed"] is True
    assert data["roadmap"][1]["completed"] is False

    response = await client.get("/customer/checklist", headers=customer["headers"])
    assert response.status_code == 200
    assert response.json()["domain"] == "muster.de"
    assert response.json()["target_group_interests"] == ["Marketing", "Automatisierung"]


@pytest.mark.asyncio
async def test_checklist_missing_returns_404(client: AsyncClient, make_customer):
    customer = await make_customer()
    response = await client.get("/customer/checklist", headers=customer["headers"])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_checklist_requires_core_fields(client: AsyncClient, make_customer):
    customer = await make_customer()
    response = await client.post(
        "/customer/checklist", json={"domain": "x.de"}, headers=customer["headers"]
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_complete_onboarding_requires_checklist(
    client: AsyncClient, make_customer, checklist_payload
):
    customer = await make_customer()
    response = await client.post("/customer/onboarding/complete", headers=customer["headers"])
    assert response.status_code == 400

    await client.post("/customer/checklist", json=checklist_payload, headers=customer["headers"])
    response = await client.post("/customer/onboarding/complete", headers=customer["headers"])
    assert response.status_code == 200
    assert response.json()["onboarding_completed"] is True
    assert response.json()["progress"] == 20

    dashboard = await client.get("/customer/dashboard", headers=customer["headers"])
    assert dashboard.json()["show_onboarding"] is False


@pytest.mark.asyncio
async def test_login_after_onboarding_does_not_redirect(
    client: AsyncClient, make_customer, checklist_payload
):
    customer = await make_customer()
    await client.post("/customer/checklist", json=checklist_payload, headers=customer["headers"])
    await client.post("/customer/onboarding/complete", headers=customer["headers"])

    response = await client.post(
        "/auth/login", json={"email": customer["email"], "password": "CustomerPass123!"}
    )
    assert response.json()["should_redirect_to_onboarding"] is False


@pytest.mark.asyncio
async def test_logo_upload_keeps_progress(client: AsyncClient, make_customer):
    customer = await make_customer()
    response = await client.put(
        "/customer/checklist/logo",
        json={"logo_url": "https://cdn.example.com/logo.png"},
        headers=customer["headers"],
    )
    assert response.status_code == 200
    assert response.json()["web_design"]["logoUrl"] == "https://cdn.example.com/logo.png"

    progress = await client.get("/customer/progress", headers=customer["headers"])
    assert progress.json()["progress"] == 0


@pytest.mark.asyncio
async def test_logo_upload_does_not_unlock_onboarding_completion(
    client: AsyncClient, make_customer
):
    customer = await make_customer()
    await client.put(
        "/customer/checklist/logo",
        json={"logo_url": "https://cdn.example.com/logo.png"},
        headers=customer["headers"],
    )

    response = await client.post("/customer/onboarding/complete", headers=customer["headers"])
    assert response.status_code == 400

    progress = await client.get("/customer/progress", headers=customer["headers"])
    assert progress.json()["completed_phases"] == []
    assert progress.json()["progress"] == 0


@pytest.mark.asyncio
async def test_update_settings(client: AsyncClient, make_customer):
    customer = await make_customer()
    await make_customer("other@example.com", login=False)

    response = await client.put(
        "/customer/settings",
        json={"first_name": "Erika", "last_name": "Muster", "email": "other@example.com"},
        headers=customer["headers"],
    )
    assert response.status_code == 409

    response = await client.put(
        "/customer/settings",
        json={"first_name": "Erika", "last_name": "Muster", "email": "erika@example.com"},
        headers=customer["headers"],
    )
    assert response.status_code == 200
    assert response.json()["email"] == "erika@example.com"
    assert response.json()["first_name"] == "Erika"


@pytest.mark.asyncio
async def test_profile_image(client: AsyncClient, make_customer):
    customer = await make_customer()
    response = await client.put(
        "/customer/profile-image",
        json={"image_url": "https://cdn.example.com/me.jpg"},
        headers=customer["headers"],
    )
    assert response.status_code == 200
    assert response.json()["profile_image"] == "https://cdn.example.com/me.jpg"


@pytest.mark.asyncio
async def test_admin_info(client: AsyncClient, make_customer, admin_headers):
    customer = await make_customer()
    response = await client.get("/customer/admin-info", headers=customer["headers"])
    assert response.status_code == 404

    await client.put(
        "/admin/settings",
        json={
            "company_name": "NextMove",
            "email": "info@nextmove.de",
            "phone": "+49 30 123",
            "address": "Berlin",
        },
        headers=admin_headers,
    )
    response = await client.get("/customer/admin-info", headers=customer["headers"])
    assert response.status_code == 200
    assert response.json() == {
        "company_name": "NextMove",
        "email": "info@nextmove.de",
        "logo_url": None,
    }
