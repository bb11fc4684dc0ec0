import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_request_callback_and_cooldown(client: AsyncClient, make_customer):
    customer = await make_customer()
    response = await client.post(
        "/callbacks", json={"phone": "+49 170 1234567"}, headers=customer["headers"]
    )
    assert response.status_code == 201
    assert response.json()["status"] == "pending"

    response = await client.post(
        "/callbacks", json={"phone": "+49 170 1234567"}, headers=customer["headers"]
    )
    assert response.status_code == 429


@pytest.mark.asyncio
async def test_admin_processes_callbacks(client: AsyncClient, make_customer, admin_headers):
    customer = await make_customer()
    created = await client.post(
        "/callbacks", json={"phone": "0301234"}, headers=customer["headers"]
    )
    callback_id = created.json()["id"]

    response = await client.get("/admin/callbacks", headers=admin_headers)
    assert response.status_code == 200
    [entry] = response.json()
    assert entry["email"] == customer["email"]
    assert entry["first_name"] == "Max"

    response = await client.patch(
        f"/admin/callbacks/{callback_id}", json={"status": "completed"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "completed"

    response = await client.get("/admin/callbacks?status=pending", headers=admin_headers)
    assert response.json() == []


@pytest.mark.asyncio
async def test_invalid_callback_status_rejected(client: AsyncClient, make_customer, admin_headers):
    customer = await make_customer()
    created = await client.post("/callbacks", json={"phone": "0301234"}, headers=customer["headers"])
    response = await client.patch(
        f"/admin/callbacks/{created.json()['id']}",
        json={"status": "forgotten"},
        headers=admin_headers,
    )
    assert response.status_code == 422
