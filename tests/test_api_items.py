from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_and_get_item(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/items/",
        json={"name": "Oak Chair", "sku": "CH-OAK", "price": 120.5, "stock": 12},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Oak Chair"
    assert data["stock"] == 12
    assert data["unit"] == "pcs"

    fetched = await client.get(f"/api/v1/items/{data['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["sku"] == "CH-OAK"


@pytest.mark.asyncio
async def test_create_rejects_negative_stock(client: AsyncClient) -> None:
    response = await client.post("/api/v1/items/", json={"name": "Broken", "stock": -1})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_sku(client: AsyncClient) -> None:
    await client.post("/api/v1/items/", json={"name": "Lamp", "sku": "LMP-1"})

    response = await client.post("/api/v1/items/", json={"name": "Other lamp", "sku": "LMP-1"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "duplicate_key"


@pytest.mark.asyncio
async def test_update_item_details(client: AsyncClient) -> None:
    created = await client.post("/api/v1/items/", json={"name": "Desk", "stock": 3})
    item_id = created.json()["id"]

    response = await client.patch(f"/api/v1/items/{item_id}", json={"price": 300})

    assert response.status_code == 200
    assert response.json()["price"] == 300
    assert response.json()["stock"] == 3


@pytest.mark.asyncio
async def test_stock_cannot_be_edited_directly(client: AsyncClient) -> None:
    created = await client.post("/api/v1/items/", json={"name": "Desk", "stock": 3})
    item_id = created.json()["id"]

    response = await client.patch(f"/api/v1/items/{item_id}", json={"stock": 50})

    assert response.status_code == 422
    fetched = await client.get(f"/api/v1/items/{item_id}")
    assert fetched.json()["stock"] == 3


@pytest.mark.asyncio
async def test_missing_item(client: AsyncClient) -> None:
    response = await client.get(f"/api/v1/items/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_and_search(client: AsyncClient) -> None:
    for name, sku in (("Blue Mug", "MUG-B"), ("Red Mug", "MUG-R"), ("Plate", None)):
        await client.post("/api/v1/items/", json={"name": name, "sku": sku})

    listing = await client.get("/api/v1/items/")
    assert listing.json()["total"] == 3
    assert [i["name"] for i in listing.json()["items"]] == ["Blue Mug", "Plate", "Red Mug"]

    search = await client.get("/api/v1/items/search", params={"q": "mug"})
    assert [i["name"] for i in search.json()] == ["Blue Mug", "Red Mug"]


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["name", "price", "unit"])
async def test_required_fields_cannot_be_nulled(client: AsyncClient, field: str) -> None:
    created = await client.post("/api/v1/items/", json={"name": "Desk", "price": 10})
    item_id = created.json()["id"]

    response = await client.patch(f"/api/v1/items/{item_id}", json={field: None})

    assert response.status_code == 422
    fetched = await client.get(f"/api/v1/items/{item_id}")
    assert fetched.json()["name"] == "Desk"
    assert fetched.json()["price"] == 10


@pytest.mark.asyncio
async def test_sku_can_be_cleared(client: AsyncClient) -> None:
    created = await client.post("/api/v1/items/", json={"name": "Desk", "sku": "DSK-1"})

    response = await client.patch(f"/api/v1/items/{created.json()['id']}", json={"sku": None})

    assert response.status_code == 200
    assert response.json()["sku"] is None


@pytest.mark.asyncio
async def test_sku_claimed_concurrently_is_duplicate(client: AsyncClient) -> None:
    await client.post("/api/v1/items/", json={"name": "Lamp", "sku": "LMP-1"})
    other = await client.post("/api/v1/items/", json={"name": "Other lamp", "sku": "LMP-2"})

    # The pre-check misses a row committed by a parallel request
    with patch("src.api.v1.items._sku_taken", new_callable=AsyncMock, return_value=False):
        created = await client.post("/api/v1/items/", json={"name": "Third", "sku": "LMP-1"})
        updated = await client.patch(
            f"/api/v1/items/{other.json()['id']}", json={"sku": "LMP-1"}
        )

    for response in (created, updated):
        assert response.status_code == 400
        assert response.json() == {"detail": "Duplicate sku: LMP-1", "error_code": "duplicate_key"}

    listing = await client.get("/api/v1/items/")
    assert listing.json()["total"] == 2
