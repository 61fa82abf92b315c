"""
Inventory and bag API tests - lazy registration, batch reads, reconciliation.
"""

import json

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from forumshop.db.models import Inventory, User, UserAudit


@pytest.mark.asyncio
async def test_unknown_user_is_registered_on_first_read(client: AsyncClient, session_maker):
    response = await client.get("/api/v1/inventory", params={"user_id": 42})
    assert response.status_code == 200
    assert response.json() == {"user_id": 42, "credits": 100.0, "inventory": [], "bag": []}

    again = await client.get("/api/v1/inventory", params={"user_id": 42})
    assert again.status_code == 200

    async with session_maker() as s:
        users = (await s.execute(select(User))).scalars().all()
        [audit] = (await s.execute(select(UserAudit))).scalars().all()
    assert [(u.user_id, float(u.credits)) for u in users] == [(42, 100.0)]
    assert audit.action_type == "INSERT"
    assert audit.actor_id is None
    assert json.loads(audit.new_values)["credits"] == 100.0


@pytest.mark.asyncio
async def test_inventory_view_with_bag_and_categories(client: AsyncClient, seed):
    snacks = await seed.category("Snacks")
    user = await seed.user(5, credits="12.50")
    chips = await seed.item([snacks], name="Chips", price="1.25")
    apple = await seed.item([snacks], name="Apple")
    stale = await seed.item([snacks], name="Stale", is_deleted=True)
    await seed.inventory(user, chips, total=3, in_bag=2)
    await seed.inventory(user, apple, total=1)
    await seed.inventory(user, stale, total=1)

    response = await client.get("/api/v1/inventory", params={"user_id": 5})
    assert response.status_code == 200
    body = response.json()
    assert body["credits"] == 12.5
    assert [entry["name"] for entry in body["inventory"]] == ["Apple", "Chips"]
    chips_entry = body["inventory"][1]
    assert chips_entry["total_quantity"] == 3
    assert chips_entry["quantity_in_bag"] == 2
    assert chips_entry["price"] == 1.25
    assert chips_entry["categories"] == [
        {"id": snacks.id, "name": "Snacks", "image": "https://img.test/Snacks.png"}
    ]
    assert [entry["name"] for entry in body["bag"]] == ["Chips"]


@pytest.mark.asyncio
async def test_batch_inventories_keyed_by_user(client: AsyncClient, seed):
    snacks = await seed.category("Snacks")
    known = await seed.user(1)
    chips = await seed.item([snacks], name="Chips")
    await seed.inventory(known, chips, total=2)

    response = await client.get("/api/v1/inventory", params={"user_ids": "1,2"})
    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"1", "2"}
    assert body["1"]["inventory"][0]["total_quantity"] == 2
    assert body["2"] == {"user_id": 2, "credits": 100.0, "inventory": [], "bag": []}


@pytest.mark.asyncio
async def test_batch_invalid_id_names_position(client: AsyncClient):
    response = await client.get("/api/v1/inventory", params={"user_ids": "1,x"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid user ID format in 'user_ids' at position 1"}

    for raw in ("--5", "1,-\u00b9"):
        response = await client.get("/api/v1/inventory", params={"user_ids": raw})
        assert response.status_code == 400
        assert "Invalid user ID format" in response.json()["error"]


@pytest.mark.asyncio
async def test_inventory_requires_user(client: AsyncClient):
    response = await client.get("/api/v1/inventory")
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required field(s): user_id"}


@pytest.mark.asyncio
async def test_bags_view(client: AsyncClient, seed):
    snacks = await seed.category("Snacks")
    user = await seed.user(5)
    chips = await seed.item([snacks], name="Chips")
    apple = await seed.item([snacks], name="Apple")
    await seed.inventory(user, chips, total=3, in_bag=2)
    await seed.inventory(user, apple, total=1)

    response = await client.get("/api/v1/bags", params={"user_id": 5})
    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == 5
    assert [(e["name"], e["quantity"]) for e in body["bag"]] == [("Chips", 2)]

    batch = await client.get("/api/v1/bags", params={"user_ids": "5,6"})
    assert batch.json()["6"]["bag"] == []


@pytest.mark.asyncio
async def test_reconcile_replaces_everything(client: AsyncClient, seed, session_maker):
    snacks = await seed.category("Snacks")
    user = await seed.user(5)
    chips = await seed.item([snacks], name="Chips")
    apple = await seed.item([snacks], name="Apple")
    await seed.inventory(user, chips, total=9, in_bag=9)

    response = await client.post(
        "/api/v1/inventory",
        json={
            "user_id": 5,
            "inventory": [{"item_id": apple.id, "quantity": 4}],
            "bag": [{"item_id": apple.id, "quantity": 1}],
        },
    )
    assert response.status_code == 200
    assert response.json() == {
        "message": "Inventory and bag updated successfully",
        "user_id": 5,
        "items": 1,
    }
    async with session_maker() as s:
        rows = (await s.execute(select(Inventory))).scalars().all()
    assert [(r.item_id, r.total_quantity, r.quantity_in_bag) for r in rows] == [(apple.id, 4, 1)]


@pytest.mark.asyncio
async def test_reconcile_bag_over_total_rejected_in_full(client: AsyncClient, seed, session_maker):
    snacks = await seed.category("Snacks")
    user = await seed.user(5)
    chips = await seed.item([snacks], name="Chips")
    apple = await seed.item([snacks], name="Apple")
    await seed.inventory(user, chips, total=2, in_bag=1)

    response = await client.post(
        "/api/v1/inventory",
        json={
            "user_id": 5,
            "inventory": [{"item_id": chips.id, "quantity": 5}, {"item_id": apple.id, "quantity": 1}],
            "bag": [{"item_id": apple.id, "quantity": 3}],
        },
    )
    assert response.status_code == 400
    assert response.json() == {
        "error": f"Bag quantity (3) exceeds total quantity (1) for item_id {apple.id}"
    }
    async with session_maker() as s:
        rows = (await s.execute(select(Inventory))).scalars().all()
    assert [(r.item_id, r.total_quantity, r.quantity_in_bag) for r in rows] == [(chips.id, 2, 1)]


@pytest.mark.asyncio
async def test_reconcile_bag_item_missing_from_inventory(client: AsyncClient, seed):
    snacks = await seed.category("Snacks")
    chips = await seed.item([snacks], name="Chips")
    response = await client.post(
        "/api/v1/inventory",
        json={"user_id": 8, "inventory": [], "bag": [{"item_id": chips.id, "quantity": 1}]},
    )
    assert response.status_code == 400
    assert "exceeds total quantity (0)" in response.json()["error"]


@pytest.mark.asyncio
async def test_reconcile_rejects_duplicates_and_unknown_items(client: AsyncClient, seed):
    snacks = await seed.category("Snacks")
    chips = await seed.item([snacks], name="Chips")

    duplicate = await client.post(
        "/api/v1/inventory",
        json={
            "user_id": 8,
            "inventory": [{"item_id": chips.id, "quantity": 1}, {"item_id": chips.id, "quantity": 2}],
            "bag": [],
        },
    )
    assert duplicate.status_code == 400
    assert "Duplicate item_id" in duplicate.json()["error"]

    unknown = await client.post(
        "/api/v1/inventory",
        json={"user_id": 8, "inventory": [{"item_id": 404, "quantity": 1}], "bag": []},
    )
    assert unknown.status_code == 404
    assert unknown.json() == {"error": "Items not found: 404"}


@pytest.mark.asyncio
async def test_reconcile_negative_quantity(client: AsyncClient, session_maker):
    response = await client.post(
        "/api/v1/inventory",
        json={"user_id": 8, "inventory": [{"item_id": 1, "quantity": -1}], "bag": []},
    )
    assert response.status_code == 400
    assert "inventory[0].quantity" in response.json()["error"]
    async with session_maker() as s:
        assert await s.scalar(select(func.count()).select_from(User)) == 0
