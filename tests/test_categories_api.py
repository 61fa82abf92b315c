"""
Category API tests - create with upload, update, soft delete with cascade, reads.
"""

import json

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from forumshop.db.models import CategoryAudit, Item, ItemAudit, item_categories


@pytest.mark.asyncio
async def test_add_category_uploads_image_and_audits(client: AsyncClient, session_maker, uploader):
    response = await client.post(
        "/api/v1/categories",
        data={"name": "Snacks", "user_id": "7"},
        files={"image": ("snack.png", b"png-bytes", "image/png")},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Snacks"
    assert body["image"] == "https://img.test/cat_snack.png"
    assert body["is_active"] is True
    assert body["created_by"] == 7
    assert uploader.uploads == [("snack.png", "cat", "h-100,w-100,c-at_max,q-85")]

    async with session_maker() as s:
        audits = (await s.execute(select(CategoryAudit))).scalars().all()
    assert len(audits) == 1
    assert audits[0].category_id == body["id"]
    assert audits[0].action_type == "INSERT"
    assert audits[0].old_values is None


@pytest.mark.asyncio
async def test_add_category_with_image_url(client: AsyncClient):
    response = await client.post(
        "/api/v1/categories",
        data={"name": "Drinks", "user_id": "7", "image": "https://cdn.test/d.png", "is_active": "false"},
    )
    assert response.status_code == 201
    assert response.json()["image"] == "https://cdn.test/d.png"
    assert response.json()["is_active"] is False


@pytest.mark.asyncio
async def test_add_category_missing_fields(client: AsyncClient):
    response = await client.post("/api/v1/categories", data={"user_id": "7"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required field(s): name"}


@pytest.mark.asyncio
async def test_add_category_missing_image(client: AsyncClient):
    response = await client.post("/api/v1/categories", data={"name": "Snacks", "user_id": "7"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required field(s): image"}


@pytest.mark.asyncio
async def test_update_category(client: AsyncClient, seed, session_maker):
    category = await seed.category("Snacks")
    response = await client.put(
        f"/api/v1/categories/{category.id}",
        json={"user_id": 3, "name": "Treats", "image": "https://cdn.test/t.png", "is_active": False},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Treats"
    assert body["edited_by"] == 3
    assert body["is_active"] is False

    async with session_maker() as s:
        [audit] = (await s.execute(select(CategoryAudit))).scalars().all()
    assert audit.action_type == "UPDATE"
    assert json.loads(audit.old_values)["name"] == "Snacks"
    assert json.loads(audit.new_values)["name"] == "Treats"


@pytest.mark.asyncio
async def test_update_missing_category(client: AsyncClient):
    response = await client.patch(
        "/api/v1/categories/999",
        json={"user_id": 3, "name": "Treats", "image": "https://cdn.test/t.png", "is_active": True},
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Category not found"}


@pytest.mark.asyncio
async def test_delete_cascades_to_sole_category_items(client: AsyncClient, seed, session_maker):
    snacks = await seed.category("Snacks")
    drinks = await seed.category("Drinks")
    only_snack = await seed.item([snacks], name="Chips")
    shared = await seed.item([snacks, drinks], name="Combo")

    response = await client.request(
        "DELETE", f"/api/v1/categories/{snacks.id}", json={"user_id": 7}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["is_deleted"] is True
    assert body["is_active"] is False
    assert body["edited_by"] == 7

    async with session_maker() as s:
        chips = await s.get(Item, only_snack.id)
        combo = await s.get(Item, shared.id)
        links = (await s.execute(select(item_categories))).all()
        item_audits = (await s.execute(select(ItemAudit))).scalars().all()
        category_audits = (await s.execute(select(CategoryAudit))).scalars().all()

    assert chips.is_deleted is True and chips.is_active is False
    assert combo.is_deleted is False
    assert [(row.category_id, row.item_id) for row in links] == [(drinks.id, shared.id)]
    assert [(a.item_id, a.action_type) for a in item_audits] == [(only_snack.id, "DELETE")]
    assert json.loads(item_audits[0].old_values)["categories"] == [snacks.id]
    assert json.loads(item_audits[0].new_values)["categories"] == []
    assert [(a.category_id, a.action_type) for a in category_audits] == [(snacks.id, "DELETE")]


@pytest.mark.asyncio
async def test_delete_twice_is_rejected(client: AsyncClient, seed):
    category = await seed.category("Snacks")
    first = await client.request("DELETE", f"/api/v1/categories/{category.id}", json={"user_id": 7})
    assert first.status_code == 200
    second = await client.request("DELETE", f"/api/v1/categories/{category.id}", json={"user_id": 7})
    assert second.status_code == 400
    assert second.json() == {"error": "Category is already deleted"}


@pytest.mark.asyncio
async def test_get_category_with_live_items(client: AsyncClient, seed):
    category = await seed.category("Snacks")
    await seed.item([category], name="Chips")
    await seed.item([category], name="Stale", is_deleted=True)

    response = await client.get("/api/v1/categories", params={"id": category.id})
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Snacks"
    assert [item["name"] for item in body["items"]] == ["Chips"]


@pytest.mark.asyncio
async def test_deleted_category_is_hidden(client: AsyncClient, seed):
    gone = await seed.category("Gone", is_deleted=True)
    await seed.category("Here")

    single = await client.get("/api/v1/categories", params={"id": gone.id})
    assert single.status_code == 404

    listing = await client.get("/api/v1/categories")
    assert listing.status_code == 200
    body = listing.json()
    assert [c["name"] for c in body["items"]] == ["Here"]
    assert body["pagination"] == {"total": 1, "page": 1, "limit": 24, "pages": 1}


@pytest.mark.asyncio
async def test_unknown_query_parameter(client: AsyncClient):
    response = await client.get("/api/v1/categories", params={"sort": "name"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid parameter: sort"}
