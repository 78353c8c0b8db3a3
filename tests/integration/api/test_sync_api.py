"""Integration tests for full-state export and import."""

import pytest
from httpx import AsyncClient

SYNC = "/api/v1/sync"


async def seed(client: AsyncClient) -> dict:
    response = await client.post(
        "/api/v1/collections",
        json={"name": "Posts", "fields": [{"name": "title", "type": "string", "required": True}]},
    )
    posts = response.json()["data"]
    await client.post("/api/posts", json={"title": "First"})
    await client.post("/api/posts", json={"title": "Second"})
    return posts


@pytest.mark.asyncio
async def test_export(client: AsyncClient):
    posts = await seed(client)

    response = await client.get(SYNC)

    assert response.status_code == 200
    data = response.json()["data"]
    assert [c["id"] for c in data["collections"]] == [posts["id"]]
    assert [i["data"]["title"] for i in data["items"][posts["id"]]] == ["First", "Second"]


@pytest.mark.asyncio
async def test_import_round_trip(client: AsyncClient):
    await seed(client)
    exported = (await client.get(SYNC)).json()["data"]

    response = await client.post(SYNC, json=exported)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Data synced successfully",
        "collections": 1,
        "items": 2,
    }
    assert (await client.get(SYNC)).json()["data"] == exported


@pytest.mark.asyncio
async def test_import_replaces_store(client: AsyncClient):
    await seed(client)
    document = {
        "collections": [
            {
                "id": "c_notes",
                "name": "Notes",
                "slug": "notes",
                "fields": [{"id": "f1", "name": "text", "type": "text", "required": False}],
                "createdAt": "2024-01-01T00:00:00.000Z",
                "updatedAt": "2024-01-01T00:00:00.000Z",
            }
        ],
        "items": {},
    }

    response = await client.post(SYNC, json=document)

    assert response.status_code == 200
    assert (await client.get("/api/posts")).status_code == 404
    assert (await client.get("/api/notes")).json()["data"] == []


@pytest.mark.asyncio
async def test_malformed_import_leaves_store_unchanged(client: AsyncClient):
    await seed(client)
    before = (await client.get(SYNC)).json()["data"]

    response = await client.post(
        SYNC,
        json={"collections": before["collections"], "items": {"ghost": []}},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert "ghost" in response.json()["error"]
    assert (await client.get(SYNC)).json()["data"] == before


@pytest.mark.asyncio
async def test_import_requires_collections(client: AsyncClient):
    response = await client.post(SYNC, json={"items": {}})
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
