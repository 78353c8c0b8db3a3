"""Integration tests for the generated record endpoints."""

import pytest
import pytest_asyncio
from httpx import AsyncClient

COLLECTIONS = "/api/v1/collections"


async def create_collection(client: AsyncClient, name: str, fields: list[dict]) -> dict:
    response = await client.post(COLLECTIONS, json={"name": name, "fields": fields})
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_item(client: AsyncClient, path: str, payload: dict) -> dict:
    response = await client.post(f"/api/{path}", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest_asyncio.fixture
async def schema(client: AsyncClient) -> dict:
    authors = await create_collection(
        client, "Authors", [{"name": "name", "type": "string"}, {"name": "email", "type": "email"}]
    )
    tags = await create_collection(client, "Tags", [{"name": "label", "type": "string"}])
    posts = await create_collection(
        client,
        "Posts",
        [
            {"name": "title", "type": "string", "required": True},
            {"name": "published", "type": "boolean"},
            {"name": "views", "type": "number"},
            {"name": "meta", "type": "json"},
            {
                "name": "author",
                "type": "relation",
                "relation": {"collectionId": authors["id"], "selectFields": ["name"]},
            },
            {"name": "tags", "type": "relation_many", "relation": {"collectionId": tags["id"]}},
        ],
    )
    return {"authors": authors, "tags": tags, "posts": posts}


class TestCreate:
    @pytest.mark.asyncio
    async def test_missing_required_field(self, client, schema):
        response = await client.post("/api/posts", json={"title": ""})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Missing required fields"
        assert body["code"] == "VALIDATION_ERROR"
        assert body["fields"] == ["title"]
        assert (await client.get("/api/posts")).json()["meta"]["total"] == 0

    @pytest.mark.asyncio
    async def test_false_and_zero_are_values(self, client, schema):
        item = await create_item(client, "posts", {"title": "Hi", "published": False, "views": 0})
        assert item["data"] == {"title": "Hi", "published": False, "views": 0}
        assert item["collectionId"] == schema["posts"]["id"]
        assert item["id"]
        assert item["createdAt"]

    @pytest.mark.asyncio
    async def test_values_are_coerced_and_unknown_keys_dropped(self, client, schema):
        item = await create_item(
            client,
            "posts",
            {"title": "Hi", "published": "true", "views": "12.5", "meta": '{"a": 1}', "rogue": True},
        )
        assert item["data"] == {"title": "Hi", "published": True, "views": 12.5, "meta": {"a": 1}}

    @pytest.mark.asyncio
    async def test_unparsable_number_is_stored_as_null(self, client, schema):
        item = await create_item(client, "posts", {"title": "Hi", "views": "lots"})
        assert item["data"]["views"] is None

    @pytest.mark.asyncio
    async def test_unknown_collection(self, client, schema):
        response = await client.post("/api/ghosts", json={"title": "x"})
        assert response.status_code == 404
        assert response.json()["error"] == "Collection not found"


class TestReadUpdateDelete:
    @pytest.mark.asyncio
    async def test_list_in_creation_order(self, client, schema):
        ids = [(await create_item(client, "posts", {"title": str(i)}))["id"] for i in range(3)]

        response = await client.get("/api/posts")

        body = response.json()
        assert [i["id"] for i in body["data"]] == ids
        assert body["meta"] == {"total": 3, "collection": "Posts"}

    @pytest.mark.asyncio
    async def test_get_one(self, client, schema):
        item = await create_item(client, "posts", {"title": "Hi"})
        response = await client.get(f"/api/posts/{item['id']}")
        assert response.status_code == 200
        assert response.json()["data"] == item

    @pytest.mark.asyncio
    async def test_item_of_other_collection_is_not_found(self, client, schema):
        tag = await create_item(client, "tags", {"label": "x"})
        response = await client.get(f"/api/posts/{tag['id']}")
        assert response.status_code == 404
        assert response.json() == {"error": "Item not found", "code": "NOT_FOUND"}

    @pytest.mark.asyncio
    async def test_put_replaces_data(self, client, schema):
        item = await create_item(client, "posts", {"title": "Hi", "views": 3})

        response = await client.put(f"/api/posts/{item['id']}", json={"title": "Bye"})

        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["data"] == {"title": "Bye"}
        assert updated["createdAt"] == item["createdAt"]

    @pytest.mark.asyncio
    async def test_put_validates(self, client, schema):
        item = await create_item(client, "posts", {"title": "Hi"})
        response = await client.put(f"/api/posts/{item['id']}", json={"views": 1})
        assert response.status_code == 400
        assert response.json()["fields"] == ["title"]

    @pytest.mark.asyncio
    async def test_put_missing_item(self, client, schema):
        response = await client.put("/api/posts/ghost", json={"title": "x"})
        assert response.status_code == 404
        assert response.json()["error"] == "Item not found"

    @pytest.mark.asyncio
    async def test_put_missing_item_with_invalid_body(self, client, schema):
        response = await client.put("/api/posts/ghost", json={"title": ""})
        assert response.status_code == 404
        assert response.json() == {"error": "Item not found", "code": "NOT_FOUND"}

    @pytest.mark.asyncio
    async def test_delete(self, client, schema):
        item = await create_item(client, "posts", {"title": "Hi"})

        response = await client.delete(f"/api/posts/{item['id']}")

        assert response.json() == {"success": True, "message": "Item deleted successfully"}
        assert (await client.get(f"/api/posts/{item['id']}")).status_code == 404
        assert (await client.delete(f"/api/posts/{item['id']}")).status_code == 404


class TestPopulate:
    @pytest_asyncio.fixture
    async def post(self, client, schema):
        ada = await create_item(client, "authors", {"name": "Ada", "email": "ada@example.com"})
        t1 = await create_item(client, "tags", {"label": "python"})
        t2 = await create_item(client, "tags", {"label": "rest"})
        post = await create_item(
            client,
            "posts",
            {"title": "Hi", "author": ada["id"], "tags": [t1["id"], "missing", t2["id"]]},
        )
        return {"ada": ada, "t1": t1, "t2": t2, "post": post}

    @pytest.mark.asyncio
    async def test_populate_relations(self, client, post):
        response = await client.get("/api/posts?populate=author,tags")

        body = response.json()
        data = body["data"][0]["data"]
        assert data["author"] == {"_id": post["ada"]["id"], "_collection": "Authors", "name": "Ada"}
        assert len(data["tags"]) == 2
        assert [t["label"] for t in data["tags"]] == ["python", "rest"]
        assert body["meta"]["populated"] == ["author", "tags"]

    @pytest.mark.asyncio
    async def test_without_populate_ids_stay_raw(self, client, post):
        data = (await client.get(f"/api/posts/{post['post']['id']}")).json()["data"]["data"]
        assert data["author"] == post["ada"]["id"]
        assert data["tags"] == [post["t1"]["id"], "missing", post["t2"]["id"]]

    @pytest.mark.asyncio
    async def test_populate_non_relation_field_is_ignored(self, client, post):
        data = (await client.get(f"/api/posts/{post['post']['id']}?populate=title")).json()["data"]
        assert data["data"]["title"] == "Hi"
        assert data["data"]["author"] == post["ada"]["id"]

    @pytest.mark.asyncio
    async def test_unresolved_single_relation_keeps_raw_id(self, client, schema):
        item = await create_item(client, "posts", {"title": "Hi", "author": "ghost"})
        data = (await client.get(f"/api/posts/{item['id']}?populate=author")).json()["data"]
        assert data["data"]["author"] == "ghost"

    @pytest.mark.asyncio
    async def test_route_default_populate_fields(self, client, schema, post):
        posts_id = schema["posts"]["id"]
        await client.put(
            f"{COLLECTIONS}/{posts_id}/routes/GET_ALL", json={"populateFields": ["author"]}
        )

        body = (await client.get("/api/posts")).json()
        assert body["data"][0]["data"]["author"]["name"] == "Ada"
        assert body["meta"]["populated"] == ["author"]

        overridden = (await client.get("/api/posts?populate=tags")).json()
        assert overridden["data"][0]["data"]["author"] == post["ada"]["id"]
        assert overridden["meta"]["populated"] == ["tags"]

    @pytest.mark.asyncio
    async def test_deleted_target_leaves_references(self, client, schema, post):
        await client.delete(f"{COLLECTIONS}/{schema['tags']['id']}")

        data = (await client.get(f"/api/posts/{post['post']['id']}?populate=tags")).json()["data"]
        assert data["data"]["tags"] == [post["t1"]["id"], "missing", post["t2"]["id"]]

    @pytest.mark.asyncio
    async def test_repeated_get_one_is_identical(self, client, post):
        url = f"/api/posts/{post['post']['id']}?populate=author,tags"
        first = await client.get(url)
        second = await client.get(url)
        assert first.status_code == 200
        assert first.json() == second.json()
