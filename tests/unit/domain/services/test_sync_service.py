"""Unit tests for SyncService."""

import copy

import pytest
import pytest_asyncio

from apibuilder.domain.entities import Field, FieldType, RouteOperation
from apibuilder.domain.services.collection_service import CollectionService
from apibuilder.domain.services.record_service import RecordService
from apibuilder.domain.services.sync_service import SyncPayloadError, SyncService


def make_field(name: str, field_type: str = "string", **kwargs) -> Field:
    return Field(id="", name=name, type=FieldType(field_type), **kwargs)


@pytest_asyncio.fixture
async def seeded(db_session):
    collections = CollectionService(db_session)
    records = RecordService(db_session)
    posts = await collections.create_collection("Posts", [make_field("title", required=True)])
    users = await collections.create_collection("Users", [make_field("name")])
    await collections.update_route(posts.id, RouteOperation.POST, {"is_private": True})
    first = await records.create_item(posts, {"title": "First"})
    second = await records.create_item(posts, {"title": "Second"})
    return {"posts": posts, "users": users, "items": [first, second]}


@pytest.mark.asyncio
async def test_export_state(db_session, seeded):
    state = await SyncService(db_session).export_state()

    assert [c["slug"] for c in state["collections"]] == ["posts", "users"]
    assert state["collections"][0]["routeSettings"]["POST"]["isPrivate"] is True
    assert [i["data"]["title"] for i in state["items"][seeded["posts"].id]] == ["First", "Second"]
    assert state["items"][seeded["users"].id] == []


@pytest.mark.asyncio
async def test_export_import_round_trip(db_session, seeded):
    service = SyncService(db_session)
    state = await service.export_state()

    counts = await service.import_state(copy.deepcopy(state))

    assert counts == {"collections": 2, "items": 2}
    assert await service.export_state() == state


@pytest.mark.asyncio
async def test_import_replaces_everything(db_session, seeded):
    service = SyncService(db_session)
    document = {
        "collections": [
            {
                "id": "c_new",
                "name": "Notes",
                "slug": "notes",
                "fields": [{"id": "f1", "name": "text", "type": "text", "required": False}],
                "createdAt": "2024-01-01T00:00:00.000Z",
                "updatedAt": "2024-01-01T00:00:00.000Z",
            }
        ],
        "items": {
            "c_new": [
                {
                    "id": "n1",
                    "collectionId": "c_new",
                    "data": {"text": "hello"},
                    "createdAt": "2024-01-01T00:00:00.000Z",
                    "updatedAt": "2024-01-01T00:00:00.000Z",
                }
            ]
        },
    }

    await service.import_state(document)

    state = await service.export_state()
    assert [c["id"] for c in state["collections"]] == ["c_new"]
    assert state["items"] == {"c_new": [document["items"]["c_new"][0]]}
    assert await CollectionService(db_session).get_collection(seeded["posts"].id) is None


@pytest.mark.asyncio
async def test_items_default_to_empty(db_session, seeded):
    state = await SyncService(db_session).export_state()
    counts = await SyncService(db_session).import_state({"collections": state["collections"]})
    assert counts == {"collections": 2, "items": 0}


@pytest.mark.parametrize(
    "document, message",
    [
        ([], "must be an object"),
        ({"items": {}}, "'collections' must be a list"),
        ({"collections": [], "items": []}, "'items' must be an object"),
        ({"collections": [{"id": "c1"}]}, "collections[0] is invalid"),
        ({"collections": [], "items": {"ghost": []}}, "unknown collection"),
    ],
)
def test_parse_state_rejects_malformed_documents(document, message):
    with pytest.raises(SyncPayloadError) as exc_info:
        SyncService.parse_state(document)
    assert message in str(exc_info.value)


@pytest.mark.asyncio
async def test_duplicate_ids_are_rejected(db_session, seeded):
    service = SyncService(db_session)
    state = await service.export_state()

    duplicated = copy.deepcopy(state)
    duplicated["collections"].append(copy.deepcopy(state["collections"][0]))
    with pytest.raises(SyncPayloadError, match="Duplicate collection ID"):
        service.parse_state(duplicated)

    duplicated = copy.deepcopy(state)
    posts_items = duplicated["items"][seeded["posts"].id]
    posts_items.append(copy.deepcopy(posts_items[0]))
    with pytest.raises(SyncPayloadError, match="Duplicate item ID"):
        service.parse_state(duplicated)


@pytest.mark.asyncio
async def test_item_filed_under_wrong_collection(db_session, seeded):
    service = SyncService(db_session)
    state = await service.export_state()
    state["items"][seeded["users"].id] = state["items"].pop(seeded["posts"].id)

    with pytest.raises(SyncPayloadError, match="belongs to"):
        service.parse_state(state)


@pytest.mark.asyncio
async def test_failed_import_leaves_store_unchanged(db_session, seeded):
    service = SyncService(db_session)
    before = await service.export_state()

    with pytest.raises(SyncPayloadError):
        await service.import_state({"collections": [{"name": "broken"}]})

    assert await service.export_state() == before
