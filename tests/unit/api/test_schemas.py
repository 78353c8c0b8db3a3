from apibuilder.domain.entities import Collection, Field, FieldType, RouteOperation
from apibuilder.infrastructure.api.schemas import (
    CollectionResponse,
    RecordListMeta,
    UpdateCollectionRequest,
    UpdateRouteRequest,
    error_response,
)


def test_update_collection_request_only_sends_present_keys():
    request = UpdateCollectionRequest.model_validate({"name": "Articles"})
    assert request.to_updates() == {"name": "Articles"}


def test_update_collection_request_converts_fields_and_routes():
    request = UpdateCollectionRequest.model_validate(
        {
            "fields": [{"name": " title ", "type": "string", "required": True}],
            "routeSettings": {"POST": {"isPrivate": True}},
        }
    )

    updates = request.to_updates()

    assert updates["fields"][0].name == "title"
    assert updates["fields"][0].id == ""
    assert updates["route_settings"].get(RouteOperation.POST).is_private is True
    assert updates["route_settings"].get(RouteOperation.GET_ALL).is_private is False


def test_update_route_request_keeps_explicit_null_custom_path():
    request = UpdateRouteRequest.model_validate({"customPath": None, "enabled": None})
    assert request.to_changes() == {"custom_path": None}


def test_collection_response_fills_default_routes():
    collection = Collection(
        id="c1",
        name="Posts",
        slug="posts",
        fields=[Field(id="f1", name="title", type=FieldType.STRING)],
    )

    data = CollectionResponse.from_entity(collection).model_dump(by_alias=True)

    assert set(data["routeSettings"]) == set(RouteOperation)
    assert data["fields"][0]["name"] == "title"


def test_error_response_drops_empty_extras():
    response = error_response(404, "Item not found", "NOT_FOUND", fields=None)
    assert response.status_code == 404
    assert response.body == b'{"error":"Item not found","code":"NOT_FOUND"}'


def test_list_meta_omits_populated_when_nothing_was_populated():
    assert RecordListMeta(total=0, collection="Posts").model_dump(by_alias=True) == {
        "total": 0,
        "collection": "Posts",
    }
    meta = RecordListMeta(total=1, collection="Posts", populated=["author"])
    assert meta.model_dump(by_alias=True)["populated"] == ["author"]
