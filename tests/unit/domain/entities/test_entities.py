from datetime import datetime, timezone

import pytest

from apibuilder.domain.entities import (
    Collection,
    CollectionItem,
    Field,
    FieldType,
    RelationConfig,
    RouteConfig,
    RouteOperation,
    RouteSettings,
)
from apibuilder.domain.entities.timestamps import format_timestamp, parse_timestamp


class TestField:
    def test_relation_field_document_shape(self):
        field = Field(
            id="f1",
            name="author",
            type=FieldType.RELATION,
            required=True,
            relation=RelationConfig(collection_id="c_users", display_field="name", select_fields=["name"]),
        )

        data = field.to_dict()

        assert data == {
            "id": "f1",
            "name": "author",
            "type": "relation",
            "required": True,
            "relation": {"collectionId": "c_users", "displayField": "name", "selectFields": ["name"]},
        }
        assert Field.from_dict(data) == field

    def test_optional_keys_are_omitted(self):
        data = Field(id="f1", name="title", type=FieldType.STRING).to_dict()
        assert set(data) == {"id", "name", "type", "required"}

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValueError):
            Field.from_dict({"id": "f1", "name": "x", "type": "file"})

    def test_is_relation(self):
        assert FieldType.RELATION.is_relation
        assert FieldType.RELATION_MANY.is_relation
        assert not FieldType.SELECT.is_relation


class TestRouteSettings:
    def test_defaults_enable_every_operation_publicly(self):
        settings = RouteSettings.defaults()
        for operation in RouteOperation:
            config = settings.get(operation)
            assert config.enabled is True
            assert config.is_private is False
            assert config.custom_path is None

    def test_from_dict_fills_missing_operations(self):
        settings = RouteSettings.from_dict({"POST": {"enabled": False, "isPrivate": False}})
        assert settings.get(RouteOperation.POST).enabled is False
        assert settings.get(RouteOperation.GET_ALL).enabled is True

    def test_with_route_leaves_others_untouched(self):
        settings = RouteSettings.defaults().with_route(
            RouteOperation.DELETE, RouteConfig(enabled=False)
        )
        assert settings.get(RouteOperation.DELETE).enabled is False
        assert settings.get(RouteOperation.PUT).enabled is True

    def test_round_trip(self):
        settings = RouteSettings.defaults().with_route(
            RouteOperation.GET_ALL,
            RouteConfig(is_private=True, api_key="ak_x", custom_path="articles", populate_fields=["author"]),
        )
        data = settings.to_dict()
        assert data["GET_ALL"] == {
            "enabled": True,
            "isPrivate": True,
            "apiKey": "ak_x",
            "customPath": "articles",
            "populateFields": ["author"],
        }
        assert RouteSettings.from_dict(data) == settings

    def test_operation_properties(self):
        assert RouteOperation.GET_ONE.http_method == "GET"
        assert RouteOperation.PUT.http_method == "PUT"
        assert RouteOperation.DELETE.targets_item
        assert not RouteOperation.POST.targets_item
        assert RouteOperation.GET_ALL.supports_populate
        assert not RouteOperation.PUT.supports_populate


class TestCollection:
    def test_requires_id_and_name(self):
        with pytest.raises(ValueError, match="ID"):
            Collection(id="", name="Posts", slug="posts", fields=[])
        with pytest.raises(ValueError, match="name"):
            Collection(id="c1", name="", slug="", fields=[])

    def test_routes_default_when_unset(self):
        collection = Collection(id="c1", name="Posts", slug="posts", fields=[])
        assert collection.route_settings is None
        assert collection.routes.get(RouteOperation.GET_ALL).enabled is True

    def test_document_round_trip(self):
        created = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        collection = Collection(
            id="c1",
            name="Posts",
            slug="posts",
            description="Blog posts",
            fields=[Field(id="f1", name="title", type=FieldType.STRING, required=True)],
            created_at=created,
            updated_at=created,
        )

        data = collection.to_dict()

        assert data["createdAt"] == "2024-01-15T10:30:00.000Z"
        assert "routeSettings" not in data
        assert Collection.from_dict(data) == collection

    def test_get_field(self):
        collection = Collection(
            id="c1",
            name="Posts",
            slug="posts",
            fields=[Field(id="f1", name="title", type=FieldType.STRING)],
        )
        assert collection.get_field("title").id == "f1"
        assert collection.get_field("Title") is None
        assert collection.field_names == ["title"]


class TestCollectionItem:
    def test_document_round_trip(self):
        item = CollectionItem(
            id="i1",
            collection_id="c1",
            data={"title": "Hi", "tags": ["a", "b"]},
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            updated_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
        )
        data = item.to_dict()
        assert data["collectionId"] == "c1"
        assert CollectionItem.from_dict(data) == item


class TestTimestamps:
    def test_parse_accepts_z_suffix(self):
        parsed = parse_timestamp("2024-01-15T10:30:00.123Z")
        assert parsed == datetime(2024, 1, 15, 10, 30, 0, 123000, tzinfo=timezone.utc)

    def test_naive_values_are_treated_as_utc(self):
        assert format_timestamp(datetime(2024, 1, 15)) == "2024-01-15T00:00:00.000Z"
