"""Unit tests for RelationPopulator."""

import pytest

from apibuilder.domain.entities import Collection, CollectionItem, Field, FieldType, RelationConfig
from apibuilder.domain.services.relation_populator import RelationPopulator, parse_populate_param


def make_field(name: str, field_type: str = "string", **kwargs) -> Field:
    return Field(id=f"f_{name}", name=name, type=FieldType(field_type), **kwargs)


@pytest.fixture
def authors():
    return Collection(
        id="c_authors",
        name="Authors",
        slug="authors",
        fields=[make_field("name"), make_field("bio", "text")],
    )


@pytest.fixture
def tags():
    return Collection(id="c_tags", name="Tags", slug="tags", fields=[make_field("label")])


@pytest.fixture
def posts():
    return Collection(
        id="c_posts",
        name="Posts",
        slug="posts",
        fields=[
            make_field("title", required=True),
            make_field(
                "author",
                "relation",
                relation=RelationConfig(collection_id="c_authors", select_fields=["name"]),
            ),
            make_field("tags", "relation_many", relation=RelationConfig(collection_id="c_tags")),
        ],
    )


@pytest.fixture
def populator(authors, tags):
    author_items = {
        "a1": CollectionItem(id="a1", collection_id="c_authors", data={"name": "Ada", "bio": "..."}),
    }
    tag_items = {
        "t1": CollectionItem(id="t1", collection_id="c_tags", data={"label": "python"}),
        "t2": CollectionItem(id="t2", collection_id="c_tags", data={"label": "rest"}),
    }
    return RelationPopulator(
        collections={authors.id: authors, tags.id: tags},
        items={"c_authors": author_items, "c_tags": tag_items},
    )


def post(data):
    return CollectionItem(id="p1", collection_id="c_posts", data=data)


@pytest.mark.parametrize(
    "raw, expected",
    [(None, []), ("", []), ("author", ["author"]), (" author , tags,,author ", ["author", "tags"])],
)
def test_parse_populate_param(raw, expected):
    assert parse_populate_param(raw) == expected


class TestRelationPopulator:
    def test_single_relation_is_embedded_with_select_fields(self, populator, posts):
        item = populator.populate(post({"title": "Hi", "author": "a1"}), posts, ["author"])
        assert item.data["author"] == {"_id": "a1", "_collection": "Authors", "name": "Ada"}

    def test_original_item_is_not_mutated(self, populator, posts):
        original = post({"title": "Hi", "author": "a1"})
        populator.populate(original, posts, ["author"])
        assert original.data["author"] == "a1"

    def test_unresolved_single_relation_keeps_raw_id(self, populator, posts):
        item = populator.populate(post({"author": "missing"}), posts, ["author"])
        assert item.data["author"] == "missing"

    def test_relation_many_drops_unresolved_ids(self, populator, posts):
        item = populator.populate(post({"tags": ["t1", "missing", "t2"]}), posts, ["tags"])
        assert [t["_id"] for t in item.data["tags"]] == ["t1", "t2"]
        assert item.data["tags"][0] == {"_id": "t1", "_collection": "Tags", "label": "python"}

    def test_non_relation_and_unknown_fields_are_ignored(self, populator, posts):
        item = populator.populate(post({"title": "Hi", "author": "a1"}), posts, ["title", "nope"])
        assert item.data == {"title": "Hi", "author": "a1"}

    def test_fields_not_requested_stay_raw(self, populator, posts):
        item = populator.populate(post({"author": "a1", "tags": ["t1"]}), posts, ["tags"])
        assert item.data["author"] == "a1"

    def test_missing_target_collection_leaves_value(self, posts, authors):
        populator = RelationPopulator(collections={authors.id: authors}, items={})
        item = populator.populate(post({"tags": ["t1"]}), posts, ["tags"])
        assert item.data["tags"] == ["t1"]

    def test_populate_many_preserves_order(self, populator, posts):
        items = [
            CollectionItem(id=f"p{i}", collection_id="c_posts", data={"author": "a1"})
            for i in range(3)
        ]
        result = populator.populate_many(items, posts, ["author"])
        assert [i.id for i in result] == ["p0", "p1", "p2"]
        assert all(i.data["author"]["_id"] == "a1" for i in result)

    def test_collect_references(self, posts):
        items = [
            post({"author": "a1", "tags": ["t1", "t2"]}),
            post({"author": "a2", "tags": "t3"}),
            post({"title": "no relations"}),
        ]
        refs = RelationPopulator.collect_references(items, posts, ["author", "tags", "title"])
        assert refs == {"c_authors": {"a1", "a2"}, "c_tags": {"t1", "t2", "t3"}}

    def test_population_is_one_level_deep(self, authors, posts):
        tags = Collection(
            id="c_tags",
            name="Tags",
            slug="tags",
            fields=[
                make_field("label"),
                make_field("author", "relation", relation=RelationConfig(collection_id="c_authors")),
            ],
        )
        populator = RelationPopulator(
            collections={authors.id: authors, tags.id: tags},
            items={
                "c_authors": {
                    "a1": CollectionItem(id="a1", collection_id="c_authors", data={"name": "Ada"}),
                },
                "c_tags": {
                    "t1": CollectionItem(
                        id="t1", collection_id="c_tags", data={"label": "python", "author": "a1"}
                    ),
                },
            },
        )

        item = populator.populate(post({"tags": ["t1"]}), posts, ["tags", "author"])

        assert item.data["tags"] == [
            {"_id": "t1", "_collection": "Tags", "label": "python", "author": "a1"}
        ]
