"""Relation population service.

Expands relation fields of records into embedded sub-documents taken from
the target collection. This is a one-level join: embedded documents are
built from the target records' raw stored data and their own relation
fields are never expanded.

Policies:
    - Unknown or non-relation field names are skipped.
    - A relation whose target collection no longer exists is left as stored.
    - ``relation``: an id that does not resolve is left as the raw id.
    - ``relation_many``: ids that do not resolve are dropped from the list.

Callers tell populated values apart from raw ids by the ``_id`` marker key.
"""

import copy
import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from apibuilder.domain.entities.collection import Collection
from apibuilder.domain.entities.collection_item import CollectionItem
from apibuilder.domain.entities.field import Field, FieldType
from apibuilder.domain.services.field_values import load_value, relation_ids

POPULATED_ID_KEY = "_id"
POPULATED_COLLECTION_KEY = "_collection"


def parse_populate_param(value: str | None) -> list[str]:
    """Split a ``?populate=a,b`` value into field names, dropping blanks and duplicates."""
    if not value:
        return []
    names: list[str] = []
    for part in value.split(","):
        name = part.strip()
        if name and name not in names:
            names.append(name)
    return names


class RelationPopulator:
    """Populate relation fields from preloaded target collections and items.

    Args:
        collections: Target collections keyed by ID.
        items: Target items keyed by collection ID, then item ID.
    """

    def __init__(
        self,
        collections: Mapping[str, Collection],
        items: Mapping[str, Mapping[str, CollectionItem]],
    ) -> None:
        self.collections = collections
        self.items = items

    @staticmethod
    def relation_fields(collection: Collection, field_names: Iterable[str]) -> list[Field]:
        """Resolve requested names to relation fields, skipping anything else."""
        fields = []
        for name in field_names:
            f = collection.get_field(name)
            if f is not None and f.is_relation and f.relation is not None:
                fields.append(f)
        return fields

    @classmethod
    def collect_references(
        cls,
        items: Sequence[CollectionItem],
        collection: Collection,
        field_names: Iterable[str],
    ) -> dict[str, set[str]]:
        """Return the ids each target collection must provide for population.

        Returns:
            Mapping of target collection ID to the set of referenced item IDs.
        """
        references: dict[str, set[str]] = {}
        for f in cls.relation_fields(collection, field_names):
            target_ids = references.setdefault(f.relation.collection_id, set())
            for item in items:
                ids = relation_ids(load_value(f, item.data.get(f.name)))
                if ids:
                    target_ids.update(ids)
        return references

    def embed(self, f: Field, target: Collection, item_id: str) -> dict[str, Any] | None:
        """Build the embedded document for one referenced id, or None if it does not resolve."""
        target_item = self.items.get(target.id, {}).get(item_id)
        if target_item is None:
            return None

        select_fields = f.relation.select_fields if f.relation else []
        if select_fields:
            projected = {k: target_item.data[k] for k in select_fields if k in target_item.data}
        else:
            projected = dict(target_item.data)
        projected.pop(POPULATED_ID_KEY, None)
        projected.pop(POPULATED_COLLECTION_KEY, None)

        return {
            POPULATED_ID_KEY: target_item.id,
            POPULATED_COLLECTION_KEY: target.name,
            **copy.deepcopy(projected),
        }

    def populate(
        self, item: CollectionItem, collection: Collection, field_names: Iterable[str]
    ) -> CollectionItem:
        """Return a copy of ``item`` with the named relation fields expanded."""
        data = dict(item.data)

        for f in self.relation_fields(collection, field_names):
            if f.name not in data:
                continue
            target = self.collections.get(f.relation.collection_id)
            if target is None:
                continue
            ids = relation_ids(load_value(f, data[f.name]))
            if ids is None:
                continue

            if f.type is FieldType.RELATION:
                embedded = self.embed(f, target, ids[0])
                if embedded is not None:
                    data[f.name] = embedded
            else:
                resolved = (self.embed(f, target, item_id) for item_id in ids)
                data[f.name] = [e for e in resolved if e is not None]

        return dataclasses.replace(item, data=data)

    def populate_many(
        self,
        items: Sequence[CollectionItem],
        collection: Collection,
        field_names: Sequence[str],
    ) -> list[CollectionItem]:
        """Populate every item of a sequence, preserving order."""
        return [self.populate(item, collection, field_names) for item in items]
