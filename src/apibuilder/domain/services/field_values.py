"""Typed views of stored record values.

Records are stored as plain JSON, so a value read back from the store can be
anything. ``load_value`` reconstructs a small tagged value from the owning
field's type; stored values whose shape does not fit the type (for example
after a schema edit) load as ``None`` and are left alone by consumers.
"""

import math
from dataclasses import dataclass
from typing import Any, Union

from apibuilder.domain.entities.field import Field, FieldType


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class NumberValue:
    value: int | float


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class DateValue:
    """A date or datetime kept in its stored ISO 8601 text form."""

    value: str


@dataclass(frozen=True)
class JsonValue:
    value: Any


@dataclass(frozen=True)
class RelationRef:
    id: str


@dataclass(frozen=True)
class RelationRefs:
    ids: tuple[str, ...]


FieldValue = Union[
    StringValue, NumberValue, BoolValue, DateValue, JsonValue, RelationRef, RelationRefs
]


def _load_string(raw: Any) -> StringValue | None:
    return StringValue(raw) if isinstance(raw, str) else None


def _load_number(raw: Any) -> NumberValue | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if isinstance(raw, float) and not math.isfinite(raw):
        return None
    return NumberValue(raw)


def _load_bool(raw: Any) -> BoolValue | None:
    return BoolValue(raw) if isinstance(raw, bool) else None


def _load_date(raw: Any) -> DateValue | None:
    return DateValue(raw) if isinstance(raw, str) else None


def _load_json(raw: Any) -> JsonValue:
    return JsonValue(raw)


def _load_relation(raw: Any) -> RelationRef | None:
    return RelationRef(raw) if isinstance(raw, str) else None


def _load_relation_many(raw: Any) -> RelationRefs | None:
    # A lone id is accepted for records written before the field became multi-valued.
    if isinstance(raw, str):
        return RelationRefs((raw,))
    if isinstance(raw, list):
        return RelationRefs(tuple(v for v in raw if isinstance(v, str)))
    return None


LOADERS = {
    FieldType.STRING: _load_string,
    FieldType.TEXT: _load_string,
    FieldType.EMAIL: _load_string,
    FieldType.URL: _load_string,
    FieldType.SELECT: _load_string,
    FieldType.NUMBER: _load_number,
    FieldType.BOOLEAN: _load_bool,
    FieldType.DATE: _load_date,
    FieldType.DATETIME: _load_date,
    FieldType.JSON: _load_json,
    FieldType.RELATION: _load_relation,
    FieldType.RELATION_MANY: _load_relation_many,
}

_unhandled = set(FieldType) - set(LOADERS)
if _unhandled:
    raise RuntimeError(f"Field types without a value loader: {sorted(t.value for t in _unhandled)}")


def load_value(f: Field, raw: Any) -> FieldValue | None:
    """Typed value of one stored value, or None when it is null or does not fit the field."""
    if raw is None:
        return None
    return LOADERS[f.type](raw)


def relation_ids(value: FieldValue | None) -> list[str] | None:
    """Referenced ids of a relation value; None for anything else."""
    if isinstance(value, RelationRef):
        return [value.id]
    if isinstance(value, RelationRefs):
        return list(value.ids)
    return None
