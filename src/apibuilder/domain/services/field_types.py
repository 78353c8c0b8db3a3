"""Field type registry.

Maps every :class:`FieldType` to its write-time coercion rule, its
required-ness test and the sample value used in generated documentation.
The registry is checked for completeness at import time so a new field type
cannot silently fall through to a default branch.
"""

import json
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from apibuilder.domain.entities.field import Field, FieldType


class MalformedInputPolicy(str, Enum):
    """What to do with a number/JSON value that cannot be parsed."""

    STORE_NULL = "store_null"
    REJECT = "reject"


# Unparsable number and JSON input is stored as null rather than rejected.
MALFORMED_INPUT_POLICY = MalformedInputPolicy.STORE_NULL

# String spellings normalized to False for boolean fields.
FALSE_STRINGS = frozenset({"", "false", "0", "no", "off"})


class MalformedValueError(ValueError):
    """Raised by a coercer when the raw value cannot be parsed."""

    def __init__(self, field_type: FieldType, value: Any) -> None:
        self.field_type = field_type
        self.value = value
        super().__init__(f"Cannot interpret {value!r} as {field_type.value}")


def is_blank(value: Any) -> bool:
    """Missing-value test: None and empty string are missing; 0 and False are not."""
    return value is None or (isinstance(value, str) and value == "")


def _coerce_passthrough(value: Any) -> Any:
    if isinstance(value, str) and value == "":
        return None
    return value


def _coerce_number(value: Any) -> int | float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedValueError(FieldType.NUMBER, value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise MalformedValueError(FieldType.NUMBER, value)
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            raise MalformedValueError(FieldType.NUMBER, value) from None
        if not math.isfinite(number):
            raise MalformedValueError(FieldType.NUMBER, value)
        return number
    raise MalformedValueError(FieldType.NUMBER, value)


def _coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return bool(value)


def _coerce_json(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    if value.strip() == "":
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        raise MalformedValueError(FieldType.JSON, value) from None


def _coerce_relation_many(value: Any) -> list[Any] | None:
    if value is None or (isinstance(value, str) and value == ""):
        return None
    if isinstance(value, (list, tuple)):
        return [v for v in value if not is_blank(v)]
    return [value]


@dataclass(frozen=True)
class FieldTypeRule:
    """Behaviour attached to one field type.

    Attributes:
        type: The field type this rule describes.
        label: Human label used in documentation.
        description: One-line description used in documentation.
        coerce: Write-time normalization. Raises :class:`MalformedValueError`
            when the input cannot be parsed.
        is_missing: Required-field test applied to the raw input value.
        example: Builds a sample value for generated documentation.
    """

    type: FieldType
    label: str
    description: str
    coerce: Callable[[Any], Any]
    example: Callable[[Field], Any]
    is_missing: Callable[[Any], bool] = is_blank


def _select_example(field: Field) -> str:
    return field.options[0] if field.options else "option1"


FIELD_TYPE_RULES: Mapping[FieldType, FieldTypeRule] = {
    rule.type: rule
    for rule in (
        FieldTypeRule(
            FieldType.STRING, "Text", "Short text, names, titles",
            _coerce_passthrough, lambda f: "example text",
        ),
        FieldTypeRule(
            FieldType.TEXT, "Long Text", "Multi-line text, descriptions",
            _coerce_passthrough, lambda f: "Lorem ipsum dolor sit amet...",
        ),
        FieldTypeRule(
            FieldType.NUMBER, "Number", "Integer or decimal numbers",
            _coerce_number, lambda f: 42,
        ),
        FieldTypeRule(
            FieldType.BOOLEAN, "Boolean", "True or false values",
            _coerce_boolean, lambda f: True,
        ),
        FieldTypeRule(
            FieldType.EMAIL, "Email", "Email addresses",
            _coerce_passthrough, lambda f: "user@example.com",
        ),
        FieldTypeRule(
            FieldType.URL, "URL", "Web addresses and links",
            _coerce_passthrough, lambda f: "https://example.com",
        ),
        FieldTypeRule(
            FieldType.DATE, "Date", "Calendar dates",
            _coerce_passthrough, lambda f: "2024-01-15",
        ),
        FieldTypeRule(
            FieldType.DATETIME, "Date & Time", "Date with time",
            _coerce_passthrough, lambda f: "2024-01-15T10:30:00Z",
        ),
        FieldTypeRule(
            FieldType.SELECT, "Select", "One of a predefined set of options",
            _coerce_passthrough, _select_example,
        ),
        FieldTypeRule(
            FieldType.JSON, "JSON", "Structured JSON data",
            _coerce_json, lambda f: {"key": "value"},
        ),
        FieldTypeRule(
            FieldType.RELATION, "Relation", "Reference to one item of another collection",
            _coerce_passthrough, lambda f: "<item_id>",
        ),
        FieldTypeRule(
            FieldType.RELATION_MANY, "Multi-Relation", "References to items of another collection",
            _coerce_relation_many, lambda f: ["<item_id>"],
        ),
    )
}

_unregistered = set(FieldType) - set(FIELD_TYPE_RULES)
if _unregistered:
    raise RuntimeError(f"Field types without a registry rule: {sorted(t.value for t in _unregistered)}")


def get_field_type_rule(field_type: FieldType) -> FieldTypeRule:
    """Return the registry rule for a field type."""
    return FIELD_TYPE_RULES[field_type]
