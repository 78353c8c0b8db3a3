"""Record validation service for validating record payloads against collection schemas.

Validation is a pure function of the collection's fields and the raw
payload. It is used unchanged by the create and update paths; there is no
partial-update mode.

Order of operations:
    1. Collect every required field whose raw value is missing.
    2. Coerce each schema field present in the payload.
    3. Drop payload keys the schema does not declare.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from apibuilder.domain.entities.field import Field
from apibuilder.domain.services.field_types import (
    MALFORMED_INPUT_POLICY,
    MalformedInputPolicy,
    MalformedValueError,
    get_field_type_rule,
)


@dataclass
class RecordValidationError:
    """A single record validation error."""

    field: str
    message: str
    code: str


@dataclass
class RecordValidationResult:
    """Outcome of validating a payload: coerced data or a list of errors."""

    data: dict[str, Any] = field(default_factory=dict)
    errors: list[RecordValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def error_fields(self) -> list[str]:
        """Names of the failing fields, in schema order, without duplicates."""
        seen: list[str] = []
        for error in self.errors:
            if error.field not in seen:
                seen.append(error.field)
        return seen


class RecordValidator:
    """Validator and coercer for record payloads."""

    @classmethod
    def find_missing_fields(
        cls, fields: Sequence[Field], payload: dict[str, Any]
    ) -> list[str]:
        """Return the names of required fields missing from the raw payload.

        A value is missing when it is absent, None or an empty string.
        ``0`` and ``False`` are present values.
        """
        return [
            f.name
            for f in fields
            if f.required and get_field_type_rule(f.type).is_missing(payload.get(f.name))
        ]

    @classmethod
    def coerce_value(
        cls,
        f: Field,
        value: Any,
        policy: MalformedInputPolicy = MALFORMED_INPUT_POLICY,
    ) -> Any:
        """Coerce one raw value according to the field's type.

        Raises:
            MalformedValueError: If the value is unparsable and the policy
                is ``REJECT``.
        """
        try:
            return get_field_type_rule(f.type).coerce(value)
        except MalformedValueError:
            if policy is MalformedInputPolicy.REJECT:
                raise
            return None

    @classmethod
    def validate(
        cls,
        fields: Sequence[Field],
        payload: dict[str, Any],
        policy: MalformedInputPolicy = MALFORMED_INPUT_POLICY,
    ) -> RecordValidationResult:
        """Validate and coerce a payload against a schema.

        Args:
            fields: The collection's current fields.
            payload: The raw request body.
            policy: How to treat unparsable number/JSON input.

        Returns:
            RecordValidationResult with either coerced data (only schema
            fields present in the payload) or the full list of errors.
        """
        missing = set(cls.find_missing_fields(fields, payload))
        errors: list[RecordValidationError] = []
        data: dict[str, Any] = {}

        for f in fields:
            if f.name in missing or f.name not in payload:
                continue
            try:
                value = cls.coerce_value(f, payload[f.name], policy)
            except MalformedValueError as e:
                errors.append(
                    RecordValidationError(
                        field=f.name,
                        message=str(e),
                        code=f"invalid_{f.type.value}",
                    )
                )
                continue
            # A required value that coerces to null (e.g. "abc" for a number)
            # fails the required check.
            if f.required and value is None:
                missing.add(f.name)
                continue
            data[f.name] = value

        for f in fields:
            if f.name in missing:
                errors.append(
                    RecordValidationError(
                        field=f.name,
                        message=f"Required field '{f.name}' is missing",
                        code="required_missing",
                    )
                )

        if errors:
            order = {f.name: i for i, f in enumerate(fields)}
            errors.sort(key=lambda e: order.get(e.field, len(order)))
            return RecordValidationResult(errors=errors)
        return RecordValidationResult(data=data)
