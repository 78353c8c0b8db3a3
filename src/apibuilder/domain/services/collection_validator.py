"""Collection validation service for schema and field validation.

Enforces the schema editor's rules on the server: a usable name, at least one
field, unique field names, options for select fields and a valid target for
relation fields.
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from apibuilder.domain.entities.collection import Collection
from apibuilder.domain.entities.field import Field, FieldType
from apibuilder.domain.services.slug_generator import SlugGenerator

# Pattern for valid field names (they become JSON payload keys)
FIELD_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")


@dataclass
class CollectionValidationError:
    """A single collection validation error."""

    field: str
    message: str
    code: str


class CollectionValidator:
    """Validator for collection create and update requests."""

    MAX_NAME_LENGTH = 64
    MAX_FIELD_NAME_LENGTH = 64

    @classmethod
    def validate_name(cls, name: str) -> list[CollectionValidationError]:
        """Validate a collection name.

        Args:
            name: The collection name to validate.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []

        if not name or not name.strip():
            errors.append(
                CollectionValidationError(
                    field="name",
                    message="Collection name is required",
                    code="name_required",
                )
            )
            return errors

        if len(name) > cls.MAX_NAME_LENGTH:
            errors.append(
                CollectionValidationError(
                    field="name",
                    message=f"Collection name must be at most {cls.MAX_NAME_LENGTH} characters",
                    code="name_too_long",
                )
            )

        for slug_error in SlugGenerator.validate_path(SlugGenerator.generate(name)):
            errors.append(
                CollectionValidationError(
                    field="name",
                    message=f"Collection name produces an invalid slug: {slug_error.message}",
                    code=f"slug_{slug_error.code}",
                )
            )

        return errors

    @classmethod
    def validate_field_name(cls, name: str, field_index: int) -> list[CollectionValidationError]:
        """Validate a field name."""
        errors = []
        field_path = f"fields[{field_index}].name"

        if not name:
            errors.append(
                CollectionValidationError(
                    field=field_path,
                    message="Field name is required",
                    code="field_name_required",
                )
            )
            return errors

        if len(name) > cls.MAX_FIELD_NAME_LENGTH:
            errors.append(
                CollectionValidationError(
                    field=field_path,
                    message=f"Field name must be at most {cls.MAX_FIELD_NAME_LENGTH} characters",
                    code="field_name_too_long",
                )
            )

        if not FIELD_NAME_PATTERN.match(name):
            errors.append(
                CollectionValidationError(
                    field=field_path,
                    message="Field name must start with a letter and contain only alphanumeric characters and underscores",
                    code="field_name_invalid_format",
                )
            )

        return errors

    @classmethod
    def validate_select_field(cls, field: Field, field_index: int) -> list[CollectionValidationError]:
        """Select fields need at least one non-empty option."""
        options = [o for o in field.options if o and o.strip()]
        if options:
            return []
        return [
            CollectionValidationError(
                field=f"fields[{field_index}].options",
                message="Select field requires at least one option",
                code="select_options_required",
            )
        ]

    @classmethod
    def validate_relation_field(
        cls,
        field: Field,
        field_index: int,
        owner_id: str,
        collections: Mapping[str, Collection],
    ) -> list[CollectionValidationError]:
        """Validate a relation field configuration.

        Args:
            field: The relation field.
            field_index: Index of the field (for error messages).
            owner_id: ID of the collection that owns the field.
            collections: Existing collections keyed by ID.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []
        field_path = f"fields[{field_index}].relation"

        if field.relation is None or not field.relation.collection_id:
            errors.append(
                CollectionValidationError(
                    field=f"{field_path}.collectionId",
                    message="Relation field requires 'collectionId' (target collection)",
                    code="relation_collection_required",
                )
            )
            return errors

        target_id = field.relation.collection_id
        if target_id == owner_id:
            errors.append(
                CollectionValidationError(
                    field=f"{field_path}.collectionId",
                    message="A collection cannot relate to itself",
                    code="relation_self_reference",
                )
            )
            return errors

        target = collections.get(target_id)
        if target is None:
            errors.append(
                CollectionValidationError(
                    field=f"{field_path}.collectionId",
                    message=f"Target collection '{target_id}' not found",
                    code="relation_collection_not_found",
                )
            )
            return errors

        target_fields = set(target.field_names)
        display_field = field.relation.display_field
        if display_field and display_field not in target_fields:
            errors.append(
                CollectionValidationError(
                    field=f"{field_path}.displayField",
                    message=f"Field '{display_field}' does not exist in '{target.name}'",
                    code="relation_display_field_unknown",
                )
            )

        unknown = [name for name in field.relation.select_fields if name not in target_fields]
        if unknown:
            errors.append(
                CollectionValidationError(
                    field=f"{field_path}.selectFields",
                    message=f"Fields not in '{target.name}': {', '.join(unknown)}",
                    code="relation_select_fields_unknown",
                )
            )

        return errors

    @classmethod
    def validate_field(
        cls,
        field: Field,
        field_index: int,
        owner_id: str,
        collections: Mapping[str, Collection],
    ) -> list[CollectionValidationError]:
        """Validate a single field definition."""
        errors = []
        errors.extend(cls.validate_field_name(field.name, field_index))

        if field.type is FieldType.SELECT:
            errors.extend(cls.validate_select_field(field, field_index))

        if field.is_relation:
            errors.extend(cls.validate_relation_field(field, field_index, owner_id, collections))

        return errors

    @classmethod
    def validate_fields(
        cls,
        fields: Sequence[Field],
        owner_id: str,
        collections: Mapping[str, Collection],
    ) -> list[CollectionValidationError]:
        """Validate a collection's field list.

        Field names are compared case-insensitively for uniqueness.
        """
        errors = []

        if not fields:
            errors.append(
                CollectionValidationError(
                    field="fields",
                    message="Collection must define at least one field",
                    code="fields_empty",
                )
            )
            return errors

        seen_names: set[str] = set()
        for i, field in enumerate(fields):
            errors.extend(cls.validate_field(field, i, owner_id, collections))

            name = field.name.lower()
            if name and name in seen_names:
                errors.append(
                    CollectionValidationError(
                        field=f"fields[{i}].name",
                        message=f"Duplicate field name '{field.name}'",
                        code="field_name_duplicate",
                    )
                )
            seen_names.add(name)

        return errors

    @classmethod
    def validate(
        cls,
        name: str,
        fields: Sequence[Field],
        owner_id: str,
        collections: Mapping[str, Collection],
    ) -> list[CollectionValidationError]:
        """Validate a complete collection definition."""
        errors = []
        errors.extend(cls.validate_name(name))
        errors.extend(cls.validate_fields(fields, owner_id, collections))
        return errors
