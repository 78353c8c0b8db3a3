"""Domain services for the API builder.

Services contain business logic that doesn't naturally fit within a single entity.
The pure services (validation, coercion, population, route surface) have no
infrastructure dependencies; the collection, record and sync services drive
the repositories.
"""

from apibuilder.domain.services.api_key_generator import ApiKeyGenerator
from apibuilder.domain.services.collection_service import (
    CollectionConflictError,
    CollectionService,
    CollectionValidationFailed,
)
from apibuilder.domain.services.collection_validator import (
    CollectionValidationError,
    CollectionValidator,
)
from apibuilder.domain.services.documentation_generator import (
    CollectionDocs,
    DocumentationGenerator,
)
from apibuilder.domain.services.field_types import (
    FIELD_TYPE_RULES,
    MALFORMED_INPUT_POLICY,
    FieldTypeRule,
    MalformedInputPolicy,
    MalformedValueError,
    get_field_type_rule,
)
from apibuilder.domain.services.field_values import FieldValue, load_value
from apibuilder.domain.services.record_service import RecordService, RecordValidationFailed
from apibuilder.domain.services.record_validator import (
    RecordValidationError,
    RecordValidationResult,
    RecordValidator,
)
from apibuilder.domain.services.relation_populator import (
    RelationPopulator,
    parse_populate_param,
)
from apibuilder.domain.services.route_surface import RouteAccess, RouteEndpoint, RouteSurface
from apibuilder.domain.services.slug_generator import SlugGenerator, SlugValidationError
from apibuilder.domain.services.sync_service import SyncPayloadError, SyncService

__all__ = [
    "ApiKeyGenerator",
    "CollectionConflictError",
    "CollectionDocs",
    "CollectionService",
    "CollectionValidationError",
    "CollectionValidationFailed",
    "CollectionValidator",
    "DocumentationGenerator",
    "FIELD_TYPE_RULES",
    "FieldTypeRule",
    "FieldValue",
    "MALFORMED_INPUT_POLICY",
    "MalformedInputPolicy",
    "MalformedValueError",
    "RecordService",
    "RecordValidationError",
    "RecordValidationFailed",
    "RecordValidationResult",
    "RecordValidator",
    "RelationPopulator",
    "RouteAccess",
    "RouteEndpoint",
    "RouteSurface",
    "SlugGenerator",
    "SlugValidationError",
    "SyncPayloadError",
    "SyncService",
    "get_field_type_rule",
    "load_value",
    "parse_populate_param",
]
