"""API request/response schemas."""

from apibuilder.infrastructure.api.schemas.collection_schemas import (
    CollectionDocsResponse,
    CollectionListItem,
    CollectionListResponse,
    CollectionResponse,
    CreateCollectionRequest,
    FieldSchema,
    RelationConfigSchema,
    RouteConfigSchema,
    UpdateCollectionRequest,
    UpdateRouteRequest,
)
from apibuilder.infrastructure.api.schemas.common_schemas import (
    CamelModel,
    DataResponse,
    ErrorResponse,
    MessageResponse,
    error_response,
)
from apibuilder.infrastructure.api.schemas.record_schemas import (
    RecordItemResponse,
    RecordListMeta,
    RecordListResponse,
    RecordResponse,
)
from apibuilder.infrastructure.api.schemas.sync_schemas import (
    SyncDocument,
    SyncExportResponse,
    SyncImportResponse,
)

__all__ = [
    "CamelModel",
    "CollectionDocsResponse",
    "CollectionListItem",
    "CollectionListResponse",
    "CollectionResponse",
    "CreateCollectionRequest",
    "DataResponse",
    "ErrorResponse",
    "FieldSchema",
    "MessageResponse",
    "RecordItemResponse",
    "RecordListMeta",
    "RecordListResponse",
    "RecordResponse",
    "RelationConfigSchema",
    "RouteConfigSchema",
    "SyncDocument",
    "SyncExportResponse",
    "SyncImportResponse",
    "UpdateCollectionRequest",
    "UpdateRouteRequest",
    "error_response",
]
