"""Collections API routes.

Provides endpoints for managing collection schemas, their route
configuration and their generated documentation.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from apibuilder.core.config import get_settings
from apibuilder.core.logging import get_logger
from apibuilder.domain.entities import RouteOperation
from apibuilder.domain.services import (
    CollectionConflictError,
    CollectionService,
    CollectionValidationFailed,
    DocumentationGenerator,
)
from apibuilder.infrastructure.api.dependencies import DbSession, collection_not_found
from apibuilder.infrastructure.api.schemas import (
    CollectionDocsResponse,
    CollectionListItem,
    CollectionListResponse,
    CollectionResponse,
    CreateCollectionRequest,
    DataResponse,
    ErrorResponse,
    MessageResponse,
    UpdateCollectionRequest,
    UpdateRouteRequest,
    error_response,
)

logger = get_logger(__name__)

router = APIRouter()

NOT_FOUND_RESPONSE = {404: {"model": ErrorResponse, "description": "Collection not found"}}
VALIDATION_RESPONSE = {400: {"model": ErrorResponse, "description": "Validation error"}}
CONFLICT_RESPONSE = {409: {"model": ErrorResponse, "description": "Slug or route path already in use"}}


def _validation_failed(exc: CollectionValidationFailed) -> JSONResponse:
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Invalid collection definition",
        "VALIDATION_ERROR",
        fields=sorted({e.field for e in exc.errors}),
        details=[{"field": e.field, "message": e.message, "code": e.code} for e in exc.errors],
    )


def _conflict(exc: CollectionConflictError) -> JSONResponse:
    return error_response(
        status.HTTP_409_CONFLICT,
        str(exc),
        "CONFLICT",
        fields=[exc.field],
    )


@router.get("", response_model=CollectionListResponse)
async def list_collections(session: DbSession) -> CollectionListResponse:
    """List all collections in creation order with their item counts."""
    collections = await CollectionService(session).list_collections_with_counts()
    data = [
        CollectionListItem(
            **CollectionResponse.from_entity(collection).model_dump(),
            item_count=count,
        )
        for collection, count in collections
    ]
    return CollectionListResponse(data=data, total=len(data))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=DataResponse[CollectionResponse],
    responses={**VALIDATION_RESPONSE, **CONFLICT_RESPONSE},
)
async def create_collection(
    request: CreateCollectionRequest,
    session: DbSession,
) -> DataResponse[CollectionResponse] | JSONResponse:
    """Create a new collection.

    The slug is derived from the name and every field without an ID gets one.
    """
    service = CollectionService(session)
    try:
        collection = await service.create_collection(
            request.name,
            [f.to_entity() for f in request.fields],
            request.description,
        )
    except CollectionValidationFailed as e:
        logger.info("Collection creation failed: validation error", errors=str(e))
        return _validation_failed(e)
    except CollectionConflictError as e:
        logger.info("Collection creation failed: conflict", error=str(e))
        return _conflict(e)
    await session.commit()

    return DataResponse(data=CollectionResponse.from_entity(collection))


@router.get(
    "/{collection_id}",
    response_model=DataResponse[CollectionResponse],
    responses=NOT_FOUND_RESPONSE,
)
async def get_collection(
    collection_id: str,
    session: DbSession,
) -> DataResponse[CollectionResponse] | JSONResponse:
    """Get a collection by ID."""
    collection = await CollectionService(session).get_collection(collection_id)
    if collection is None:
        return collection_not_found()
    return DataResponse(data=CollectionResponse.from_entity(collection))


@router.patch(
    "/{collection_id}",
    response_model=DataResponse[CollectionResponse],
    responses={**VALIDATION_RESPONSE, **NOT_FOUND_RESPONSE, **CONFLICT_RESPONSE},
)
async def update_collection(
    collection_id: str,
    request: UpdateCollectionRequest,
    session: DbSession,
) -> DataResponse[CollectionResponse] | JSONResponse:
    """Partially update a collection.

    Changing the name re-derives the slug. Existing items are not migrated
    when fields change.
    """
    service = CollectionService(session)
    try:
        collection = await service.update_collection(collection_id, request.to_updates())
    except CollectionValidationFailed as e:
        logger.info(
            "Collection update failed: validation error",
            collection_id=collection_id,
            errors=str(e),
        )
        return _validation_failed(e)
    except CollectionConflictError as e:
        logger.info("Collection update failed: conflict", collection_id=collection_id, error=str(e))
        return _conflict(e)
    if collection is None:
        return collection_not_found()
    await session.commit()

    return DataResponse(data=CollectionResponse.from_entity(collection))


@router.delete(
    "/{collection_id}",
    response_model=MessageResponse,
    responses=NOT_FOUND_RESPONSE,
)
async def delete_collection(collection_id: str, session: DbSession) -> MessageResponse | JSONResponse:
    """Delete a collection together with all of its items."""
    deleted = await CollectionService(session).delete_collection(collection_id)
    if not deleted:
        logger.info("Collection deletion failed: not found", collection_id=collection_id)
        return collection_not_found()
    await session.commit()

    return MessageResponse(message="Collection deleted successfully")


@router.put(
    "/{collection_id}/routes/{operation}",
    response_model=DataResponse[CollectionResponse],
    responses={**VALIDATION_RESPONSE, **NOT_FOUND_RESPONSE, **CONFLICT_RESPONSE},
)
async def update_route(
    collection_id: str,
    operation: RouteOperation,
    request: UpdateRouteRequest,
    session: DbSession,
) -> DataResponse[CollectionResponse] | JSONResponse:
    """Change the route configuration of one operation.

    Making a route private without an API key generates one.
    """
    service = CollectionService(session)
    try:
        collection = await service.update_route(collection_id, operation, request.to_changes())
    except CollectionValidationFailed as e:
        logger.info(
            "Route update failed: validation error",
            collection_id=collection_id,
            operation=operation.value,
            errors=str(e),
        )
        return _validation_failed(e)
    except CollectionConflictError as e:
        logger.info(
            "Route update failed: conflict",
            collection_id=collection_id,
            operation=operation.value,
            error=str(e),
        )
        return _conflict(e)
    if collection is None:
        return collection_not_found()
    await session.commit()

    return DataResponse(data=CollectionResponse.from_entity(collection))


@router.post(
    "/{collection_id}/routes/{operation}/api-key",
    response_model=DataResponse[CollectionResponse],
    responses=NOT_FOUND_RESPONSE,
)
async def rotate_route_api_key(
    collection_id: str,
    operation: RouteOperation,
    session: DbSession,
) -> DataResponse[CollectionResponse] | JSONResponse:
    """Replace the API key of one operation with a freshly generated one."""
    collection = await CollectionService(session).rotate_api_key(collection_id, operation)
    if collection is None:
        return collection_not_found()
    await session.commit()

    return DataResponse(data=CollectionResponse.from_entity(collection))


@router.get(
    "/{collection_id}/docs",
    response_model=DataResponse[CollectionDocsResponse],
    responses=NOT_FOUND_RESPONSE,
)
async def get_collection_docs(
    collection_id: str,
    session: DbSession,
) -> DataResponse[CollectionDocsResponse] | JSONResponse:
    """Generated API documentation: endpoints, sample payload and curl examples."""
    service = CollectionService(session)
    collection = await service.get_collection(collection_id)
    if collection is None:
        return collection_not_found()

    targets = {c.id: c for c in await service.list_collections()}
    settings = get_settings()
    generator = DocumentationGenerator(
        base_url=settings.external_url,
        prefix=settings.records_prefix,
        api_key_header=settings.api_key_header,
    )
    docs = generator.generate(collection, targets)

    return DataResponse(data=CollectionDocsResponse.from_docs(docs))
