"""Records API routes.

Provides the generated CRUD endpoints of every collection. The first path
segment is a collection slug or an operation's custom path; which collection
answers, and whether it answers at all, depends on the route settings.
"""

from typing import Any

from fastapi import APIRouter, Body, Query, status
from fastapi.responses import JSONResponse

from apibuilder.core.logging import get_logger
from apibuilder.domain.entities import RouteOperation
from apibuilder.domain.services import (
    RecordService,
    RecordValidationFailed,
    parse_populate_param,
)
from apibuilder.infrastructure.api.dependencies import (
    DbSession,
    RouteApiKey,
    item_not_found,
    resolve_collection_route,
)
from apibuilder.infrastructure.api.schemas import (
    ErrorResponse,
    MessageResponse,
    RecordItemResponse,
    RecordListMeta,
    RecordListResponse,
    RecordResponse,
    error_response,
)

logger = get_logger(__name__)

router = APIRouter()

NOT_FOUND_RESPONSE = {404: {"model": ErrorResponse, "description": "Collection or item not found"}}
UNAUTHORIZED_RESPONSE = {401: {"model": ErrorResponse, "description": "Valid API key required"}}
VALIDATION_RESPONSE = {400: {"model": ErrorResponse, "description": "Validation error"}}

PopulateQuery = Query(
    default=None,
    description="Comma-separated relation fields to expand (overrides the route default)",
)


def _validation_error(exc: RecordValidationFailed) -> JSONResponse:
    errors = exc.result.errors
    missing_only = all(e.code == "required_missing" for e in errors)
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Missing required fields" if missing_only else "Validation failed",
        "VALIDATION_ERROR",
        fields=exc.result.error_fields,
        details=[{"field": e.field, "message": e.message, "code": e.code} for e in errors],
    )


@router.get(
    "/{collection_path}",
    response_model=RecordListResponse,
    responses={**NOT_FOUND_RESPONSE, **UNAUTHORIZED_RESPONSE},
)
async def list_records(
    collection_path: str,
    session: DbSession,
    api_key: RouteApiKey,
    populate: str | None = PopulateQuery,
) -> RecordListResponse | JSONResponse:
    """List all items of a collection in creation order.

    Relation fields named in ``?populate=`` are expanded; without the
    parameter the route's default populate fields are used.
    """
    collection = await resolve_collection_route(
        session, collection_path, RouteOperation.GET_ALL, api_key
    )
    if isinstance(collection, JSONResponse):
        return collection

    service = RecordService(session)
    items = await service.get_items(collection.id)

    field_names = parse_populate_param(populate)
    if populate is None:
        field_names = list(collection.routes.get(RouteOperation.GET_ALL).populate_fields)
    if field_names:
        items = await service.populate(collection, items, field_names)

    return RecordListResponse(
        data=[RecordResponse.from_entity(item) for item in items],
        meta=RecordListMeta(
            total=len(items),
            collection=collection.name,
            populated=field_names or None,
        ),
    )


@router.post(
    "/{collection_path}",
    status_code=status.HTTP_201_CREATED,
    response_model=RecordItemResponse,
    responses={**VALIDATION_RESPONSE, **NOT_FOUND_RESPONSE, **UNAUTHORIZED_RESPONSE},
)
async def create_record(
    collection_path: str,
    session: DbSession,
    api_key: RouteApiKey,
    payload: dict[str, Any] = Body(...),
) -> RecordItemResponse | JSONResponse:
    """Create an item.

    Required fields of the current schema are checked, values are coerced
    by field type and keys outside the schema are dropped.
    """
    collection = await resolve_collection_route(
        session, collection_path, RouteOperation.POST, api_key
    )
    if isinstance(collection, JSONResponse):
        return collection

    try:
        item = await RecordService(session).create_item(collection, payload)
    except RecordValidationFailed as e:
        return _validation_error(e)
    await session.commit()

    return RecordItemResponse(data=RecordResponse.from_entity(item))


@router.get(
    "/{collection_path}/{item_id}",
    response_model=RecordItemResponse,
    responses={**NOT_FOUND_RESPONSE, **UNAUTHORIZED_RESPONSE},
)
async def get_record(
    collection_path: str,
    item_id: str,
    session: DbSession,
    api_key: RouteApiKey,
    populate: str | None = PopulateQuery,
) -> RecordItemResponse | JSONResponse:
    """Fetch a single item, optionally with relation fields expanded."""
    collection = await resolve_collection_route(
        session, collection_path, RouteOperation.GET_ONE, api_key
    )
    if isinstance(collection, JSONResponse):
        return collection

    service = RecordService(session)
    item = await service.get_item(collection.id, item_id)
    if item is None:
        logger.info("Record not found", collection_id=collection.id, record_id=item_id)
        return item_not_found()

    field_names = parse_populate_param(populate)
    if populate is None:
        field_names = list(collection.routes.get(RouteOperation.GET_ONE).populate_fields)
    if field_names:
        [item] = await service.populate(collection, [item], field_names)

    return RecordItemResponse(data=RecordResponse.from_entity(item))


@router.put(
    "/{collection_path}/{item_id}",
    response_model=RecordItemResponse,
    responses={**VALIDATION_RESPONSE, **NOT_FOUND_RESPONSE, **UNAUTHORIZED_RESPONSE},
)
async def update_record(
    collection_path: str,
    item_id: str,
    session: DbSession,
    api_key: RouteApiKey,
    payload: dict[str, Any] = Body(...),
) -> RecordItemResponse | JSONResponse:
    """Replace an item's data.

    Fields left out of the payload are removed from the stored item.
    """
    collection = await resolve_collection_route(
        session, collection_path, RouteOperation.PUT, api_key
    )
    if isinstance(collection, JSONResponse):
        return collection

    try:
        item = await RecordService(session).update_item(collection, item_id, payload)
    except RecordValidationFailed as e:
        return _validation_error(e)
    if item is None:
        logger.info("Record update failed: not found", collection_id=collection.id, record_id=item_id)
        return item_not_found()
    await session.commit()

    return RecordItemResponse(data=RecordResponse.from_entity(item))


@router.delete(
    "/{collection_path}/{item_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND_RESPONSE, **UNAUTHORIZED_RESPONSE},
)
async def delete_record(
    collection_path: str,
    item_id: str,
    session: DbSession,
    api_key: RouteApiKey,
) -> MessageResponse | JSONResponse:
    """Delete an item."""
    collection = await resolve_collection_route(
        session, collection_path, RouteOperation.DELETE, api_key
    )
    if isinstance(collection, JSONResponse):
        return collection

    deleted = await RecordService(session).delete_item(collection.id, item_id)
    if not deleted:
        logger.info("Record delete failed: not found", collection_id=collection.id, record_id=item_id)
        return item_not_found()
    await session.commit()

    return MessageResponse(message="Item deleted successfully")
