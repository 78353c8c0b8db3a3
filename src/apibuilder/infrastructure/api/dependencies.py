"""FastAPI dependencies for the generated collection routes.

Resolves the collection behind a path segment and gates the request on the
operation's route configuration.
"""

from typing import Annotated

from fastapi import Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from apibuilder.core.config import get_settings
from apibuilder.core.logging import get_logger
from apibuilder.domain.entities import Collection, RouteOperation
from apibuilder.domain.services import CollectionService, RouteAccess, RouteSurface
from apibuilder.infrastructure.api.schemas import error_response
from apibuilder.infrastructure.persistence.database import get_db_session

logger = get_logger(__name__)


def get_route_api_key(request: Request) -> str | None:
    """Read the route API key from the configured header."""
    return request.headers.get(get_settings().api_key_header) or None


DbSession = Annotated[AsyncSession, Depends(get_db_session)]
RouteApiKey = Annotated[str | None, Depends(get_route_api_key)]


def collection_not_found() -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, "Collection not found", "NOT_FOUND")


def item_not_found() -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, "Item not found", "NOT_FOUND")


async def resolve_collection_route(
    session: AsyncSession,
    segment: str,
    operation: RouteOperation,
    api_key: str | None,
) -> Collection | JSONResponse:
    """Find the collection serving a request and check route access.

    Args:
        session: Database session.
        segment: Path segment from the URL (slug or custom path).
        operation: The operation being requested.
        api_key: Value of the API key header, if sent.

    Returns:
        The collection, or a ready 404/401 response. A disabled operation
        answers exactly like an unknown collection.
    """
    collection = await CollectionService(session).resolve_route(segment, operation)
    if collection is None:
        logger.info("Collection route not found", segment=segment, operation=operation.value)
        return collection_not_found()

    access = RouteSurface.check_access(collection, operation, api_key)
    if access is RouteAccess.NOT_FOUND:
        logger.info(
            "Disabled route requested",
            collection_id=collection.id,
            operation=operation.value,
        )
        return collection_not_found()
    if access is RouteAccess.UNAUTHORIZED:
        logger.info(
            "Private route requested without a valid API key",
            collection_id=collection.id,
            operation=operation.value,
            key_provided=api_key is not None,
        )
        return error_response(
            status.HTTP_401_UNAUTHORIZED,
            f"A valid API key is required in the {get_settings().api_key_header} header",
            "UNAUTHORIZED",
        )
    return collection
