"""Full-state sync API routes.

Exports the whole store, or replaces it atomically from a document of the
same shape.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from apibuilder.core.logging import get_logger
from apibuilder.domain.services import SyncPayloadError, SyncService
from apibuilder.infrastructure.api.dependencies import DbSession
from apibuilder.infrastructure.api.schemas import (
    ErrorResponse,
    SyncDocument,
    SyncExportResponse,
    SyncImportResponse,
    error_response,
)

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=SyncExportResponse)
async def export_state(session: DbSession) -> SyncExportResponse:
    """Return every collection and every item."""
    state = await SyncService(session).export_state()
    return SyncExportResponse(data=SyncDocument(**state))


@router.post(
    "",
    response_model=SyncImportResponse,
    responses={400: {"model": ErrorResponse, "description": "Malformed sync document"}},
)
async def import_state(document: SyncDocument, session: DbSession) -> SyncImportResponse | JSONResponse:
    """Replace all collections and items with the posted document.

    Nothing is written unless the whole document is valid.
    """
    try:
        counts = await SyncService(session).import_state(document.model_dump())
    except SyncPayloadError as e:
        logger.info("Sync import rejected", error=str(e))
        return error_response(status.HTTP_400_BAD_REQUEST, str(e), "VALIDATION_ERROR")
    await session.commit()

    return SyncImportResponse(
        message="Data synced successfully",
        collections=counts["collections"],
        items=counts["items"],
    )
