"""Import API endpoints for running imports and reading the audit trail."""

from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from libris.api.dependencies import get_import_service
from libris.api.schemas.imports import (
    BatchSummaryResponse,
    ImportErrorItem,
    ImportLogDetail,
    ImportLogItem,
)
from libris.core.importer.results import summarize_results
from libris.core.importer.service import BookImportService
from libris.utils.exceptions import ImportDirectoryError

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/imports", tags=["imports"])


@router.post(
    "/run",
    response_model=BatchSummaryResponse,
    summary="Process incoming files",
    description="Import every ONIX file waiting in the incoming directory",
    status_code=status.HTTP_200_OK,
)
async def run_imports(
    service: BookImportService = Depends(get_import_service),  # noqa: B008
) -> BatchSummaryResponse:
    """
    Process all pending ONIX files and return per-file results with totals.

    Raises:
        HTTPException: 503 if the incoming directory cannot be read
    """
    logger.info("run_imports_request")
    try:
        results = await service.process_incoming_files()
    except ImportDirectoryError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)
        ) from e

    return BatchSummaryResponse.model_validate(summarize_results(results))


@router.get(
    "",
    response_model=list[ImportLogItem],
    summary="List import logs",
    description="Retrieve import logs ordered by creation time",
)
async def list_import_logs(
    limit: int = Query(100, ge=1, le=500, description="Results per page"),
    offset: int = Query(0, ge=0, description="Page offset"),
    service: BookImportService = Depends(get_import_service),  # noqa: B008
) -> list[ImportLogItem]:
    """List import logs with pagination."""
    logs = await service.list_import_logs(limit=limit, offset=offset)
    return [ImportLogItem.model_validate(log) for log in logs]


@router.get(
    "/{import_log_id}",
    response_model=ImportLogDetail,
    summary="Get import log details",
    description="Retrieve one import log with every error recorded against it",
)
async def get_import_log(
    import_log_id: UUID,
    service: BookImportService = Depends(get_import_service),  # noqa: B008
) -> ImportLogDetail:
    """
    Get an import log and its errors.

    Raises:
        HTTPException: 404 if the import log does not exist
    """
    found = await service.get_import_log(import_log_id)
    if found is None:
        logger.warning("import_log_not_found", import_log_id=str(import_log_id))
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Import log {import_log_id} not found",
        )

    log, errors = found
    return ImportLogDetail.model_validate(
        {
            **log.model_dump(),
            "errors": [ImportErrorItem.model_validate(error) for error in errors],
        }
    )
