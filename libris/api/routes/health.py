"""Health check endpoint for monitoring and deployment verification."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from libris.api.dependencies import get_db, get_import_service
from libris.core.importer.service import BookImportService
from libris.version import __version__

router = APIRouter()


@router.get("/health")
async def health_check(
    db: AsyncSession = Depends(get_db),  # noqa: B008
    service: BookImportService = Depends(get_import_service),  # noqa: B008
) -> dict[str, str]:
    """
    Report database connectivity and whether the incoming directory exists.

    A missing incoming directory is reported but does not fail the check;
    it is created on the next application start.

    Raises:
        HTTPException: 503 if database is unavailable
    """
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        raise HTTPException(status_code=503, detail="Database unavailable") from e

    return {
        "status": "healthy",
        "database": "connected",
        "incoming_dir": "ready" if service.incoming_dir.is_dir() else "missing",
        "version": __version__,
    }
