"""FastAPI dependencies for route handlers."""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from libris.core.importer.service import BookImportService
from libris.db.session import get_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide async database session to route handlers.

    Commits on success and rolls back on error.

    Yields:
        AsyncSession: Database session for the request
    """
    async for session in get_session():
        yield session


def get_import_service(
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> BookImportService:
    """Provide a BookImportService bound to the request session."""
    return BookImportService(session=db)
