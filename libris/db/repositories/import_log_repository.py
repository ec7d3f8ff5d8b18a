"""Import log repository for the import audit trail."""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libris.db.models.import_error import ImportErrorRecord, ImportErrorType
from libris.db.models.import_log import ImportLog, ImportStatus
from libris.db.models.timestamps import utc_now
from libris.db.repositories.base_repository import BaseRepository


class ImportLogRepository(BaseRepository[ImportLog]):
    """Repository for ImportLog and ImportErrorRecord operations."""

    def __init__(self, session: AsyncSession):
        """Initialize import log repository."""
        super().__init__(ImportLog, session)

    async def create_log(
        self,
        filename: str,
        filepath: str,
        import_source: str | None = None,
    ) -> ImportLog:
        """
        Create an import log in the processing state.

        Args:
            filename: Name of the file being imported
            filepath: Full path of the file at the start of the run
            import_source: Detected publisher or feed name

        Returns:
            Created ImportLog instance
        """
        log = ImportLog(
            filename=filename,
            filepath=filepath,
            status=ImportStatus.PROCESSING.value,
            import_source=import_source,
            started_at=utc_now(),
        )
        return await self.create(log)

    async def set_import_source(self, log_id: UUID, import_source: str) -> None:
        """Record the feed name detected from the message header."""
        log = await self._require(log_id)
        log.import_source = import_source
        await self.update(log)

    async def finalize(
        self,
        log_id: UUID,
        status: ImportStatus,
        total_books: int = 0,
        imported_books: int = 0,
        skipped_books: int = 0,
        error_count: int = 0,
    ) -> ImportLog:
        """
        Write final counts and terminal status, stamping completed_at.

        Args:
            log_id: Import log UUID
            status: Terminal status (completed or failed)
            total_books: Number of products parsed from the file
            imported_books: Number of newly inserted books
            skipped_books: Number of records matched to existing books
            error_count: Number of errors recorded

        Returns:
            Updated ImportLog instance
        """
        log = await self._require(log_id)
        log.status = status.value
        log.total_books = total_books
        log.imported_books = imported_books
        log.skipped_books = skipped_books
        log.error_count = error_count
        log.completed_at = utc_now()
        return await self.update(log)

    async def add_error(
        self,
        log_id: UUID,
        error_type: ImportErrorType,
        error_message: str,
        book_identifier: str | None = None,
        error_details: dict[str, Any] | None = None,
    ) -> ImportErrorRecord:
        """
        Append an error record to an import log.

        Args:
            log_id: Owning import log UUID
            error_type: Error classification
            error_message: Human-readable message
            book_identifier: ISBN or record reference of the failing book
            error_details: Structured context (title, author, traceback, paths)

        Returns:
            Created ImportErrorRecord instance
        """
        error = ImportErrorRecord(
            import_log_id=log_id,
            book_identifier=book_identifier,
            error_type=error_type.value,
            error_message=error_message,
            error_details=error_details,
        )
        self.session.add(error)
        await self.session.flush()
        return error

    async def get_errors(self, log_id: UUID) -> list[ImportErrorRecord]:
        """
        Get all errors recorded for an import log, oldest first.

        Args:
            log_id: Import log UUID

        Returns:
            List of ImportErrorRecord instances
        """
        result = await self.session.execute(
            select(ImportErrorRecord)
            .where(ImportErrorRecord.import_log_id == log_id)  # type: ignore[arg-type]
            .order_by(ImportErrorRecord.created_at)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())

    async def list_logs(self, limit: int = 100, offset: int = 0) -> list[ImportLog]:
        """List import logs ordered by creation time."""
        return await self.list_all(
            limit=limit, offset=offset, order_by=ImportLog.created_at
        )

    async def _require(self, log_id: UUID) -> ImportLog:
        log = await self.get_by_id(log_id)
        if log is None:
            raise ValueError(f"Import log with ID {log_id} not found")
        return log
