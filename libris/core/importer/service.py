"""Book import service: ONIX file orchestration and batch processing."""

import shutil
import traceback
from enum import Enum
from pathlib import Path
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from libris.config import ExistingBookPolicy, settings
from libris.core.importer.results import ImportResult
from libris.core.onix.parser import UNKNOWN_SOURCE, detect_onix_source, parse_onix_file
from libris.core.onix.records import ParsedBook
from libris.db.models.import_error import ImportErrorRecord, ImportErrorType
from libris.db.models.import_log import ImportLog, ImportStatus
from libris.db.repositories.book_repository import BookRepository
from libris.db.repositories.import_log_repository import ImportLogRepository
from libris.utils.exceptions import ImportDirectoryError

logger = structlog.get_logger(__name__)


class BookOutcome(str, Enum):
    """What happened to one parsed record."""

    IMPORTED = "imported"
    SKIPPED = "skipped"
    FAILED = "failed"


class BookImportService:
    """
    Import ONIX files into the book catalog with a per-file audit trail.

    For each file the service:
    1. Opens an ImportLog in the processing state
    2. Parses the file (a file-level parse failure ends the run)
    3. Looks up each record by identity and inserts or matches it
    4. Finalizes the log with counts and a terminal status
    5. Moves the file to the processed or failed directory

    Every record is committed on its own, so a failing record is rolled back
    and logged without affecting the rest of the file. Files and records are
    processed strictly one at a time.
    """

    def __init__(
        self,
        session: AsyncSession,
        incoming_dir: Path | None = None,
        processed_dir: Path | None = None,
        failed_dir: Path | None = None,
        existing_book_policy: ExistingBookPolicy | None = None,
        created_by: str | None = None,
    ) -> None:
        """
        Initialize import service with database session.

        Args:
            session: Async database session for persistence
            incoming_dir: Directory scanned for pending files (defaults to settings)
            processed_dir: Destination for successful files (defaults to settings)
            failed_dir: Destination for failed files (defaults to settings)
            existing_book_policy: "update" or "skip" for matched records (defaults to settings)
            created_by: Provenance tag for inserted books (defaults to settings)
        """
        self.session = session
        self.incoming_dir = incoming_dir or settings.incoming_dir
        self.processed_dir = processed_dir or settings.processed_dir
        self.failed_dir = failed_dir or settings.failed_dir
        self.existing_book_policy = existing_book_policy or settings.existing_book_policy
        self.created_by = created_by or settings.created_by

        self.books = BookRepository(session)
        self.logs = ImportLogRepository(session)

    async def process_incoming_files(self) -> list[ImportResult]:
        """
        Import every XML file in the incoming directory, one at a time.

        Files are processed in name order. A failing file never stops the
        batch; it is reported through its own result.

        Returns:
            Per-file results in processing order

        Raises:
            ImportDirectoryError: If the incoming directory cannot be listed
        """
        try:
            xml_files = sorted(
                path
                for path in self.incoming_dir.iterdir()
                if path.is_file() and path.suffix.lower() == ".xml"
            )
        except OSError as e:
            logger.error(
                "incoming_directory_unreadable",
                incoming_dir=str(self.incoming_dir),
                error=str(e),
            )
            raise ImportDirectoryError(
                f"Cannot read incoming directory {self.incoming_dir}: {e}"
            ) from e

        logger.info(
            "batch_started",
            incoming_dir=str(self.incoming_dir),
            file_count=len(xml_files),
        )

        results: list[ImportResult] = []
        for filepath in xml_files:
            result = await self.import_file(filepath)
            results.append(result)

        logger.info(
            "batch_completed",
            file_count=len(results),
            failed_files=sum(1 for result in results if not result.success),
        )
        return results

    async def import_file(self, filepath: Path) -> ImportResult:
        """
        Import books from a single ONIX file.

        Args:
            filepath: Path to the ONIX XML file

        Returns:
            ImportResult with the log id and per-outcome counts

        Raises:
            SQLAlchemyError: Only if the import log itself cannot be created or
                finalized; every other failure is recorded on the log
        """
        filename = filepath.name
        import_source = detect_onix_source(filename)

        log = await self.logs.create_log(
            filename=filename,
            filepath=str(filepath),
            import_source=import_source,
        )
        log_id = log.id
        await self.session.commit()

        with structlog.contextvars.bound_contextvars(
            import_log_id=str(log_id), filename=filename
        ):
            logger.info("import_started", filepath=str(filepath), import_source=import_source)
            try:
                return await self._run_import(filepath, log_id, import_source)
            except Exception as e:
                return await self._fail_unexpected(filepath, log_id, e)

    async def _run_import(
        self, filepath: Path, log_id: UUID, import_source: str
    ) -> ImportResult:
        parse_result = parse_onix_file(filepath)

        if parse_result.error is not None:
            return await self._fail_parse(filepath, log_id, parse_result.error)

        if import_source == UNKNOWN_SOURCE and parse_result.source is not None:
            await self.logs.set_import_source(log_id, parse_result.source)
            await self.session.commit()

        imported = 0
        skipped = 0
        errors: list[str] = []
        for book in parse_result.books:
            outcome, error_message = await self._import_book(book, log_id)
            if outcome is BookOutcome.IMPORTED:
                imported += 1
            elif outcome is BookOutcome.SKIPPED:
                skipped += 1
            else:
                errors.append(error_message or "Unknown error")

        total = len(parse_result.books)
        status = (
            ImportStatus.FAILED if len(errors) == total else ImportStatus.COMPLETED
        )
        await self.logs.finalize(
            log_id,
            status,
            total_books=total,
            imported_books=imported,
            skipped_books=skipped,
            error_count=len(errors),
        )
        await self.session.commit()

        target_dir = self.failed_dir if status is ImportStatus.FAILED else self.processed_dir
        try:
            self._move_file(filepath, target_dir)
        except OSError as e:
            logger.error(
                "import_file_move_failed",
                filepath=str(filepath),
                target_dir=str(target_dir),
                error=str(e),
            )

        logger.info(
            "import_completed",
            status=status.value,
            total_books=total,
            imported_books=imported,
            skipped_books=skipped,
            error_count=len(errors),
        )

        return ImportResult(
            success=status is ImportStatus.COMPLETED,
            import_log_id=log_id,
            filename=filepath.name,
            total_books=total,
            imported_books=imported,
            skipped_books=skipped,
            error_count=len(errors),
            errors=errors,
        )

    async def _import_book(
        self, book: ParsedBook, log_id: UUID
    ) -> tuple[BookOutcome, str | None]:
        """Insert or match one record as its own transaction."""
        try:
            existing = await self.books.find_by_identity(
                isbn13=book.isbn13,
                isbn10=book.isbn10,
                record_reference=book.record_reference,
            )
            if existing is None:
                await self.books.create_from_parsed(book, created_by=self.created_by)
                outcome = BookOutcome.IMPORTED
            else:
                if self.existing_book_policy == "update":
                    await self.books.update_from_parsed(existing, book)
                outcome = BookOutcome.SKIPPED
            await self.session.commit()
            return outcome, None

        except Exception as e:
            await self.session.rollback()
            error_message = str(e) or e.__class__.__name__

            logger.warning(
                "book_import_failed",
                book_identifier=book.identifier,
                title=book.title,
                error=error_message,
            )

            await self.logs.add_error(
                log_id,
                ImportErrorType.DATABASE_ERROR,
                error_message,
                book_identifier=book.identifier,
                error_details={
                    "title": book.title,
                    "author": book.author,
                    "traceback": traceback.format_exc(),
                },
            )
            await self.session.commit()
            return BookOutcome.FAILED, error_message

    async def _fail_parse(
        self, filepath: Path, log_id: UUID, error_message: str
    ) -> ImportResult:
        """Record a file-level parse error and move the file aside."""
        await self.logs.add_error(
            log_id,
            ImportErrorType.PARSE_ERROR,
            error_message,
            error_details={"filepath": str(filepath), "filename": filepath.name},
        )
        await self.logs.finalize(log_id, ImportStatus.FAILED, error_count=1)
        await self.session.commit()

        try:
            self._move_file(filepath, self.failed_dir)
        except OSError as e:
            logger.error(
                "import_file_move_failed",
                filepath=str(filepath),
                target_dir=str(self.failed_dir),
                error=str(e),
            )

        logger.warning("import_parse_failed", error=error_message)

        return ImportResult(
            success=False,
            import_log_id=log_id,
            filename=filepath.name,
            error_count=1,
            errors=[error_message],
        )

    async def _fail_unexpected(
        self, filepath: Path, log_id: UUID, error: Exception
    ) -> ImportResult:
        """Record an unexpected failure, finalize the log and move the file aside."""
        await self.session.rollback()
        error_message = str(error) or error.__class__.__name__

        logger.error(
            "import_failed",
            filepath=str(filepath),
            error=error_message,
            exc_info=True,
        )

        await self.logs.add_error(
            log_id,
            ImportErrorType.SYSTEM_ERROR,
            error_message,
            error_details={
                "filepath": str(filepath),
                "filename": filepath.name,
                "traceback": "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ),
            },
        )
        previous_errors = await self.logs.get_errors(log_id)
        await self.logs.finalize(
            log_id, ImportStatus.FAILED, error_count=len(previous_errors)
        )
        await self.session.commit()

        try:
            self._move_file(filepath, self.failed_dir)
        except OSError as e:
            logger.error(
                "import_file_move_failed",
                filepath=str(filepath),
                target_dir=str(self.failed_dir),
                error=str(e),
            )

        return ImportResult(
            success=False,
            import_log_id=log_id,
            filename=filepath.name,
            error_count=len(previous_errors),
            errors=[record.error_message for record in previous_errors],
        )

    @staticmethod
    def _move_file(filepath: Path, target_dir: Path) -> Path:
        """Move a processed file out of the incoming directory."""
        target_dir.mkdir(parents=True, exist_ok=True)
        target_path = target_dir / filepath.name
        shutil.move(str(filepath), str(target_path))
        logger.debug("import_file_moved", target_path=str(target_path))
        return target_path

    async def get_import_log(
        self, log_id: UUID
    ) -> tuple[ImportLog, list[ImportErrorRecord]] | None:
        """
        Get an import log together with its errors.

        Args:
            log_id: Import log UUID

        Returns:
            Tuple of (log, errors) or None if the log does not exist
        """
        log = await self.logs.get_by_id(log_id)
        if log is None:
            return None
        return log, await self.logs.get_errors(log_id)

    async def list_import_logs(self, limit: int = 100, offset: int = 0) -> list[ImportLog]:
        """List import logs ordered by creation time."""
        return await self.logs.list_logs(limit=limit, offset=offset)

