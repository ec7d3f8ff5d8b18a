"""Integration tests for the book import service against SQLite."""

from pathlib import Path
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from libris.core.importer.service import BookImportService
from libris.db.models.book import Book
from libris.db.models.import_error import ImportErrorRecord, ImportErrorType
from libris.db.models.import_log import ImportLog, ImportStatus
from libris.db.repositories.book_repository import BookRepository
from libris.utils.exceptions import ImportDirectoryError

pytestmark = pytest.mark.integration


@pytest.fixture
def fetch(session_factory: async_sessionmaker[AsyncSession]):
    """Read all rows of a model through a fresh session."""

    async def _fetch(model: type) -> list:
        async with session_factory() as reader:
            result = await reader.execute(select(model))
            return list(result.scalars().all())

    return _fetch


def build_service(
    session: AsyncSession, import_dirs: dict[str, Path], policy: str = "update"
) -> BookImportService:
    return BookImportService(
        session=session,
        incoming_dir=import_dirs["incoming"],
        processed_dir=import_dirs["processed"],
        failed_dir=import_dirs["failed"],
        existing_book_policy=policy,
    )


class TestImportFile:
    """Test suite for single-file imports."""

    async def test_successful_import(self, import_service, import_dirs, place_file, fetch):
        """Test a clean file imports every book and moves to processed."""
        path = place_file("example_APONIX.xml", fixture="reference_tags.xml")

        result = await import_service.import_file(path)

        assert result.success
        assert (result.total_books, result.imported_books) == (2, 2)
        assert (result.skipped_books, result.error_count) == (0, 0)
        assert result.errors == []

        assert not path.exists()
        assert (import_dirs["processed"] / "example_APONIX.xml").exists()

        [log] = await fetch(ImportLog)
        assert log.id == result.import_log_id
        assert log.status == ImportStatus.COMPLETED.value
        assert log.import_source == "APONIX"
        assert log.filename == "example_APONIX.xml"
        assert log.total_books == 2
        assert log.imported_books == 2
        assert log.started_at is not None
        assert log.completed_at is not None
        assert await fetch(ImportErrorRecord) == []

    async def test_book_fields_persisted(self, import_service, place_file, fetch):
        path = place_file("catalog.xml", fixture="short_tags.xml")

        await import_service.import_file(path)

        books = {book.isbn: book for book in await fetch(Book)}
        harbor = books["9780000000001"]
        assert harbor.title == "The Silent Harbor"
        assert harbor.author == "Alice Author"
        assert harbor.external_id == "com.example.0001"
        assert harbor.contributors == ["Jane Editor", "Alice Author", "Bob Second"]
        assert harbor.keywords == ["harbor", "mystery", "coastal towns"]
        assert harbor.page_count == 352
        assert harbor.status == "active"
        assert harbor.created_by == "import"

        waters = books["9780000000002"]
        assert waters.subjects is None
        assert waters.price == "12.00"

    async def test_header_sender_used_when_filename_unknown(
        self, import_service, place_file, fetch
    ):
        path = place_file("catalog.xml", fixture="reference_tags.xml")

        await import_service.import_file(path)

        [log] = await fetch(ImportLog)
        assert log.import_source == "Example Publishing Feed"

    async def test_reimport_counts_existing_books_as_skipped(
        self, session, import_dirs, place_file, fetch
    ):
        """Test a second import of the same records inserts nothing."""
        service = build_service(session, import_dirs)
        await service.import_file(place_file("first.xml", fixture="reference_tags.xml"))

        result = await service.import_file(place_file("second.xml", fixture="reference_tags.xml"))

        assert result.success
        assert result.imported_books == 0
        assert result.skipped_books == 2
        assert len(await fetch(Book)) == 2

    async def test_update_policy_refreshes_existing_book(
        self, session, import_dirs, place_file, onix_message, onix_product, fetch
    ):
        service = build_service(session, import_dirs, policy="update")
        await service.import_file(
            place_file("a.xml", onix_message(onix_product(isbn13="9781", title="Old")))
        )

        await service.import_file(
            place_file("b.xml", onix_message(onix_product(isbn13="9781", title="New")))
        )

        [book] = await fetch(Book)
        assert book.title == "New"
        assert book.updated_at >= book.created_at

    async def test_skip_policy_leaves_existing_book(
        self, session, import_dirs, place_file, onix_message, onix_product, fetch
    ):
        service = build_service(session, import_dirs, policy="skip")
        await service.import_file(
            place_file("a.xml", onix_message(onix_product(isbn13="9781", title="Old")))
        )

        result = await service.import_file(
            place_file("b.xml", onix_message(onix_product(isbn13="9781", title="New")))
        )

        assert result.skipped_books == 1
        [book] = await fetch(Book)
        assert book.title == "Old"

    async def test_isbn10_and_record_reference_identity(
        self, import_service, place_file, onix_message, onix_product, fetch
    ):
        await import_service.import_file(
            place_file(
                "a.xml",
                onix_message(
                    onix_product(isbn10="0000000009", title="Ten"),
                    onix_product(record_reference="REF-1", title="Ref"),
                ),
            )
        )

        result = await import_service.import_file(
            place_file(
                "b.xml",
                onix_message(
                    onix_product(isbn10="0000000009", title="Ten again"),
                    onix_product(record_reference="REF-1", title="Ref again"),
                ),
            )
        )

        assert (result.imported_books, result.skipped_books) == (0, 2)
        assert len(await fetch(Book)) == 2

    async def test_identityless_records_always_inserted(
        self, import_service, place_file, onix_message, onix_product, fetch
    ):
        """Test records without identifiers never match an existing book."""
        content = onix_message(onix_product(title="Nameless"))
        await import_service.import_file(place_file("a.xml", content))

        result = await import_service.import_file(place_file("b.xml", content))

        assert result.imported_books == 1
        books = await fetch(Book)
        assert len(books) == 2
        assert all(book.isbn is None and book.external_id is None for book in books)

    async def test_missing_title_and_author_defaulted(
        self, import_service, place_file, onix_message, onix_product, fetch
    ):
        await import_service.import_file(
            place_file("a.xml", onix_message(onix_product(isbn13="9783")))
        )

        [book] = await fetch(Book)
        assert book.title == "Untitled"
        assert book.author == "Unknown"

    async def test_malformed_xml_fails_file(self, import_service, import_dirs, place_file, fetch):
        """Test a parse failure records one parse error and moves the file to failed."""
        path = place_file("broken.xml", "<ONIXMessage><Product>")

        result = await import_service.import_file(path)

        assert not result.success
        assert result.error_count == 1
        assert result.errors[0].startswith("Invalid XML:")
        assert (import_dirs["failed"] / "broken.xml").exists()
        assert not path.exists()

        [log] = await fetch(ImportLog)
        assert log.status == ImportStatus.FAILED.value
        assert log.total_books == 0
        assert log.error_count == 1

        [error] = await fetch(ImportErrorRecord)
        assert error.import_log_id == log.id
        assert error.error_type == ImportErrorType.PARSE_ERROR.value
        assert error.book_identifier is None
        assert error.error_details["filename"] == "broken.xml"

    @pytest.mark.parametrize(
        "content,message",
        [
            ("<Catalog/>", "Invalid ONIX format: root element not found"),
            ("<ONIXMessage><Header/></ONIXMessage>", "No products found in ONIX file"),
        ],
    )
    async def test_structural_errors_fail_file(
        self, import_service, place_file, fetch, content, message
    ):
        result = await import_service.import_file(place_file("bad.xml", content))

        assert not result.success
        assert result.errors == [message]
        [error] = await fetch(ImportErrorRecord)
        assert error.error_message == message

    async def test_single_record_failure_isolated(
        self, import_service, import_dirs, place_file, onix_message, onix_product,
        fetch, monkeypatch,
    ):
        """Test a failing record is rolled back and the rest of the file imports."""
        original = BookRepository.create_from_parsed

        async def flaky_create(self, parsed, created_by):
            if parsed.title == "Bad":
                raise RuntimeError("constraint violated")
            return await original(self, parsed, created_by)

        monkeypatch.setattr(BookRepository, "create_from_parsed", flaky_create)
        path = place_file(
            "mixed.xml",
            onix_message(
                onix_product(isbn13="9781", title="Good", author="A"),
                onix_product(isbn13="9782", title="Bad", author="B"),
                onix_product(isbn13="9783", title="Also Good"),
            ),
        )

        result = await import_service.import_file(path)

        assert result.success
        assert result.total_books == 3
        assert result.imported_books == 2
        assert result.error_count == 1
        assert result.imported_books + result.skipped_books + result.error_count == 3
        assert result.errors == ["constraint violated"]
        assert (import_dirs["processed"] / "mixed.xml").exists()

        assert {book.title for book in await fetch(Book)} == {"Good", "Also Good"}
        [error] = await fetch(ImportErrorRecord)
        assert error.error_type == ImportErrorType.DATABASE_ERROR.value
        assert error.book_identifier == "9782"
        assert error.error_details["title"] == "Bad"
        assert error.error_details["author"] == "B"
        assert "RuntimeError" in error.error_details["traceback"]

        [log] = await fetch(ImportLog)
        assert log.status == ImportStatus.COMPLETED.value
        assert log.error_count == 1

    async def test_all_records_failing_fails_file(
        self, import_service, import_dirs, place_file, onix_message, onix_product,
        fetch, monkeypatch,
    ):
        async def failing_create(self, parsed, created_by):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(BookRepository, "create_from_parsed", failing_create)
        path = place_file(
            "doomed.xml",
            onix_message(onix_product(isbn13="9781"), onix_product(isbn13="9782")),
        )

        result = await import_service.import_file(path)

        assert not result.success
        assert result.error_count == 2
        assert (import_dirs["failed"] / "doomed.xml").exists()
        [log] = await fetch(ImportLog)
        assert log.status == ImportStatus.FAILED.value
        assert len(await fetch(ImportErrorRecord)) == 2

    async def test_unexpected_failure_recorded_as_system_error(
        self, import_service, import_dirs, fetch
    ):
        """Test an unreadable file is logged as a system error."""
        path = import_dirs["incoming"] / "unreadable.xml"
        path.mkdir()

        result = await import_service.import_file(path)

        assert not result.success
        assert result.error_count == 1
        assert (import_dirs["failed"] / "unreadable.xml").is_dir()

        [log] = await fetch(ImportLog)
        assert log.status == ImportStatus.FAILED.value
        [error] = await fetch(ImportErrorRecord)
        assert error.error_type == ImportErrorType.SYSTEM_ERROR.value
        assert error.error_details["filename"] == "unreadable.xml"

    async def test_declared_encoding_imported(
        self, import_service, import_dirs, onix_message, onix_product, fetch
    ):
        """Test a Latin-1 file with a matching XML declaration imports cleanly."""
        document = onix_message(onix_product(isbn13="9781111111111", title="Les Misérables"))
        document = document.replace('encoding="UTF-8"', 'encoding="ISO-8859-1"')
        path = import_dirs["incoming"] / "latin1.xml"
        path.write_bytes(document.encode("latin-1"))

        result = await import_service.import_file(path)

        assert result.success
        assert result.imported_books == 1
        [book] = await fetch(Book)
        assert book.title == "Les Misérables"
        assert await fetch(ImportErrorRecord) == []

    async def test_move_failure_keeps_completed_status(
        self, import_service, import_dirs, place_file, onix_message, onix_product, fetch
    ):
        """Test a file that cannot be moved still reports its completed import."""
        import_dirs["processed"].rmdir()
        import_dirs["processed"].write_text("not a directory")
        path = place_file("stuck.xml", onix_message(onix_product(isbn13="9781111111111")))

        result = await import_service.import_file(path)

        assert result.success
        assert result.imported_books == 1
        assert path.exists()
        [log] = await fetch(ImportLog)
        assert log.status == ImportStatus.COMPLETED.value
        assert log.completed_at is not None
        assert len(await fetch(Book)) == 1

    async def test_move_failure_after_parse_error(
        self, import_service, import_dirs, place_file, fetch
    ):
        """Test a malformed file that cannot be moved is still logged as failed."""
        import_dirs["failed"].rmdir()
        import_dirs["failed"].write_text("not a directory")
        path = place_file("broken.xml", "<ONIXMessage><Product>")

        result = await import_service.import_file(path)

        assert not result.success
        assert result.error_count == 1
        assert path.exists()
        [log] = await fetch(ImportLog)
        assert log.status == ImportStatus.FAILED.value
        [error] = await fetch(ImportErrorRecord)
        assert error.error_type == ImportErrorType.PARSE_ERROR.value


class TestProcessIncomingFiles:
    """Test suite for batch processing of the incoming directory."""

    async def test_only_xml_files_processed(
        self, import_service, import_dirs, place_file, onix_message, onix_product
    ):
        place_file("b.XML", onix_message(onix_product(isbn13="9782")))
        place_file("a.xml", onix_message(onix_product(isbn13="9781")))
        place_file("notes.txt", "not xml")

        results = await import_service.process_incoming_files()

        assert [result.filename for result in results] == ["a.xml", "b.XML"]
        assert (import_dirs["incoming"] / "notes.txt").exists()

    async def test_failing_file_does_not_stop_batch(
        self, import_service, import_dirs, place_file, onix_message, onix_product
    ):
        place_file("1_broken.xml", "<ONIXMessage>")
        place_file("2_good.xml", onix_message(onix_product(isbn13="9781")))

        results = await import_service.process_incoming_files()

        assert [result.success for result in results] == [False, True]
        assert list(import_dirs["incoming"].iterdir()) == []

    async def test_empty_directory(self, import_service):
        assert await import_service.process_incoming_files() == []

    async def test_missing_directory_raises(self, session, tmp_path):
        service = BookImportService(
            session=session,
            incoming_dir=tmp_path / "nowhere",
            processed_dir=tmp_path / "processed",
            failed_dir=tmp_path / "failed",
        )

        with pytest.raises(ImportDirectoryError):
            await service.process_incoming_files()


class TestImportLogQueries:
    """Test suite for reading back the audit trail."""

    async def test_get_import_log_with_errors(self, import_service, place_file):
        result = await import_service.import_file(place_file("broken.xml", "<nope"))

        found = await import_service.get_import_log(result.import_log_id)

        assert found is not None
        log, errors = found
        assert log.filename == "broken.xml"
        assert [error.error_type for error in errors] == ["parse_error"]

    async def test_get_import_log_missing(self, import_service):
        assert await import_service.get_import_log(uuid4()) is None

    async def test_list_import_logs(
        self, import_service, place_file, onix_message, onix_product
    ):
        await import_service.import_file(
            place_file("one.xml", onix_message(onix_product(isbn13="9781")))
        )
        await import_service.import_file(
            place_file("two.xml", onix_message(onix_product(isbn13="9782")))
        )

        logs = await import_service.list_import_logs()

        assert [log.filename for log in logs] == ["one.xml", "two.xml"]
        assert len(await import_service.list_import_logs(limit=1)) == 1
