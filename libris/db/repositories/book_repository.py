"""Book repository for catalog lookups and import upserts."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libris.core.onix.records import ParsedBook
from libris.db.models.book import Book
from libris.db.models.timestamps import utc_now
from libris.db.repositories.base_repository import BaseRepository


class BookRepository(BaseRepository[Book]):
    """Repository for Book model operations."""

    def __init__(self, session: AsyncSession):
        """Initialize book repository."""
        super().__init__(Book, session)

    async def find_by_identity(
        self,
        isbn13: str | None = None,
        isbn10: str | None = None,
        record_reference: str | None = None,
    ) -> Book | None:
        """
        Find an existing book by the highest-priority identifier available.

        Only the first present identifier is consulted (ISBN-13, then ISBN-10,
        then record reference); lower-priority identifiers are not tried when
        a higher one is present but unmatched.

        Args:
            isbn13: ISBN-13 value
            isbn10: ISBN-10 value
            record_reference: Source system record reference

        Returns:
            Book instance or None (always None when no identifier is given)
        """
        if isbn13 is not None:
            condition = Book.isbn == isbn13
        elif isbn10 is not None:
            condition = Book.isbn == isbn10
        elif record_reference is not None:
            condition = Book.external_id == record_reference
        else:
            return None

        result = await self.session.execute(
            select(Book).where(condition).limit(1)  # type: ignore[arg-type]
        )
        return result.scalars().first()

    async def create_from_parsed(self, parsed: ParsedBook, created_by: str) -> Book:
        """
        Insert a new book built from a parsed ONIX record.

        Args:
            parsed: Parsed ONIX record
            created_by: Provenance tag

        Returns:
            Created Book instance
        """
        book = Book(**book_fields(parsed), created_by=created_by)
        return await self.create(book)

    async def update_from_parsed(self, book: Book, parsed: ParsedBook) -> Book:
        """
        Overwrite every imported field of an existing book.

        Args:
            book: Existing Book instance
            parsed: Parsed ONIX record

        Returns:
            Updated Book instance
        """
        for field_name, value in book_fields(parsed).items():
            setattr(book, field_name, value)
        book.updated_at = utc_now()
        return await self.update(book)


def book_fields(parsed: ParsedBook) -> dict[str, object]:
    """Map a parsed ONIX record onto Book column values."""
    return {
        "title": parsed.title if parsed.title is not None else "Untitled",
        "subtitle": parsed.subtitle,
        "author": parsed.author if parsed.author is not None else "Unknown",
        "contributors": parsed.contributors or None,
        "description": parsed.description,
        "isbn": parsed.isbn13 if parsed.isbn13 is not None else parsed.isbn10,
        "external_id": parsed.record_reference,
        "publisher": parsed.publisher,
        "imprint": parsed.imprint,
        "publication_date": parsed.publication_date,
        "price": parsed.price,
        "currency": parsed.currency,
        "language": parsed.language,
        "page_count": parsed.page_count,
        "product_form": parsed.product_form,
        "cover_image_url": parsed.cover_image_url,
        "genre": parsed.genre,
        "subjects": parsed.subjects or None,
        "keywords": parsed.keywords or None,
        "status": "active",
    }
