"""Database models for Libris."""

from libris.db.models.book import Book
from libris.db.models.import_error import ImportErrorRecord, ImportErrorType
from libris.db.models.import_log import ImportLog, ImportStatus

__all__ = [
    "Book",
    "ImportLog",
    "ImportStatus",
    "ImportErrorRecord",
    "ImportErrorType",
]
