"""Database repositories for Libris."""

from libris.db.repositories.base_repository import BaseRepository
from libris.db.repositories.book_repository import BookRepository
from libris.db.repositories.import_log_repository import ImportLogRepository

__all__ = [
    "BaseRepository",
    "BookRepository",
    "ImportLogRepository",
]
