"""ImportLog model for the per-file audit trail of ONIX imports."""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from libris.db.models.timestamps import utc_now


class ImportStatus(str, Enum):
    """Lifecycle status of an import log."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ImportLog(SQLModel, table=True):
    """One row per processed file.

    ``imported_books`` counts newly inserted books only; records that matched
    an existing book are counted in ``skipped_books`` whether the row was
    refreshed or left untouched.
    """

    __tablename__ = "import_logs"

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
    )
    filename: str = Field(nullable=False, index=True)
    filepath: str = Field(nullable=False)
    status: str = Field(
        default=ImportStatus.PENDING.value,
        nullable=False,
        index=True,
    )
    total_books: int = Field(default=0, nullable=False)
    imported_books: int = Field(default=0, nullable=False)
    skipped_books: int = Field(default=0, nullable=False)
    error_count: int = Field(default=0, nullable=False)
    import_source: str | None = Field(default=None)  # e.g. "APONIX"
    started_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    completed_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
        index=True,
    )
