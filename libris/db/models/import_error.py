"""ImportErrorRecord model: append-only error records attached to an import log."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from libris.db.models.timestamps import utc_now


class ImportErrorType(str, Enum):
    """Classification of import failures."""

    PARSE_ERROR = "parse_error"
    VALIDATION_ERROR = "validation_error"  # Reserved, not raised by the importer yet
    DATABASE_ERROR = "database_error"
    SYSTEM_ERROR = "system_error"


class ImportErrorRecord(SQLModel, table=True):
    """Error raised while importing a file or one of its books."""

    __tablename__ = "import_errors"

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
    )
    import_log_id: UUID = Field(
        foreign_key="import_logs.id",
        nullable=False,
        index=True,
        ondelete="CASCADE",
    )
    book_identifier: str | None = Field(default=None, index=True)  # ISBN or record reference
    error_type: str = Field(nullable=False, index=True)
    error_message: str = Field(nullable=False)
    error_details: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
