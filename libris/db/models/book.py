"""Book model for catalog entries created or refreshed by ONIX imports."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from libris.db.models.timestamps import utc_now


class Book(SQLModel, table=True):
    """Book model representing one catalog entry.

    Identity for import matching is the ``isbn`` column (ISBN-13 preferred
    over ISBN-10) and, for records without an ISBN, ``external_id`` holding
    the source system's record reference.
    """

    __tablename__ = "books"

    # Primary fields
    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
    )
    title: str = Field(nullable=False, index=True)
    subtitle: str | None = Field(default=None)
    author: str = Field(nullable=False, index=True)
    contributors: list[str] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )
    description: str | None = Field(default=None)

    # Identity
    isbn: str | None = Field(default=None, index=True)
    external_id: str | None = Field(default=None, index=True)

    # Publishing details
    publisher: str | None = Field(default=None)
    imprint: str | None = Field(default=None)
    publication_date: str | None = Field(default=None)  # Source format preserved
    price: str | None = Field(default=None)  # e.g. "19.99 USD"
    currency: str | None = Field(default=None)
    language: str | None = Field(default=None)
    page_count: int | None = Field(default=None)
    product_form: str | None = Field(default=None)
    cover_image_url: str | None = Field(default=None)

    # Classification
    genre: str | None = Field(default=None, index=True)
    subjects: list[str] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )
    keywords: list[str] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )

    # Provenance
    status: str = Field(default="active", nullable=False, index=True)
    created_by: str | None = Field(default=None)

    # Timestamps
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
