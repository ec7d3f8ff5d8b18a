"""Pydantic schemas for import API endpoints."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ImportResultItem(BaseModel):
    """Outcome of importing one file."""

    model_config = ConfigDict(from_attributes=True)

    success: bool
    import_log_id: UUID
    filename: str
    total_books: int
    imported_books: int
    skipped_books: int
    error_count: int
    errors: list[str]


class BatchSummaryResponse(BaseModel):
    """Response schema for the run-imports endpoint."""

    total_files: int
    successful_files: int
    failed_files: int
    total_books_imported: int
    total_books_skipped: int
    total_errors: int
    results: list[ImportResultItem]

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "examples": [
                {
                    "total_files": 1,
                    "successful_files": 1,
                    "failed_files": 0,
                    "total_books_imported": 2,
                    "total_books_skipped": 0,
                    "total_errors": 0,
                    "results": [
                        {
                            "success": True,
                            "import_log_id": "123e4567-e89b-12d3-a456-426614174000",
                            "filename": "example_APONIX.xml",
                            "total_books": 2,
                            "imported_books": 2,
                            "skipped_books": 0,
                            "error_count": 0,
                            "errors": [],
                        }
                    ],
                }
            ]
        },
    )


class ImportLogItem(BaseModel):
    """Import log summary for list responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    filename: str
    status: str
    total_books: int
    imported_books: int
    skipped_books: int
    error_count: int
    import_source: str | None
    started_at: datetime | None
    completed_at: datetime | None
    created_at: datetime


class ImportErrorItem(BaseModel):
    """Error recorded against an import log."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    book_identifier: str | None
    error_type: str
    error_message: str
    error_details: dict[str, Any] | None
    created_at: datetime


class ImportLogDetail(ImportLogItem):
    """Import log with its file path and recorded errors."""

    filepath: str
    errors: list[ImportErrorItem]
