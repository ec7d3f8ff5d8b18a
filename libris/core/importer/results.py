"""Result types returned by the book import service."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass
class ImportResult:
    """Outcome of importing one ONIX file."""

    success: bool
    import_log_id: UUID
    filename: str
    total_books: int = 0
    imported_books: int = 0  # Newly inserted books only
    skipped_books: int = 0  # Records matched to an existing book
    error_count: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class BatchSummary:
    """Aggregate counts over a batch of file imports."""

    total_files: int
    successful_files: int
    failed_files: int
    total_books_imported: int
    total_books_skipped: int
    total_errors: int
    results: list[ImportResult]


def summarize_results(results: list[ImportResult]) -> BatchSummary:
    """
    Aggregate per-file results.

    Args:
        results: Per-file import results in processing order

    Returns:
        BatchSummary with totals across all files
    """
    successful = sum(1 for result in results if result.success)
    return BatchSummary(
        total_files=len(results),
        successful_files=successful,
        failed_files=len(results) - successful,
        total_books_imported=sum(result.imported_books for result in results),
        total_books_skipped=sum(result.skipped_books for result in results),
        total_errors=sum(result.error_count for result in results),
        results=results,
    )
