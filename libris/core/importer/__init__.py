"""Import orchestration for ONIX files."""

from libris.core.importer.results import BatchSummary, ImportResult, summarize_results
from libris.core.importer.service import BookImportService

__all__ = [
    "BatchSummary",
    "BookImportService",
    "ImportResult",
    "summarize_results",
]
