"""ONIX 3.0 parsing: tag normalization, field extraction and file parsing."""

from libris.core.onix.parser import detect_onix_source, parse_onix_file, parse_product
from libris.core.onix.records import OnixParseResult, ParsedBook
from libris.core.onix.tags import normalize_tags

__all__ = [
    "OnixParseResult",
    "ParsedBook",
    "detect_onix_source",
    "normalize_tags",
    "parse_onix_file",
    "parse_product",
]
