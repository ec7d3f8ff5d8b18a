"""Free-text cleanup shared by ONIX field extractors."""

import html
import re

_TAG_PATTERN = re.compile(r"<[^>]*>")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def strip_html(value: str) -> str:
    """Remove HTML/XHTML tags, including escaped markup once unescaped."""
    return _TAG_PATTERN.sub("", html.unescape(value))


def normalize_whitespace(value: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return _WHITESPACE_PATTERN.sub(" ", value).strip()


def clean_text(value: str | None) -> str | None:
    """
    Convert marked-up text to plain text.

    Args:
        value: Raw text, possibly containing HTML and entity references

    Returns:
        Plain text, or None when nothing remains
    """
    if value is None:
        return None
    cleaned = normalize_whitespace(strip_html(value))
    return cleaned if cleaned != "" else None
